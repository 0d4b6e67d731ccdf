# src/digeststore/core/config.py
"""
Configuration schema and loading for digeststore.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import os
import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from digeststore.contracts.enums import CANONICAL_ALGORITHM, Algorithm

__all__ = [
    "DigestStoreSettings",
    "LoggingSettings",
    "StoreSettings",
    "load_settings",
]

ENVVAR_PREFIX = "DIGESTSTORE"


class StoreSettings(BaseModel):
    """Store backend configuration."""

    model_config = {"frozen": True}

    root: Path = Field(
        default=Path(".digeststore"),
        description="Root directory holding the content/ and metadata/ trees",
    )
    algorithm: Algorithm = Field(
        default=CANONICAL_ALGORITHM,
        description="Digest algorithm used when storing new content",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", description="Root log level")
    json_output: bool = Field(default=False, description="Emit JSON log lines instead of console output")


class DigestStoreSettings(BaseModel):
    """Top-level digeststore configuration.

    Every section has defaults, so an empty settings file is valid.
    """

    model_config = {"frozen": True}

    store: StoreSettings = Field(default_factory=StoreSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded
    """

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default = match.group(2)  # None if no default specified
            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default is not None:
                return default
            # Left as-is; validation reports it if it matters
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lowercase_keys(value: Any) -> Any:
    # Dynaconf upper-cases keys at every nesting level
    if isinstance(value, dict):
        return {str(k).lower(): _lowercase_keys(v) for k, v in value.items()}
    return value


def load_settings(config_path: Path | None = None) -> DigestStoreSettings:
    """Load settings from a YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (DIGESTSTORE_*) - highest priority
    2. Config file (if given)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: DIGESTSTORE_STORE__ROOT for nested keys.

    Args:
        config_path: Path to YAML configuration file, or None for
            defaults plus environment only

    Returns:
        Validated DigestStoreSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix=ENVVAR_PREFIX,
        settings_files=[str(config_path)] if config_path is not None else [],
        environments=False,  # No [default]/[production] sections
        load_dotenv=False,  # Don't auto-load .env
        merge_enabled=True,  # Deep merge nested dicts
    )

    # Filter out internal Dynaconf settings
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _lowercase_keys(raw_config)

    raw_config = _expand_env_vars(raw_config)

    return DigestStoreSettings(**raw_config)
