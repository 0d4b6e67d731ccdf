"""Digest computation, ID validation and on-disk path layout.

IDs have the form "<algorithm>:<hexdigest>". Validation here is purely
syntactic; nothing in this module touches the filesystem.

Layout (relative to the store root):
    content/<algorithm>/<hexdigest>
    metadata/<algorithm>/<hexdigest>/<key>
"""

from __future__ import annotations

import hashlib
import hmac
import re
from pathlib import Path

from digeststore.contracts.enums import CANONICAL_ALGORITHM, Algorithm
from digeststore.contracts.errors import InvalidInputError, MalformedIDError
from digeststore.contracts.store import ID

__all__ = [
    "CONTENT_DIR_NAME",
    "METADATA_DIR_NAME",
    "STAGING_PREFIX",
    "compute_id",
    "content_path",
    "digest_matches",
    "hex_digest",
    "hex_length",
    "metadata_dir",
    "metadata_path",
    "parse_id",
    "validate_id",
    "validate_metadata_key",
]

CONTENT_DIR_NAME = "content"
METADATA_DIR_NAME = "metadata"

# Temp files staged next to their final path start with this prefix.
# It can never form a valid hex digest, so walk() skips leftovers.
STAGING_PREFIX = ".tmp-"

_SEPARATOR = ":"

# Hex digest length per algorithm (digest_size * 2)
_HEX_LENGTHS: dict[Algorithm, int] = {alg: hashlib.new(alg.value).digest_size * 2 for alg in Algorithm}

# Compiled once; used with fullmatch() so a trailing newline cannot slip through
_HEX_PATTERNS: dict[Algorithm, re.Pattern[str]] = {
    alg: re.compile(rf"[a-f0-9]{{{length}}}") for alg, length in _HEX_LENGTHS.items()
}

_FORBIDDEN_KEY_CHARS = frozenset("/\\\x00")


def hex_length(algorithm: Algorithm) -> int:
    """Number of hex characters in a digest produced by algorithm."""
    return _HEX_LENGTHS[algorithm]


def hex_digest(data: bytes, algorithm: Algorithm) -> str:
    """Lowercase hex digest of data under algorithm."""
    return hashlib.new(algorithm.value, data).hexdigest()


def compute_id(data: bytes | None, algorithm: Algorithm = CANONICAL_ALGORITHM) -> ID:
    """Compute the ID of a payload.

    Args:
        data: Payload bytes. Must be non-empty.
        algorithm: Digest algorithm to use.

    Returns:
        ID of the form "<algorithm>:<hexdigest>"

    Raises:
        InvalidInputError: If data is None or empty
    """
    if data is None or len(data) == 0:
        raise InvalidInputError("Refusing to compute an ID for empty content")
    return ID(f"{algorithm.value}{_SEPARATOR}{hex_digest(bytes(data), algorithm)}")


def parse_id(raw: object) -> tuple[Algorithm, str]:
    """Split a raw ID into its algorithm and hex digest.

    Raises:
        MalformedIDError: If raw is not a structurally valid ID
    """
    if not isinstance(raw, str):
        raise MalformedIDError(raw, f"expected str, got {type(raw).__name__}")

    if raw.count(_SEPARATOR) != 1:
        raise MalformedIDError(raw, "expected exactly one ':' separator")

    algorithm_name, hex_part = raw.split(_SEPARATOR)
    try:
        algorithm = Algorithm(algorithm_name)
    except ValueError:
        raise MalformedIDError(raw, f"unsupported algorithm {algorithm_name!r}") from None

    if not _HEX_PATTERNS[algorithm].fullmatch(hex_part):
        raise MalformedIDError(raw, f"{algorithm.value} digest must be {_HEX_LENGTHS[algorithm]} lowercase hex characters")

    return algorithm, hex_part


def validate_id(raw: object) -> ID:
    """Return raw as an ID if it is structurally valid.

    Raises:
        MalformedIDError: If raw is not a structurally valid ID
    """
    parse_id(raw)
    return ID(raw)  # type: ignore[arg-type]  # parse_id guarantees str


def digest_matches(data: bytes, id: str) -> bool:
    """Whether data hashes to id (timing-safe comparison)."""
    algorithm, expected = parse_id(id)
    return hmac.compare_digest(hex_digest(data, algorithm), expected)


def validate_metadata_key(key: object) -> str:
    """Ensure key is usable as a single path component.

    Raises:
        InvalidInputError: If key is empty, a relative path marker, contains
            a path separator or NUL, or collides with staging files
    """
    if not isinstance(key, str) or not key:
        raise InvalidInputError(f"Metadata key must be a non-empty string, got {key!r}")
    if key in (".", "..") or any(ch in _FORBIDDEN_KEY_CHARS for ch in key):
        raise InvalidInputError(f"Metadata key must be a single path component, got {key!r}")
    if key.startswith(STAGING_PREFIX):
        raise InvalidInputError(f"Metadata key must not start with {STAGING_PREFIX!r}, got {key!r}")
    return key


def content_path(id: str) -> Path:
    """Relative path of the content entry for id."""
    algorithm, hex_part = parse_id(id)
    return Path(CONTENT_DIR_NAME, algorithm.value, hex_part)


def metadata_dir(id: str) -> Path:
    """Relative path of the directory holding all metadata keys for id."""
    algorithm, hex_part = parse_id(id)
    return Path(METADATA_DIR_NAME, algorithm.value, hex_part)


def metadata_path(id: str, key: str) -> Path:
    """Relative path of the metadata entry for (id, key)."""
    return metadata_dir(id) / validate_metadata_key(key)
