# src/digeststore/core/__init__.py
"""Core infrastructure: Digest/ID layer, Store backends, Verification, Configuration, Logging."""

from digeststore.contracts import StoreBackend, StoreCorruptedError
from digeststore.core.config import (
    DigestStoreSettings,
    LoggingSettings,
    StoreSettings,
    load_settings,
)
from digeststore.core.digest import (
    compute_id,
    content_path,
    metadata_path,
    parse_id,
    validate_id,
)
from digeststore.core.fs_store import FilesystemStoreBackend, open_store
from digeststore.core.logging import (
    configure_logging,
    get_logger,
)
from digeststore.core.memory_store import InMemoryStoreBackend
from digeststore.core.verify import VerifyResult, verify_store

__all__ = [
    "DigestStoreSettings",
    "FilesystemStoreBackend",
    "InMemoryStoreBackend",
    "LoggingSettings",
    "StoreBackend",
    "StoreCorruptedError",
    "StoreSettings",
    "VerifyResult",
    "compute_id",
    "configure_logging",
    "content_path",
    "get_logger",
    "load_settings",
    "metadata_path",
    "open_store",
    "parse_id",
    "validate_id",
    "verify_store",
]
