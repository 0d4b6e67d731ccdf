"""Shared contracts for cross-boundary types.

This package is a LEAF MODULE with no outbound dependencies to core.

Import patterns:
    from digeststore.contracts import ID, StoreBackend, NotFoundError
"""

from digeststore.contracts.enums import CANONICAL_ALGORITHM, Algorithm
from digeststore.contracts.errors import (
    InvalidInputError,
    InvalidRootError,
    MalformedIDError,
    NotFoundError,
    StoreCorruptedError,
    StoreError,
)
from digeststore.contracts.store import ID, StoreBackend, WalkFunc

__all__ = [
    "CANONICAL_ALGORITHM",
    "ID",
    "Algorithm",
    "InvalidInputError",
    "InvalidRootError",
    "MalformedIDError",
    "NotFoundError",
    "StoreBackend",
    "StoreCorruptedError",
    "StoreError",
    "WalkFunc",
]
