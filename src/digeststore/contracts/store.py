"""StoreBackend protocol for content-addressable blob storage.

This protocol defines the behavioural contract shared by every backend:
- core/fs_store.py (FilesystemStoreBackend, the persistent implementation)
- core/memory_store.py (InMemoryStoreBackend, used by tests and tooling)

Consolidated here to avoid circular imports and provide single source of truth.
"""

from collections.abc import Callable
from typing import NewType, Protocol, runtime_checkable

# "<algorithm>:<hexdigest>", e.g. "sha256:c3ab8ff1..."
ID = NewType("ID", str)

# Visitor passed to walk(). Raising stops the walk and propagates.
WalkFunc = Callable[[ID], None]


@runtime_checkable
class StoreBackend(Protocol):
    """Protocol for blob store backends.

    All implementations address content by the digest of its own bytes and
    keep a per-ID key/value metadata sidecar.
    """

    def set(self, data: bytes) -> ID:
        """Store content and return its ID.

        Args:
            data: Raw bytes to store (must be non-empty)

        Returns:
            ID of the content

        Raises:
            InvalidInputError: If data is None or empty
            StoreCorruptedError: If a non-file object occupies the content path
        """
        ...

    def get(self, id: str) -> bytes:
        """Retrieve content by ID with integrity verification.

        Raises:
            MalformedIDError: If id is not a valid ID
            NotFoundError: If no content is stored for id
            StoreCorruptedError: If stored bytes don't hash to id
        """
        ...

    def delete(self, id: str) -> None:
        """Delete content and all of its metadata. Idempotent.

        Raises:
            MalformedIDError: If id is not a valid ID
        """
        ...

    def set_metadata(self, id: str, key: str, value: bytes) -> None:
        """Attach value under key to stored content (last write wins).

        Raises:
            MalformedIDError: If id is not a valid ID
            InvalidInputError: If key is not a single safe path component
            NotFoundError: If no content is stored for id
        """
        ...

    def get_metadata(self, id: str, key: str) -> bytes:
        """Read the value last written under key.

        Raises:
            MalformedIDError: If id is not a valid ID
            InvalidInputError: If key is not a single safe path component
            NotFoundError: If the ID is unknown or the key was never set
        """
        ...

    def walk(self, visit: WalkFunc) -> None:
        """Call visit once for every valid stored ID, in no particular order.

        Malformed entries are skipped. If visit raises, the walk stops and
        the exception propagates unchanged.
        """
        ...
