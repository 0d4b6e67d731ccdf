"""In-memory blob store.

Implements the same StoreBackend contract as FilesystemStoreBackend
without touching disk. Useful for tests of code that consumes a store, and
for running the shared backend test-suite against a second implementation.
"""

from __future__ import annotations

import threading

from digeststore.contracts.enums import CANONICAL_ALGORITHM, Algorithm
from digeststore.contracts.errors import InvalidInputError, NotFoundError, StoreCorruptedError
from digeststore.contracts.store import ID, WalkFunc
from digeststore.core.digest import compute_id, digest_matches, validate_id, validate_metadata_key

__all__ = ["InMemoryStoreBackend"]


class InMemoryStoreBackend:
    """Dict-backed blob store.

    Content integrity is still verified on get(), so tests can simulate
    corruption by editing ``_content`` directly.
    """

    def __init__(self, *, algorithm: Algorithm = CANONICAL_ALGORITHM) -> None:
        self.algorithm = Algorithm(algorithm)
        self._content: dict[ID, bytes] = {}
        self._metadata: dict[ID, dict[str, bytes]] = {}
        self._lock = threading.Lock()

    def set(self, data: bytes) -> ID:
        id = compute_id(data, self.algorithm)
        with self._lock:
            self._content.setdefault(id, bytes(data))
        return id

    def get(self, id: str) -> bytes:
        id = validate_id(id)
        try:
            data = self._content[id]
        except KeyError:
            raise NotFoundError(f"Content not found: {id}") from None
        if not digest_matches(data, id):
            raise StoreCorruptedError(f"Content integrity check failed: expected {id}", id=id)
        return data

    def delete(self, id: str) -> None:
        id = validate_id(id)
        with self._lock:
            self._content.pop(id, None)
            self._metadata.pop(id, None)

    def set_metadata(self, id: str, key: str, value: bytes) -> None:
        id = validate_id(id)
        key = validate_metadata_key(key)
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise InvalidInputError(f"Metadata value must be bytes, got {type(value).__name__}")
        with self._lock:
            if id not in self._content:
                raise NotFoundError(f"Cannot set metadata {key!r}: content not found: {id}")
            self._metadata.setdefault(id, {})[key] = bytes(value)

    def get_metadata(self, id: str, key: str) -> bytes:
        id = validate_id(id)
        key = validate_metadata_key(key)
        try:
            return self._metadata[id][key]
        except KeyError:
            raise NotFoundError(f"Metadata {key!r} not found for {id}") from None

    def walk(self, visit: WalkFunc) -> None:
        # Snapshot so visitors may delete while walking
        with self._lock:
            ids = list(self._content)
        for id in ids:
            visit(id)
