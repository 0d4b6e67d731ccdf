# src/digeststore/core/fs_store.py
"""
Filesystem-backed content-addressable blob store.

Uses content-addressable storage (hash-based) for:
- Automatic deduplication of identical content
- Integrity verification on every retrieval
- A per-ID key/value metadata sidecar

Structure:
    root/content/<algorithm>/<hexdigest>
    root/metadata/<algorithm>/<hexdigest>/<key>

The filesystem is the only source of truth; no index is kept in memory.
Writes are staged in a temp file next to the final path and renamed into
place, so a crashed or concurrent writer never leaves a partial file
visible.
"""

import hmac
import os
import shutil
import tempfile
import threading
from collections.abc import Iterator
from pathlib import Path

import structlog

from digeststore.contracts.enums import CANONICAL_ALGORITHM, Algorithm
from digeststore.contracts.errors import (
    InvalidInputError,
    InvalidRootError,
    MalformedIDError,
    NotFoundError,
    StoreCorruptedError,
)
from digeststore.contracts.store import ID, WalkFunc
from digeststore.core.config import StoreSettings
from digeststore.core.digest import (
    CONTENT_DIR_NAME,
    METADATA_DIR_NAME,
    STAGING_PREFIX,
    compute_id,
    content_path,
    hex_digest,
    metadata_dir,
    metadata_path,
    parse_id,
    validate_id,
)

__all__ = ["FilesystemStoreBackend", "open_store"]

logger = structlog.get_logger(__name__)

_DIR_MODE = 0o700


def _ensure_directory(path: Path) -> None:
    """Create path as a directory unless it already is one.

    Raises:
        InvalidRootError: If path (or an ancestor) exists as a non-directory
    """
    if path.exists() and not path.is_dir():
        raise InvalidRootError(path)
    try:
        path.mkdir(mode=_DIR_MODE, parents=True, exist_ok=True)
    except (FileExistsError, NotADirectoryError) as e:
        # Dangling symlink or a file somewhere above path
        raise InvalidRootError(path) from e


def _atomic_write(path: Path, data: bytes) -> None:
    """Write data to path via a staged temp file in the same directory.

    The temp file is fsynced before os.replace() and the parent directory
    after it, so the final path holds either nothing, the previous value,
    or all of data, also across a crash.

    Raises:
        StoreCorruptedError: If a non-directory blocks the parent path, or
            a directory occupies path itself
    """
    try:
        path.parent.mkdir(mode=_DIR_MODE, parents=True, exist_ok=True)
    except (FileExistsError, NotADirectoryError) as e:
        raise StoreCorruptedError(f"Cannot create directory {path.parent}: a non-directory occupies the path", path=path.parent) from e

    fd, tmp_name = tempfile.mkstemp(prefix=STAGING_PREFIX, dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except IsADirectoryError as e:
        tmp_path.unlink(missing_ok=True)
        raise StoreCorruptedError(f"Cannot write {path}: a directory occupies the path", path=path) from e
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    _fsync_directory(path.parent)


def _fsync_directory(path: Path) -> None:
    """Flush a directory entry so a rename into it survives a crash."""
    fd = os.open(path, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def _list_dir(path: Path) -> list[os.DirEntry[str]]:
    """Directory entries sorted by name; empty if path vanished."""
    try:
        with os.scandir(path) as it:
            return sorted(it, key=lambda entry: entry.name)
    except (FileNotFoundError, NotADirectoryError):
        return []


class FilesystemStoreBackend:
    """Filesystem-based blob store.

    Construction validates the root layout and is idempotent: opening an
    initialized root reuses its data.

    Attributes:
        root: Store root directory
        algorithm: Digest algorithm used by set(). IDs of any supported
            algorithm are accepted by the other operations.
    """

    def __init__(self, root: Path | str, *, algorithm: Algorithm = CANONICAL_ALGORITHM) -> None:
        """Open (creating if needed) a store rooted at root.

        Args:
            root: Root directory for the store
            algorithm: Digest algorithm for new content

        Raises:
            InvalidRootError: If root, root/content or root/metadata exists
                and is not a directory
        """
        self.root = Path(root)
        self.algorithm = Algorithm(algorithm)
        # Serializes metadata writes against delete within this process
        self._lock = threading.Lock()

        for path in (self.root, self.root / CONTENT_DIR_NAME, self.root / METADATA_DIR_NAME):
            _ensure_directory(path)

        logger.debug("Opened blob store", root=str(self.root), algorithm=self.algorithm.value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(root={str(self.root)!r}, algorithm={self.algorithm.value!r})"

    def set(self, data: bytes) -> ID:
        """Store content and return its ID.

        An existing regular file at the content path is trusted as already
        stored and left untouched; integrity is checked by get().

        Raises:
            InvalidInputError: If data is None or empty
            StoreCorruptedError: If a non-file object occupies the content path
        """
        id = compute_id(data, self.algorithm)
        path = self.root / content_path(id)

        if path.is_file():
            logger.debug("Content already stored", id=id)
            return id

        # A concurrent writer may have landed a regular file since the check above
        if path.is_symlink() or (path.exists() and not path.is_file()):
            logger.error("Foreign object occupies content path", id=id, path=str(path))
            raise StoreCorruptedError(f"Cannot store {id}: {path} exists and is not a regular file", id=id, path=path)

        _atomic_write(path, bytes(data))
        logger.debug("Stored content", id=id, size=len(data))
        return id

    def get(self, id: str) -> bytes:
        """Retrieve content by ID with integrity verification.

        Raises:
            MalformedIDError: If id is not a valid ID
            NotFoundError: If content not found
            StoreCorruptedError: If content doesn't hash to id
        """
        algorithm, expected = parse_id(id)
        path = self.root / content_path(id)

        try:
            data = path.read_bytes()
        except (FileNotFoundError, NotADirectoryError):
            raise NotFoundError(f"Content not found: {id}") from None
        except IsADirectoryError:
            logger.error("Foreign object occupies content path", id=id, path=str(path))
            raise StoreCorruptedError(f"Content for {id} is not a regular file: {path}", id=id, path=path) from None

        actual = hex_digest(data, algorithm)
        if not hmac.compare_digest(actual, expected):
            logger.error("Content integrity check failed", id=id, actual=actual, path=str(path))
            raise StoreCorruptedError(
                f"Content integrity check failed: expected {id}, got {algorithm.value}:{actual}",
                id=id,
                path=path,
            )

        return data

    def delete(self, id: str) -> None:
        """Delete content and its entire metadata subtree.

        Absent content or metadata is not an error.

        Raises:
            MalformedIDError: If id is not a valid ID
            StoreCorruptedError: If a directory occupies the content path or a
                non-directory occupies the metadata directory; nothing is
                removed in either case
        """
        id = validate_id(id)
        path = self.root / content_path(id)
        meta = self.root / metadata_dir(id)

        with self._lock:
            if meta.is_symlink() or (meta.exists() and not meta.is_dir()):
                logger.error("Foreign object occupies metadata directory", id=id, path=str(meta))
                raise StoreCorruptedError(f"Cannot delete {id}: {meta} is not a directory", id=id, path=meta)
            # Content first: once it is gone set_metadata() refuses this ID
            try:
                path.unlink(missing_ok=True)
            except IsADirectoryError:
                raise StoreCorruptedError(f"Cannot delete {id}: {path} is a directory", id=id, path=path) from None
            try:
                shutil.rmtree(meta)
            except (FileNotFoundError, NotADirectoryError):
                # No metadata tree, or an ancestor of it is not a directory
                pass

        logger.debug("Deleted content", id=id)

    def set_metadata(self, id: str, key: str, value: bytes) -> None:
        """Write value under key for stored content (last write wins).

        Raises:
            MalformedIDError: If id is not a valid ID
            InvalidInputError: If key is invalid or value is not bytes-like
            NotFoundError: If no content is stored for id
        """
        id = validate_id(id)
        path = self.root / metadata_path(id, key)
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise InvalidInputError(f"Metadata value must be bytes, got {type(value).__name__}")

        with self._lock:
            if not (self.root / content_path(id)).is_file():
                raise NotFoundError(f"Cannot set metadata {key!r}: content not found: {id}")
            _atomic_write(path, bytes(value))

        logger.debug("Stored metadata", id=id, key=key, size=len(value))

    def get_metadata(self, id: str, key: str) -> bytes:
        """Read the value last written under key.

        No integrity check: metadata carries no digest to verify against.

        Raises:
            MalformedIDError: If id is not a valid ID
            InvalidInputError: If key is invalid
            NotFoundError: If the ID is unknown or the key was never set
            StoreCorruptedError: If a directory occupies the metadata path
        """
        id = validate_id(id)
        path = self.root / metadata_path(id, key)
        try:
            return path.read_bytes()
        except (FileNotFoundError, NotADirectoryError):
            raise NotFoundError(f"Metadata {key!r} not found for {id}") from None
        except IsADirectoryError:
            logger.error("Foreign object occupies metadata path", id=id, key=key, path=str(path))
            raise StoreCorruptedError(f"Metadata {key!r} for {id} is not a regular file: {path}", id=id, path=path) from None

    def iter_ids(self) -> Iterator[ID]:
        """Yield every valid stored ID, skipping malformed entries.

        Unsupported algorithm directories, names that are not valid hex
        digests (including staging temp files) and non-file entries are
        logged at debug level and skipped.
        """
        for algorithm_entry in _list_dir(self.root / CONTENT_DIR_NAME):
            if not algorithm_entry.is_dir():
                logger.debug("Skipping non-directory in content root", name=algorithm_entry.name)
                continue
            try:
                algorithm = Algorithm(algorithm_entry.name)
            except ValueError:
                logger.debug("Skipping unsupported algorithm directory", name=algorithm_entry.name)
                continue

            for entry in _list_dir(Path(algorithm_entry.path)):
                try:
                    id = validate_id(f"{algorithm.value}:{entry.name}")
                except MalformedIDError as e:
                    logger.debug("Skipping invalid digest", name=entry.name, reason=e.reason)
                    continue
                if not entry.is_file():
                    logger.debug("Skipping non-file content entry", id=id)
                    continue
                yield id

    def walk(self, visit: WalkFunc) -> None:
        """Call visit for every valid stored ID.

        If visit raises, the walk stops and the exception propagates
        unchanged; remaining entries are not visited.
        """
        for id in self.iter_ids():
            visit(id)


def open_store(target: Path | str | StoreSettings) -> FilesystemStoreBackend:
    """Open a filesystem store from a root path or StoreSettings.

    Raises:
        InvalidRootError: If the root layout is blocked by non-directories
    """
    if isinstance(target, StoreSettings):
        return FilesystemStoreBackend(target.root, algorithm=target.algorithm)
    return FilesystemStoreBackend(target)
