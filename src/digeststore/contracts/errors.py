"""Store error contracts.

Every failure the store reports is a subclass of StoreError, so callers can
branch on the exact kind (NotFoundError vs StoreCorruptedError) or catch
the whole family at once.

The kinds that overlap with builtin exception families also inherit from
the builtin (ValueError, LookupError) so generic handlers keep working.
"""

from __future__ import annotations

from pathlib import Path


class StoreError(Exception):
    """Base class for all store failures."""

    pass


class InvalidInputError(StoreError, ValueError):
    """Raised when a caller supplies unusable input.

    Empty or None content passed to set(), or a metadata key that is not a
    single safe path component.
    """

    pass


class MalformedIDError(StoreError, ValueError):
    """Raised when an ID string fails structural validation.

    Detected before any filesystem access.
    """

    def __init__(self, raw: object, reason: str) -> None:
        super().__init__(f"Malformed ID {repr(raw)[:160]}: {reason}")
        self.raw = raw
        self.reason = reason


class NotFoundError(StoreError, LookupError):
    """Raised when requested content or metadata does not exist."""

    pass


class StoreCorruptedError(StoreError):
    """Raised when on-disk state violates the content-addressing invariant.

    Either the bytes stored for an ID no longer hash to that ID (bit rot,
    truncation, tampering), or a foreign non-file object occupies a content
    path. Corrupted data is never returned to a caller.
    """

    def __init__(self, message: str, *, id: str | None = None, path: Path | None = None) -> None:
        super().__init__(message)
        self.id = id
        self.path = path


class InvalidRootError(StoreError):
    """Raised at construction when a required store path is not a directory."""

    def __init__(self, path: Path, message: str | None = None) -> None:
        super().__init__(message or f"Invalid store root: {path} exists and is not a directory")
        self.path = path
