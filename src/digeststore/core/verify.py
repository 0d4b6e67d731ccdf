"""Integrity sweep over a whole store.

Walks every stored ID and re-reads it through get(), which recomputes the
digest. Reports corrupted entries without modifying anything; deciding
what to do with them is left to the store's owner.
"""

from dataclasses import dataclass, field
from time import perf_counter

import structlog

from digeststore.contracts.errors import NotFoundError, StoreCorruptedError
from digeststore.contracts.store import ID, StoreBackend

__all__ = ["VerifyResult", "verify_store"]

logger = structlog.get_logger(__name__)


@dataclass
class VerifyResult:
    """Result of a verification sweep."""

    checked_count: int
    corrupted_ids: list[ID] = field(default_factory=list)
    missing_ids: list[ID] = field(default_factory=list)  # Removed between walk and get
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        """True if no corrupted entries were found."""
        return not self.corrupted_ids


def verify_store(store: StoreBackend) -> VerifyResult:
    """Verify the integrity of every entry in store.

    Args:
        store: Any StoreBackend implementation

    Returns:
        VerifyResult summarising the sweep

    Raises:
        Any error other than NotFoundError/StoreCorruptedError raised by
        the backend (e.g. OSError on permission problems).
    """
    start = perf_counter()
    result = VerifyResult(checked_count=0)

    def _check(id: ID) -> None:
        result.checked_count += 1
        try:
            store.get(id)
        except StoreCorruptedError as e:
            logger.warning("Corrupted entry found", id=id, error=str(e))
            result.corrupted_ids.append(id)
        except NotFoundError:
            result.missing_ids.append(id)

    store.walk(_check)
    result.duration_seconds = perf_counter() - start

    logger.info(
        "Store verification complete",
        checked=result.checked_count,
        corrupted=len(result.corrupted_ids),
        missing=len(result.missing_ids),
    )
    return result
