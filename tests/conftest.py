# tests/conftest.py
"""Shared test fixtures.

Store fixtures:
- fs_store: FilesystemStoreBackend rooted in tmp_path / "store"
- memory_store: InMemoryStoreBackend
- backend: parametrized over both, for tests of the shared StoreBackend contract

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import os
from pathlib import Path

import pytest
from hypothesis import Phase, Verbosity, settings

from digeststore.contracts import StoreBackend
from digeststore.core.fs_store import FilesystemStoreBackend
from digeststore.core.memory_store import InMemoryStoreBackend

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Filesystem timing varies
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Store fixtures
# =============================================================================


@pytest.fixture
def store_root(tmp_path: Path) -> Path:
    return tmp_path / "store"


@pytest.fixture
def fs_store(store_root: Path) -> FilesystemStoreBackend:
    return FilesystemStoreBackend(store_root)


@pytest.fixture
def memory_store() -> InMemoryStoreBackend:
    return InMemoryStoreBackend()


@pytest.fixture(params=["filesystem", "memory"])
def backend(request: pytest.FixtureRequest, store_root: Path) -> StoreBackend:
    """Every StoreBackend implementation, one per test run."""
    if request.param == "filesystem":
        return FilesystemStoreBackend(store_root)
    return InMemoryStoreBackend()
