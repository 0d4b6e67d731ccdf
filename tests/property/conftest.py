# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Usage:
    from tests.property.conftest import nonempty_binary, malformed_ids

    @given(content=nonempty_binary)
    def test_round_trip(content: bytes) -> None:
        ...
"""

from __future__ import annotations

from hypothesis import strategies as st

from digeststore.contracts import Algorithm
from digeststore.core.digest import hex_length

# =============================================================================
# Payloads
# =============================================================================

# Non-empty binary content (the only content set() accepts)
nonempty_binary = st.binary(min_size=1, max_size=10_000)

# Small binary for fast tests
small_binary = st.binary(min_size=1, max_size=1000)

algorithms = st.sampled_from(list(Algorithm))

# =============================================================================
# IDs
# =============================================================================

_LOWER_HEX = "0123456789abcdef"


@st.composite
def valid_ids(draw: st.DrawFn) -> str:
    """Structurally valid IDs for any supported algorithm."""
    algorithm = draw(algorithms)
    length = hex_length(algorithm)
    hex_part = draw(st.text(alphabet=_LOWER_HEX, min_size=length, max_size=length))
    return f"{algorithm.value}:{hex_part}"


@st.composite
def wrong_length_ids(draw: st.DrawFn) -> str:
    """Supported algorithm, lowercase hex, wrong digest length."""
    algorithm = draw(algorithms)
    length = draw(st.integers(min_value=0, max_value=200).filter(lambda n: n != hex_length(algorithm)))
    hex_part = draw(st.text(alphabet=_LOWER_HEX, min_size=length, max_size=length))
    return f"{algorithm.value}:{hex_part}"


@st.composite
def bad_charset_ids(draw: st.DrawFn) -> str:
    """Right length, at least one character outside lowercase hex."""
    algorithm = draw(algorithms)
    length = hex_length(algorithm)
    hex_part = list(draw(st.text(alphabet=_LOWER_HEX, min_size=length, max_size=length)))
    position = draw(st.integers(min_value=0, max_value=length - 1))
    hex_part[position] = draw(st.characters().filter(lambda c: c not in _LOWER_HEX))
    return f"{algorithm.value}:{''.join(hex_part)}"


# Arbitrary text: almost never a valid ID
arbitrary_strings = st.text(max_size=200)

malformed_ids = wrong_length_ids() | bad_charset_ids()

# Metadata keys that are single safe path components
metadata_keys = st.text(
    alphabet=st.characters(categories=("Lu", "Ll", "Nd"), include_characters="-_."),
    min_size=1,
    max_size=40,
).filter(lambda k: k not in (".", "..") and not k.startswith(".tmp-"))
