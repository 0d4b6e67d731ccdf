"""Enumerations that cross module boundaries."""

from enum import StrEnum


class Algorithm(StrEnum):
    """Digest algorithms accepted in IDs.

    The value is the algorithm name as it appears in the ID prefix and in
    the on-disk directory layout.
    """

    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"


# Algorithm used when none is configured
CANONICAL_ALGORITHM = Algorithm.SHA256
