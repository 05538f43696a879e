"""Integrity code constants for Chain.verify().

These constants prevent stringly-typed issue codes and ensure
client code matches on the correct integrity codes.
"""

from enum import Enum


class IntegrityCode(str, Enum):
    """Integrity issue codes reported by chain verification."""

    # Record-level (recomputation)
    HASH_MISMATCH = "HASH_MISMATCH"
    POSITION_MISMATCH = "POSITION_MISMATCH"

    # Link-level (adjacent records)
    PREVIOUS_HASH_MISMATCH = "PREVIOUS_HASH_MISMATCH"
    GENESIS_MISMATCH = "GENESIS_MISMATCH"

    # Digest algorithm of a stored record is not the chain's
    ALGORITHM_MISMATCH = "ALGORITHM_MISMATCH"
