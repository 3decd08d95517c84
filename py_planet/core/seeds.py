"""
Identifier to seed hashing.

Strings are folded with the ``hash * 31 + code_unit`` polynomial, wrapped to a
signed 32-bit integer after every character. Independent generators that share
one identifier decorrelate by adding the fixed offsets below to the base seed.
"""

from datetime import date, datetime
from typing import Union

import numpy as np

ROAD_SEED_OFFSET = 0
PATHWAY_SEED_OFFSET = 12345
PARK_SEED_OFFSET = 67890
APARTMENT_SEED_OFFSET = 54321

# Planet-wide constants used by the globe view
TERRAIN_SEED = 12345
SETTLEMENT_SEED = 54321


def _int32(n: int) -> int:
    """Wrap to a signed 32-bit integer (two's complement)."""
    n &= 0xFFFFFFFF
    return n - 0x100000000 if n & 0x80000000 else n


def string_to_seed(identifier: str) -> int:
    """
    Hash an identifier into a non-negative seed.

    Characters are consumed as UTF-16 code units so astral characters hash
    the same way they do in the browser.

    Args:
        identifier: Village id, planet id or ISO date string

    Returns:
        ``abs`` of the wrapped 32-bit hash (0 for the empty string)
    """
    if not isinstance(identifier, str):
        raise TypeError(
            f"Seed identifier must be a string, got {type(identifier).__name__}"
        )

    code_units = np.frombuffer(
        identifier.encode("utf-16-le", "surrogatepass"), dtype="<u2"
    )
    h = 0
    for unit in code_units.tolist():
        h = _int32((_int32(h << 5) - h) + unit)
    return abs(h)


def date_to_seed(day: Union[date, datetime]) -> int:
    """Seed for a calendar day, hashed from its ``YYYY-MM-DD`` form."""
    if isinstance(day, datetime):
        day = day.date()
    return string_to_seed(day.isoformat())


def derive_seed(base_seed: int, offset: int) -> int:
    """Sub-seed for an independent generator sharing ``base_seed``."""
    return base_seed + offset
