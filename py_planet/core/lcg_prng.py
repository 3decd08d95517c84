"""
Linear congruential PRNG shared by every generator on the planet.

The browser client uses the classic ``(seed * 9301 + 49297) % 233280``
recurrence, so the integer state must advance with exact integer arithmetic
for server and client to agree draw for draw.
"""

from typing import Sequence, Tuple, TypeVar

T = TypeVar("T")

MULTIPLIER = 9301
INCREMENT = 49297
MODULUS = 233280


def lcg_next(state: int) -> Tuple[float, int]:
    """Advance ``state`` once and return ``(value in [0, 1), new_state)``."""
    new_state = (state * MULTIPLIER + INCREMENT) % MODULUS
    return new_state / MODULUS, new_state


class LcgPRNG:
    """
    Seeded LCG holding a single private state register.

    Each generation stage owns its own instance; re-seed instead of sharing.
    """

    def __init__(self, seed: int):
        if seed < 0:
            raise ValueError(f"Seed must be non-negative, got {seed}")
        self.seed = seed
        self.state = seed
        # Number of draws so far, handy when comparing against the client
        self.call_count = 0

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        value, self.state = lcg_next(self.state)
        return value

    def randrange(self, n: int) -> int:
        """Uniform integer in [0, n), computed as ``floor(random() * n)``."""
        return int(self.random() * n)

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[self.randrange(len(seq))]
