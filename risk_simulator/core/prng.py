"""Seedable 32-bit pseudo-random generator (Mulberry32).

Every draw is computed with explicit 32-bit wrapping so that a given seed
produces the same sequence on every platform and interpreter. The compiled
kernel in ``performance.py`` implements the identical recurrence.
"""

from typing import List

UINT32_MASK = 0xFFFFFFFF
GOLDEN_INCREMENT = 0x6D2B79F5
TWO_POW_32 = 4294967296.0


def normalize_seed(seed: int) -> int:
    """Reduce any integer seed to the 32-bit state space."""
    return int(seed) & UINT32_MASK


class PRNGEngine:
    """Deterministic uniform generator on [0, 1).

    Two engines built from the same seed yield bit-identical sequences.
    Overflow in the state update wraps silently.
    """

    __slots__ = ('seed', 'state')

    def __init__(self, seed: int):
        """Initialize generator.

        Args:
            seed: Integer seed; values outside 32 bits are reduced mod 2^32
        """
        self.seed = normalize_seed(seed)
        self.state = self.seed

    def next_uint32(self) -> int:
        """Advance the state and return the next raw 32-bit word."""
        s = (self.state + GOLDEN_INCREMENT) & UINT32_MASK
        self.state = s
        t = ((s ^ (s >> 15)) * (s | 1)) & UINT32_MASK
        t = ((t + (((t ^ (t >> 7)) * (t | 61)) & UINT32_MASK)) & UINT32_MASK) ^ t
        return (t ^ (t >> 14)) & UINT32_MASK

    def random(self) -> float:
        """Return the next draw in [0, 1)."""
        return self.next_uint32() / TWO_POW_32

    __call__ = random

    def draws(self, count: int) -> List[float]:
        """Return the next ``count`` draws as a list."""
        return [self.random() for _ in range(count)]
