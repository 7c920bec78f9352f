"""Triangular distribution for risk impact sampling.

Implements inverse-CDF sampling from a single uniform draw so the number of
generator draws per trial stays fixed and reproducible.
"""

import math
from typing import NamedTuple, Tuple


class Triangle(NamedTuple):
    """Triangular range (minimum, most likely, maximum)."""
    low: float
    mode: float
    high: float

    @property
    def is_valid(self) -> bool:
        """True when the range can be sampled (``low < high`` and mode inside)."""
        return is_valid_triangle(self.low, self.mode, self.high)

    @property
    def is_zero(self) -> bool:
        """True when all three values are zero."""
        return self.low == 0 and self.mode == 0 and self.high == 0

    @property
    def is_constant(self) -> bool:
        """True for a collapsed, nonzero range (``low == mode == high != 0``)."""
        return self.low == self.mode == self.high and self.low != 0

    @property
    def mean(self) -> float:
        """Analytic mean, or 0 for an unsampleable range."""
        return triangular_mean(self.low, self.mode, self.high)


def is_valid_triangle(low: float, mode: float, high: float) -> bool:
    """Check the sampling precondition ``low < high`` and ``low <= mode <= high``."""
    return low < high and low <= mode <= high


class TriangularSampler:
    """Samples a triangular distribution through its inverse CDF."""

    @staticmethod
    def sample(low: float, mode: float, high: float, u: float) -> float:
        """Map one uniform draw onto triangular(low, mode, high).

        Args:
            low: Minimum value
            mode: Most likely value
            high: Maximum value
            u: Uniform draw in [0, 1)

        Returns:
            Sample in [low, high], or 0.0 when the range is degenerate
            (``low >= high`` or mode outside the range)
        """
        if not is_valid_triangle(low, mode, high):
            return 0.0

        span = high - low
        k = (mode - low) / span
        if u <= k:
            return low + math.sqrt(u * span * (mode - low))
        return high - math.sqrt((1 - u) * span * (high - mode))

    @staticmethod
    def sample_triangle(triangle: Tuple[float, float, float], u: float) -> float:
        """Sample from a ``(low, mode, high)`` tuple."""
        low, mode, high = triangle
        return TriangularSampler.sample(low, mode, high, u)


def triangular_mean(low: float, mode: float, high: float) -> float:
    """Get analytic mean of a triangular distribution.

    Degenerate ranges mirror the sampler and report 0.
    """
    if is_valid_triangle(low, mode, high):
        return (low + mode + high) / 3
    return 0.0
