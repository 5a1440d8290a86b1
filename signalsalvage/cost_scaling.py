from __future__ import annotations

import math
from typing import Callable


class CostScaling:
    """Determines how a price changes with the level already owned."""

    def __init__(self, fn: Callable[[float, int], float], growth: float = 1.0) -> None:
        self._fn = fn
        self.growth = growth

    def compute(self, base_cost: float, level: int) -> float:
        return self._fn(base_cost, level)

    @classmethod
    def fixed(cls) -> CostScaling:
        """Cost never changes."""
        return cls(lambda base, _level: base)

    @classmethod
    def exponential(cls, growth_rate: float = 1.15) -> CostScaling:
        """Cost = base * growth_rate^level."""
        def _compute(base: float, level: int) -> float:
            try:
                return base * growth_rate ** level
            except OverflowError:
                return math.inf

        return cls(_compute, growth=growth_rate)

    @classmethod
    def custom(cls, fn: Callable[[float, int], float]) -> CostScaling:
        """Arbitrary cost function."""
        return cls(fn)
