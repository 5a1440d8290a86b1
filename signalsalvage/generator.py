from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class GeneratorDef:
    """Static definition of a signal-producing generator."""

    id: str
    display_name: str = ""
    base_cost: float = 0.0
    cost_growth: float = 1.0
    base_rate: float = 0.0

    def __post_init__(self) -> None:
        if not self.display_name:
            object.__setattr__(self, "display_name", self.id)

    def cost_at(self, count: int) -> float:
        """Undiscounted price of the unit bought when *count* are owned."""
        try:
            return self.base_cost * self.cost_growth ** count
        except OverflowError:
            return math.inf
