from __future__ import annotations

from dataclasses import dataclass, field

from signalsalvage._types import CurrencyType
from signalsalvage.cost_scaling import CostScaling
from signalsalvage.effect import EffectDef
from signalsalvage.requirement import Req, Requirement


@dataclass(frozen=True)
class UpgradeDef:
    """Static definition of a levelled purchase in any upgrade catalogue.

    Non-repeatable upgrades have a single level. Repeatable ones scale their
    price with ``cost_scaling`` and stop at ``max_level`` when it is set.
    """

    id: str
    display_name: str = ""
    description: str = ""
    cost: float = 0.0
    currency: CurrencyType = CurrencyType.SIGNAL
    repeatable: bool = False
    cost_scaling: CostScaling = field(default_factory=CostScaling.fixed)
    max_level: int | None = None
    requirement: Requirement = field(default_factory=Req.always)
    effects: tuple[EffectDef, ...] = ()
    tier: int = 1

    def __post_init__(self) -> None:
        if not self.display_name:
            object.__setattr__(self, "display_name", self.id)

    @property
    def cost_growth(self) -> float:
        return self.cost_scaling.growth

    @property
    def level_cap(self) -> int | None:
        """Highest reachable level, None when unbounded."""
        if not self.repeatable:
            return 1 if self.max_level is None else min(1, self.max_level)
        return self.max_level

    def is_maxed(self, level: int) -> bool:
        cap = self.level_cap
        return cap is not None and level >= cap

    def cost_at(self, level: int) -> float:
        """Undiscounted price of the next level when *level* are owned."""
        if not self.repeatable:
            return self.cost
        return self.cost_scaling.compute(self.cost, level)
