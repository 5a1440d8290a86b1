from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, auto


class EffectType(Enum):
    GLOBAL_MULT = auto()
    GENERATOR_MULT = auto()
    CLICK_MULT = auto()
    CLICK_RATE_FRACTION = auto()
    AUTO_SCAN = auto()
    PASSIVE_DP = auto()
    GENERATOR_COST_MULT = auto()
    CATALOG_COST_MULT = auto()
    NOISE_MULT = auto()
    NOISE_MITIGATION = auto()
    MILESTONE_REWARD_MULT = auto()
    RELAY_EFFICIENCY = auto()
    RELAY_ENERGY_BONUS = auto()
    START_GENERATORS = auto()
    START_SIGNAL = auto()
    RETAIN_ON_PRESTIGE = auto()
    BULK_BUY = auto()


class EffectStacking(Enum):
    MULTIPLY = auto()  # value ** level
    ADD = auto()  # value * level
    FLAG = auto()  # present when level > 0


DEFAULT_STACKING: dict[EffectType, EffectStacking] = {
    EffectType.GLOBAL_MULT: EffectStacking.MULTIPLY,
    EffectType.GENERATOR_MULT: EffectStacking.MULTIPLY,
    EffectType.CLICK_MULT: EffectStacking.MULTIPLY,
    EffectType.CLICK_RATE_FRACTION: EffectStacking.ADD,
    EffectType.AUTO_SCAN: EffectStacking.ADD,
    EffectType.PASSIVE_DP: EffectStacking.ADD,
    EffectType.GENERATOR_COST_MULT: EffectStacking.MULTIPLY,
    EffectType.CATALOG_COST_MULT: EffectStacking.MULTIPLY,
    EffectType.NOISE_MULT: EffectStacking.MULTIPLY,
    EffectType.NOISE_MITIGATION: EffectStacking.FLAG,
    EffectType.MILESTONE_REWARD_MULT: EffectStacking.MULTIPLY,
    EffectType.RELAY_EFFICIENCY: EffectStacking.ADD,
    EffectType.RELAY_ENERGY_BONUS: EffectStacking.ADD,
    EffectType.START_GENERATORS: EffectStacking.ADD,
    EffectType.START_SIGNAL: EffectStacking.ADD,
    EffectType.RETAIN_ON_PRESTIGE: EffectStacking.FLAG,
    EffectType.BULK_BUY: EffectStacking.FLAG,
}


@dataclass(frozen=True)
class EffectDef:
    """A single effect granted by owning levels of an upgrade.

    ``targets`` names what the effect applies to: generator ids for
    generator-scoped effects, catalogue names for catalogue discounts and
    upgrade ids for retention. An empty tuple means "everything".
    """

    type: EffectType
    value: float = 1.0
    targets: tuple[str, ...] = ()

    @property
    def stacking(self) -> EffectStacking:
        return DEFAULT_STACKING[self.type]

    def applies_to(self, target: str) -> bool:
        return not self.targets or target in self.targets

    def at_level(self, level: int) -> float:
        """Contribution of this effect with *level* levels owned."""
        stacking = self.stacking
        if stacking is EffectStacking.MULTIPLY:
            try:
                return self.value ** level
            except OverflowError:
                return math.inf
        if stacking is EffectStacking.ADD:
            return self.value * level
        return self.value if level > 0 else 0.0


class Effect:
    """Convenience constructors for common effect patterns."""

    @staticmethod
    def global_mult(factor: float) -> EffectDef:
        return EffectDef(EffectType.GLOBAL_MULT, factor)

    @staticmethod
    def generator_mult(generator_id: str, factor: float) -> EffectDef:
        return EffectDef(EffectType.GENERATOR_MULT, factor, (generator_id,))

    @staticmethod
    def click_mult(factor: float) -> EffectDef:
        return EffectDef(EffectType.CLICK_MULT, factor)

    @staticmethod
    def click_rate_fraction(fraction: float) -> EffectDef:
        """Manual scans gain *fraction* of the passive production rate."""
        return EffectDef(EffectType.CLICK_RATE_FRACTION, fraction)

    @staticmethod
    def auto_scan(scans_per_second: float) -> EffectDef:
        return EffectDef(EffectType.AUTO_SCAN, scans_per_second)

    @staticmethod
    def passive_dp(per_second: float) -> EffectDef:
        return EffectDef(EffectType.PASSIVE_DP, per_second)

    @staticmethod
    def generator_cost_mult(factor: float, *generator_ids: str) -> EffectDef:
        return EffectDef(EffectType.GENERATOR_COST_MULT, factor, tuple(generator_ids))

    @staticmethod
    def catalog_cost_mult(catalog: str, factor: float) -> EffectDef:
        return EffectDef(EffectType.CATALOG_COST_MULT, factor, (catalog,))

    @staticmethod
    def noise_mult(factor: float) -> EffectDef:
        return EffectDef(EffectType.NOISE_MULT, factor)

    @staticmethod
    def noise_mitigation(fraction: float) -> EffectDef:
        return EffectDef(EffectType.NOISE_MITIGATION, fraction)

    @staticmethod
    def milestone_reward_mult(factor: float) -> EffectDef:
        return EffectDef(EffectType.MILESTONE_REWARD_MULT, factor)

    @staticmethod
    def relay_efficiency(step: float) -> EffectDef:
        return EffectDef(EffectType.RELAY_EFFICIENCY, step)

    @staticmethod
    def relay_energy_bonus(amount: float) -> EffectDef:
        return EffectDef(EffectType.RELAY_ENERGY_BONUS, amount)

    @staticmethod
    def start_generators(generator_id: str, count: int) -> EffectDef:
        return EffectDef(EffectType.START_GENERATORS, float(count), (generator_id,))

    @staticmethod
    def start_signal(amount: float) -> EffectDef:
        return EffectDef(EffectType.START_SIGNAL, amount)

    @staticmethod
    def retain_on_prestige(*upgrade_ids: str) -> EffectDef:
        return EffectDef(EffectType.RETAIN_ON_PRESTIGE, 1.0, tuple(upgrade_ids))

    @staticmethod
    def bulk_buy() -> EffectDef:
        return EffectDef(EffectType.BULK_BUY, 1.0)
