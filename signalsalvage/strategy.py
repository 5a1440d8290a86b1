from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from signalsalvage.economy import (
    beacon_projection,
    can_beacon_reset,
    can_prestige,
    prestige_gain,
)

if TYPE_CHECKING:
    from signalsalvage.definition import GameDefinition
    from signalsalvage.purchase import PurchaseOption
    from signalsalvage.state import GameState

PRESTIGE_MODES = ("never", "first_opportunity")


class Strategy(ABC):
    """Base class for simulated players."""

    enable_auto_claim: bool = False
    enable_auto_buy: bool = False

    @abstractmethod
    def decide_purchases(
        self, state: GameState, affordable: list[PurchaseOption]
    ) -> list[PurchaseOption]:
        """Return the options to buy this step, in order."""
        ...

    def scan_rate(self, state: GameState) -> float:
        """Manual scans per second."""
        return 0.0

    def should_prestige(self, definition: GameDefinition, state: GameState) -> bool:
        return False

    def should_beacon_reset(self, definition: GameDefinition, state: GameState) -> bool:
        return False

    @abstractmethod
    def describe(self) -> str: ...


class GreedyCheapest(Strategy):
    """Buy the cheapest affordable option first."""

    def __init__(
        self,
        scans_per_second: float = 0.0,
        prestige_mode: str = "never",
        auto_claim: bool = True,
        auto_buy: bool = False,
    ) -> None:
        if prestige_mode not in PRESTIGE_MODES:
            raise ValueError(
                f"Unknown prestige mode {prestige_mode!r}. Expected one of {PRESTIGE_MODES}"
            )
        self.scans_per_second = scans_per_second
        self.prestige_mode = prestige_mode
        self.enable_auto_claim = auto_claim
        self.enable_auto_buy = auto_buy

    def decide_purchases(
        self, state: GameState, affordable: list[PurchaseOption]
    ) -> list[PurchaseOption]:
        return sorted(affordable, key=lambda o: o.cost)

    def scan_rate(self, state: GameState) -> float:
        return self.scans_per_second

    def should_prestige(self, definition: GameDefinition, state: GameState) -> bool:
        return (
            self.prestige_mode == "first_opportunity"
            and can_prestige(definition, state)
            and prestige_gain(definition, state) > 0
        )

    def should_beacon_reset(self, definition: GameDefinition, state: GameState) -> bool:
        return (
            self.prestige_mode == "first_opportunity"
            and can_beacon_reset(definition, state)
            and beacon_projection(definition, state) > 0
        )

    def describe(self) -> str:
        parts = ["GreedyCheapest"]
        if self.scans_per_second:
            parts.append(f"({self.scans_per_second:g} scans/s)")
        if self.prestige_mode != "never":
            parts.append(f"[prestige: {self.prestige_mode}]")
        return " ".join(parts)


class PriorityList(Strategy):
    """Follow a designer-specified purchase order.

    Each entry is ``(id, target_level)``; the first entry below its target
    that is affordable is bought. With every target met the fallback
    strategy, if any, decides.
    """

    def __init__(
        self,
        priorities: list[tuple[str, int]],
        fallback: Strategy | None = None,
        scans_per_second: float = 0.0,
    ) -> None:
        self.priorities = priorities
        self.fallback = fallback
        self.scans_per_second = scans_per_second
        if fallback is not None:
            self.enable_auto_claim = fallback.enable_auto_claim
            self.enable_auto_buy = fallback.enable_auto_buy

    def decide_purchases(
        self, state: GameState, affordable: list[PurchaseOption]
    ) -> list[PurchaseOption]:
        by_id = {o.id: o for o in affordable}
        for item_id, target in self.priorities:
            option = by_id.get(item_id)
            if option is not None and option.level < target:
                return [option]

        if self.fallback:
            return self.fallback.decide_purchases(state, affordable)
        return []

    def scan_rate(self, state: GameState) -> float:
        return self.scans_per_second

    def should_prestige(self, definition: GameDefinition, state: GameState) -> bool:
        if self.fallback:
            return self.fallback.should_prestige(definition, state)
        return False

    def should_beacon_reset(self, definition: GameDefinition, state: GameState) -> bool:
        if self.fallback:
            return self.fallback.should_beacon_reset(definition, state)
        return False

    def describe(self) -> str:
        items = ", ".join(f"{item_id}x{count}" for item_id, count in self.priorities)
        return f"PriorityList([{items}])"


STRATEGY_REGISTRY: dict[str, type[Strategy]] = {
    "greedy_cheapest": GreedyCheapest,
    "priority_list": PriorityList,
}
