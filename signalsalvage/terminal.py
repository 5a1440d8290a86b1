from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from signalsalvage._types import CurrencyType, compare

if TYPE_CHECKING:
    from signalsalvage.state import GameState


@dataclass
class SimulationContext:
    """Bookkeeping the simulation keeps alongside the immutable state."""

    time_elapsed: float = 0.0
    last_purchase_time: float = 0.0
    total_purchases: int = 0
    relay_resets: int = 0
    beacon_resets: int = 0


class TerminalCondition(ABC):
    """Base class for simulation stopping conditions."""

    @abstractmethod
    def is_met(self, state: GameState, context: SimulationContext) -> bool: ...

    @abstractmethod
    def describe(self) -> str: ...


class _TimeTerminal(TerminalCondition):
    def __init__(self, seconds: float) -> None:
        self.seconds = seconds

    def is_met(self, state: GameState, context: SimulationContext) -> bool:
        return context.time_elapsed >= self.seconds

    def describe(self) -> str:
        return f"time({self.seconds})"


class _MilestoneTerminal(TerminalCondition):
    def __init__(self, milestone_id: str) -> None:
        self.milestone_id = milestone_id

    def is_met(self, state: GameState, context: SimulationContext) -> bool:
        return state.has_milestone(self.milestone_id)

    def describe(self) -> str:
        return f'milestone("{self.milestone_id}")'


class _CurrencyTerminal(TerminalCondition):
    def __init__(self, currency: CurrencyType, op: str, threshold: float) -> None:
        self.currency = currency
        self.op = op
        self.threshold = threshold

    def is_met(self, state: GameState, context: SimulationContext) -> bool:
        return compare(state.currency(self.currency), self.op, self.threshold)

    def describe(self) -> str:
        return f'currency("{self.currency.value}", "{self.op}", {self.threshold})'


class _TotalSignalTerminal(TerminalCondition):
    def __init__(self, threshold: float) -> None:
        self.threshold = threshold

    def is_met(self, state: GameState, context: SimulationContext) -> bool:
        return state.total_signal_earned >= self.threshold

    def describe(self) -> str:
        return f"total_signal({self.threshold:g})"


class _RelaysTerminal(TerminalCondition):
    def __init__(self, threshold: float) -> None:
        self.threshold = threshold

    def is_met(self, state: GameState, context: SimulationContext) -> bool:
        return state.total_relays_earned >= self.threshold

    def describe(self) -> str:
        return f"relays({self.threshold:g})"


class _StallTerminal(TerminalCondition):
    def __init__(self, max_idle_seconds: float) -> None:
        self.max_idle_seconds = max_idle_seconds

    def is_met(self, state: GameState, context: SimulationContext) -> bool:
        return context.time_elapsed - context.last_purchase_time >= self.max_idle_seconds

    def describe(self) -> str:
        return f"stall({self.max_idle_seconds})"


class _AnyTerminal(TerminalCondition):
    def __init__(self, conditions: list[TerminalCondition]) -> None:
        self.conditions = conditions

    def is_met(self, state: GameState, context: SimulationContext) -> bool:
        return any(c.is_met(state, context) for c in self.conditions)

    def describe(self) -> str:
        return " OR ".join(c.describe() for c in self.conditions)


class _AllTerminal(TerminalCondition):
    def __init__(self, conditions: list[TerminalCondition]) -> None:
        self.conditions = conditions

    def is_met(self, state: GameState, context: SimulationContext) -> bool:
        return all(c.is_met(state, context) for c in self.conditions)

    def describe(self) -> str:
        return " AND ".join(c.describe() for c in self.conditions)


class Terminal:
    """Factory for built-in terminal conditions."""

    @staticmethod
    def time(seconds: float) -> TerminalCondition:
        return _TimeTerminal(seconds)

    @staticmethod
    def milestone(milestone_id: str) -> TerminalCondition:
        return _MilestoneTerminal(milestone_id)

    @staticmethod
    def currency(currency: CurrencyType, op: str, threshold: float) -> TerminalCondition:
        return _CurrencyTerminal(currency, op, threshold)

    @staticmethod
    def total_signal(threshold: float) -> TerminalCondition:
        return _TotalSignalTerminal(threshold)

    @staticmethod
    def relays(threshold: float) -> TerminalCondition:
        return _RelaysTerminal(threshold)

    @staticmethod
    def stall(max_idle_seconds: float = 600) -> TerminalCondition:
        return _StallTerminal(max_idle_seconds)

    @staticmethod
    def any(*conditions: TerminalCondition) -> TerminalCondition:
        return _AnyTerminal(list(conditions))

    @staticmethod
    def all(*conditions: TerminalCondition) -> TerminalCondition:
        return _AllTerminal(list(conditions))
