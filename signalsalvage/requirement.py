from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

from signalsalvage._types import compare

if TYPE_CHECKING:
    from signalsalvage.state import GameState


class Requirement(ABC):
    """A boolean condition evaluated against a state snapshot."""

    @abstractmethod
    def evaluate(self, state: GameState) -> bool: ...

    def __and__(self, other: Requirement) -> Requirement:
        return _AllRequirement([self, other])

    def __or__(self, other: Requirement) -> Requirement:
        return _AnyRequirement([self, other])


# ── Private implementations ──────────────────────────────────────────


class _AlwaysRequirement(Requirement):
    def evaluate(self, state: GameState) -> bool:
        return True


class _GeneratorCountRequirement(Requirement):
    def __init__(self, generator_id: str, op: str, threshold: int) -> None:
        self.generator_id = generator_id
        self.op = op
        self.threshold = threshold

    def evaluate(self, state: GameState) -> bool:
        return compare(state.generator_count(self.generator_id), self.op, self.threshold)


class _UpgradeOwnedRequirement(Requirement):
    def __init__(self, upgrade_id: str) -> None:
        self.upgrade_id = upgrade_id

    def evaluate(self, state: GameState) -> bool:
        return state.upgrades.get(self.upgrade_id, 0) > 0


class _TotalSignalRequirement(Requirement):
    def __init__(self, op: str, threshold: float) -> None:
        self.op = op
        self.threshold = threshold

    def evaluate(self, state: GameState) -> bool:
        return compare(state.total_signal_earned, self.op, self.threshold)


class _TotalRelaysRequirement(Requirement):
    def __init__(self, op: str, threshold: float) -> None:
        self.op = op
        self.threshold = threshold

    def evaluate(self, state: GameState) -> bool:
        return compare(state.total_relays_earned, self.op, self.threshold)


class _NoiseRequirement(Requirement):
    def __init__(self, op: str, threshold: float) -> None:
        self.op = op
        self.threshold = threshold

    def evaluate(self, state: GameState) -> bool:
        return compare(state.noise, self.op, self.threshold)


class _MilestoneRequirement(Requirement):
    def __init__(self, milestone_id: str) -> None:
        self.milestone_id = milestone_id

    def evaluate(self, state: GameState) -> bool:
        return state.has_milestone(self.milestone_id)


class _AllRequirement(Requirement):
    def __init__(self, reqs: list[Requirement]) -> None:
        self.reqs = reqs

    def evaluate(self, state: GameState) -> bool:
        return all(r.evaluate(state) for r in self.reqs)


class _AnyRequirement(Requirement):
    def __init__(self, reqs: list[Requirement]) -> None:
        self.reqs = reqs

    def evaluate(self, state: GameState) -> bool:
        return any(r.evaluate(state) for r in self.reqs)


class _CustomRequirement(Requirement):
    def __init__(self, fn: Callable[[GameState], bool]) -> None:
        self.fn = fn

    def evaluate(self, state: GameState) -> bool:
        return self.fn(state)


# ── Public factory ───────────────────────────────────────────────────


class Req:
    """Factory for built-in requirement types."""

    @staticmethod
    def always() -> Requirement:
        return _AlwaysRequirement()

    @staticmethod
    def generator_count(generator_id: str, op: str, threshold: int) -> Requirement:
        return _GeneratorCountRequirement(generator_id, op, threshold)

    @staticmethod
    def owns(generator_id: str) -> Requirement:
        return _GeneratorCountRequirement(generator_id, ">=", 1)

    @staticmethod
    def upgrade_owned(upgrade_id: str) -> Requirement:
        return _UpgradeOwnedRequirement(upgrade_id)

    @staticmethod
    def total_signal(op: str, threshold: float) -> Requirement:
        return _TotalSignalRequirement(op, threshold)

    @staticmethod
    def total_relays(op: str, threshold: float) -> Requirement:
        return _TotalRelaysRequirement(op, threshold)

    @staticmethod
    def noise(op: str, threshold: float) -> Requirement:
        return _NoiseRequirement(op, threshold)

    @staticmethod
    def milestone(milestone_id: str) -> Requirement:
        return _MilestoneRequirement(milestone_id)

    @staticmethod
    def all(*reqs: Requirement) -> Requirement:
        return _AllRequirement(list(reqs))

    @staticmethod
    def any(*reqs: Requirement) -> Requirement:
        return _AnyRequirement(list(reqs))

    @staticmethod
    def custom(fn: Callable[[GameState], bool]) -> Requirement:
        return _CustomRequirement(fn)
