from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from signalsalvage._types import CurrencyType

if TYPE_CHECKING:
    from signalsalvage.state import GameState


@dataclass
class CurrencySnapshot:
    time: float
    currency: str
    value: float
    rate: float


@dataclass
class PurchaseEvent:
    time: float
    kind: str
    item_id: str
    cost_paid: float
    currency: str


@dataclass
class MilestoneEvent:
    time: float
    milestone_id: str


@dataclass
class ResetEvent:
    time: float
    layer: str  # "relay" or "beacon"
    reward_amount: float
    run_duration: float


class MetricsCollector:
    """Collects simulation metrics at a fixed snapshot interval."""

    def __init__(self, snapshot_interval: float = 1.0) -> None:
        self.snapshot_interval = snapshot_interval
        self._last_snapshot_time: float | None = None

        self.currency_snapshots: list[CurrencySnapshot] = []
        self.purchases: list[PurchaseEvent] = []
        self.milestones: list[MilestoneEvent] = []
        self.resets: list[ResetEvent] = []

    def record_tick(self, time: float, state: GameState, rates: dict[str, float]) -> None:
        """Record a snapshot if enough time has passed."""
        last = self._last_snapshot_time
        if last is not None and time - last < self.snapshot_interval:
            return
        self._last_snapshot_time = time
        for currency in CurrencyType:
            self.currency_snapshots.append(
                CurrencySnapshot(
                    time=time,
                    currency=currency.value,
                    value=state.currency(currency),
                    rate=rates.get(currency.value, 0.0),
                )
            )

    def record_purchase(
        self, time: float, kind: str, item_id: str, cost_paid: float, currency: str
    ) -> None:
        self.purchases.append(PurchaseEvent(time, kind, item_id, cost_paid, currency))

    def record_milestone(self, time: float, milestone_id: str) -> None:
        self.milestones.append(MilestoneEvent(time=time, milestone_id=milestone_id))

    def record_reset(
        self, time: float, layer: str, reward_amount: float, run_duration: float
    ) -> None:
        self.resets.append(
            ResetEvent(
                time=time,
                layer=layer,
                reward_amount=reward_amount,
                run_duration=run_duration,
            )
        )
