from __future__ import annotations

from dataclasses import dataclass, field

from signalsalvage.metrics import (
    CurrencySnapshot,
    MetricsCollector,
    MilestoneEvent,
    PurchaseEvent,
    ResetEvent,
)


@dataclass
class RunSummary:
    """One stretch of play between resets."""

    index: int
    start: float
    end: float
    purchases: int
    ended_by: str | None = None  # reset layer, or None for the final run
    reward_amount: float = 0.0

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass
class SimulationReport:
    """Simulation results plus pacing figures split by reset runs."""

    strategy_description: str = ""
    terminal_description: str = ""
    outcome: str = ""
    total_time: float = 0.0

    currency_snapshots: list[CurrencySnapshot] = field(default_factory=list)
    purchases: list[PurchaseEvent] = field(default_factory=list)
    milestones: list[MilestoneEvent] = field(default_factory=list)
    resets: list[ResetEvent] = field(default_factory=list)

    runs: list[RunSummary] = field(default_factory=list)
    first_reset_times: dict[str, float] = field(default_factory=dict)
    milestone_times: dict[str, float] = field(default_factory=dict)
    purchase_gaps: list[float] = field(default_factory=list)
    max_purchase_gap: float = 0.0
    mean_purchase_gap: float = 0.0
    purchases_per_minute: float = 0.0
    sanity_issues: list[str] = field(default_factory=list)

    def milestone_time(self, milestone_id: str) -> float | None:
        return self.milestone_times.get(milestone_id)

    def first_reset_time(self, layer: str) -> float | None:
        return self.first_reset_times.get(layer)

    def currency_series(self, currency: str) -> list[tuple[float, float]]:
        return [(s.time, s.value) for s in self.currency_snapshots if s.currency == currency]

    def rate_series(self, currency: str) -> list[tuple[float, float]]:
        return [(s.time, s.rate) for s in self.currency_snapshots if s.currency == currency]


def _split_runs(
    purchase_times: list[float], resets: list[ResetEvent], total_time: float
) -> tuple[list[RunSummary], list[float]]:
    """Cut the timeline at each reset.

    A reset starts pacing over, so the first gap of a run is measured from
    the reset rather than from the last purchase of the previous run.
    """
    runs: list[RunSummary] = []
    gaps: list[float] = []
    boundaries = [(r.time, r) for r in sorted(resets, key=lambda r: r.time)]
    boundaries.append((total_time, None))

    start = 0.0
    pending = iter(purchase_times)
    upcoming = next(pending, None)
    for index, (end, reset) in enumerate(boundaries):
        previous = start
        count = 0
        # Purchases on a reset tick belong to the run that the reset ends.
        while upcoming is not None and (upcoming <= end or reset is None):
            gaps.append(upcoming - previous)
            previous = upcoming
            count += 1
            upcoming = next(pending, None)
        runs.append(
            RunSummary(
                index=index,
                start=start,
                end=end,
                purchases=count,
                ended_by=reset.layer if reset is not None else None,
                reward_amount=reset.reward_amount if reset is not None else 0.0,
            )
        )
        start = end
    return runs, gaps


def build_report(
    collector: MetricsCollector,
    strategy_description: str,
    terminal_description: str,
    outcome: str,
    total_time: float,
    sanity_issues: list[str] | None = None,
) -> SimulationReport:
    """Build a SimulationReport from collected metrics."""
    # Findings survive resets, so only the first claim counts.
    milestone_times: dict[str, float] = {}
    for m in collector.milestones:
        milestone_times.setdefault(m.milestone_id, m.time)

    first_resets: dict[str, float] = {}
    for r in collector.resets:
        first_resets.setdefault(r.layer, r.time)

    runs, gaps = _split_runs(
        sorted(p.time for p in collector.purchases), collector.resets, total_time
    )
    ppm = (len(collector.purchases) / total_time * 60.0) if total_time > 0 else 0.0

    return SimulationReport(
        strategy_description=strategy_description,
        terminal_description=terminal_description,
        outcome=outcome,
        total_time=total_time,
        currency_snapshots=collector.currency_snapshots,
        purchases=collector.purchases,
        milestones=collector.milestones,
        resets=collector.resets,
        runs=runs,
        first_reset_times=first_resets,
        milestone_times=milestone_times,
        purchase_gaps=gaps,
        max_purchase_gap=max(gaps) if gaps else 0.0,
        mean_purchase_gap=(sum(gaps) / len(gaps)) if gaps else 0.0,
        purchases_per_minute=ppm,
        sanity_issues=list(sanity_issues or []),
    )
