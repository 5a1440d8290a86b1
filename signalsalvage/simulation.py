from __future__ import annotations

import math
import random

from signalsalvage._types import CurrencyType
from signalsalvage.actions import (
    Action,
    BeaconReset,
    ClaimMilestone,
    ManualScan,
    Prestige,
    Tick,
    ToggleAutoBuy,
    ToggleAutoClaim,
)
from signalsalvage.catalog import default_definition
from signalsalvage.definition import GameDefinition
from signalsalvage.economy import (
    beacon_projection,
    can_claim_milestone,
    passive_dp_per_second,
    prestige_gain,
    run_sanity_checks,
    signal_per_second,
)
from signalsalvage.metrics import MetricsCollector
from signalsalvage.purchase import list_purchases
from signalsalvage.reducer import reduce, verify_beacon_reset, verify_prestige_reset
from signalsalvage.report import SimulationReport, build_report
from signalsalvage.state import GameState, initial_state
from signalsalvage.strategy import Strategy
from signalsalvage.terminal import SimulationContext, TerminalCondition

MAX_STEPS = 10_000_000


class Simulation:
    """Plays a definition headlessly, only through ``reduce``."""

    def __init__(
        self,
        definition: GameDefinition | None,
        strategy: Strategy,
        terminal: TerminalCondition,
        tick_resolution: float = 1.0,
        seed: int | None = None,
        start_time: float = 0.0,
        max_steps: int = MAX_STEPS,
    ) -> None:
        definition = definition or default_definition()
        errors = definition.validate()
        if errors:
            raise ValueError(
                "Invalid GameDefinition:\n" + "\n".join(f"  - {e}" for e in errors)
            )
        if tick_resolution <= 0:
            raise ValueError("tick_resolution must be positive")

        self.definition = definition
        self.strategy = strategy
        self.terminal = terminal
        self.tick_resolution = tick_resolution
        self.start_time = start_time
        self.max_steps = max_steps

        self.rng = random.Random(seed)
        self.state: GameState = initial_state(definition, start_time)
        self.collector = MetricsCollector(snapshot_interval=tick_resolution)
        self.context = SimulationContext()
        self._run_started = 0.0

    def dispatch(self, action: Action) -> bool:
        """Apply *action*; True when it changed the state."""
        updated = reduce(self.definition, self.state, action)
        changed = updated is not self.state
        self.state = updated
        return changed

    def run(self) -> SimulationReport:
        if self.strategy.enable_auto_claim and not self.state.auto_claim_findings:
            self.dispatch(ToggleAutoClaim())
        if self.strategy.enable_auto_buy and not self.state.auto_buy_enabled:
            self.dispatch(ToggleAutoBuy())

        milestones_seen = set(self.state.milestones_claimed)
        steps = 0

        while not self.terminal.is_met(self.state, self.context):
            steps += 1
            if steps > self.max_steps:
                break

            # 1. Advance time
            self._advance(self.tick_resolution)

            # 2. Manual scans
            for _ in range(self._scan_count()):
                self.dispatch(ManualScan())

            # 3. Purchases
            self._purchase()

            # 4. Findings the auto-claim toggle did not take
            for mdef in self.definition.milestones:
                if can_claim_milestone(self.definition, self.state, mdef.id):
                    self.dispatch(ClaimMilestone(mdef.id))

            # 5. Resets
            self._maybe_reset()

            # 6. Record
            for mid in self.state.milestones_claimed:
                if mid not in milestones_seen:
                    milestones_seen.add(mid)
                    self.collector.record_milestone(self.context.time_elapsed, mid)
            self.collector.record_tick(self.context.time_elapsed, self.state, self._rates())

            if any(not math.isfinite(self.state.currency(c)) for c in CurrencyType):
                return self._build_report("Aborted: NaN/Inf detected")

        outcome = (
            "Terminal condition met"
            if self.terminal.is_met(self.state, self.context)
            else "Max steps reached"
        )
        return self._build_report(outcome)

    # ── Steps ────────────────────────────────────────────────────────

    def _advance(self, seconds: float) -> None:
        limit = self.definition.engine.max_tick_seconds
        owned_before = self.state.total_generators()
        remaining = seconds
        while remaining > 0:
            dt = min(remaining, limit)
            self.dispatch(Tick(dt))
            remaining -= dt
        self.context.time_elapsed += seconds
        # Auto-buy purchases happen inside the tick.
        if self.state.total_generators() > owned_before:
            self.context.last_purchase_time = self.context.time_elapsed

    def _scan_count(self) -> int:
        """Scans this step; the fractional part is resolved with the seeded RNG."""
        expected = max(0.0, self.strategy.scan_rate(self.state) * self.tick_resolution)
        whole = int(expected)
        if self.rng.random() < expected - whole:
            whole += 1
        return whole

    def _purchase(self) -> None:
        affordable = list_purchases(self.definition, self.state, affordable_only=True)
        for option in self.strategy.decide_purchases(self.state, affordable):
            if self.dispatch(option.action()):
                self.collector.record_purchase(
                    self.context.time_elapsed,
                    option.kind,
                    option.id,
                    option.cost,
                    option.currency.value,
                )
                self.context.last_purchase_time = self.context.time_elapsed
                self.context.total_purchases += 1

    def _maybe_reset(self) -> None:
        now = self.start_time + self.context.time_elapsed
        if self.strategy.should_beacon_reset(self.definition, self.state):
            reward = beacon_projection(self.definition, self.state)
            if self.dispatch(BeaconReset(now=now)):
                self._record_reset("beacon", reward)
                self.context.beacon_resets += 1
        elif self.strategy.should_prestige(self.definition, self.state):
            reward = prestige_gain(self.definition, self.state)
            if self.dispatch(Prestige(now=now)):
                self._record_reset("relay", reward)
                self.context.relay_resets += 1

    def _record_reset(self, layer: str, reward: float) -> None:
        time = self.context.time_elapsed
        self.collector.record_reset(time, layer, reward, time - self._run_started)
        self._run_started = time

    def _rates(self) -> dict[str, float]:
        return {
            CurrencyType.SIGNAL.value: signal_per_second(self.definition, self.state),
            CurrencyType.DP.value: passive_dp_per_second(self.definition, self.state),
        }

    def _sanity_issues(self) -> list[str]:
        issues = run_sanity_checks(self.definition, self.state)
        if not verify_prestige_reset(self.definition, self.state):
            issues.append("relay reset would break its invariants")
        if not verify_beacon_reset(self.definition, self.state):
            issues.append("beacon reset would break its invariants")
        return issues

    def _build_report(self, outcome: str) -> SimulationReport:
        return build_report(
            collector=self.collector,
            strategy_description=self.strategy.describe(),
            terminal_description=self.terminal.describe(),
            outcome=outcome,
            total_time=self.context.time_elapsed,
            sanity_issues=self._sanity_issues(),
        )
