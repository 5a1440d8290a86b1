"""Tests for simulation, strategy, terminal and report modules."""
import pytest

from signalsalvage._types import CurrencyType
from signalsalvage.catalog import default_definition
from signalsalvage.definition import BalanceConfig, GameConfig, GameDefinition
from signalsalvage.generator import GeneratorDef
from signalsalvage.metrics import MetricsCollector
from signalsalvage.purchase import GENERATOR, list_purchases
from signalsalvage.report import build_report
from signalsalvage.simulation import Simulation
from signalsalvage.state import initial_state
from signalsalvage.strategy import STRATEGY_REGISTRY, GreedyCheapest, PriorityList
from signalsalvage.terminal import SimulationContext, Terminal

DEFN = default_definition()


def _make_relay_game() -> GameDefinition:
    """One cheap generator that also unlocks the relay reset."""
    return GameDefinition(
        config=GameConfig(name="Relay Test", balance=BalanceConfig(relay_unlock_generator="scanner")),
        generators=[GeneratorDef("scanner", base_cost=10, cost_growth=1.15, base_rate=1)],
    )


# ── Strategies ───────────────────────────────────────────────────────


def test_greedy_rejects_unknown_prestige_mode():
    with pytest.raises(ValueError, match="prestige mode"):
        GreedyCheapest(prestige_mode="sometimes")


def test_greedy_sorts_by_cost():
    state = initial_state(DEFN, now=0.0).replace(signal=1e6, dp=100.0)
    affordable = list_purchases(DEFN, state, affordable_only=True)
    decided = GreedyCheapest().decide_purchases(state, affordable)
    costs = [o.cost for o in decided]
    assert costs == sorted(costs)


def test_priority_list_picks_first_unmet_target():
    state = initial_state(DEFN, now=0.0).replace(signal=1e6)
    affordable = list_purchases(DEFN, state, affordable_only=True)
    strategy = PriorityList([("better_antenna", 1), ("scanner", 5)])
    decided = strategy.decide_purchases(state, affordable)
    assert [o.id for o in decided] == ["better_antenna"]

    owned = state.replace(upgrades={**state.upgrades, "better_antenna": 1})
    affordable = list_purchases(DEFN, owned, affordable_only=True)
    assert [o.id for o in strategy.decide_purchases(owned, affordable)] == ["scanner"]


def test_priority_list_fallback():
    state = initial_state(DEFN, now=0.0).replace(signal=1e6)
    affordable = list_purchases(DEFN, state, affordable_only=True)
    assert PriorityList([]).decide_purchases(state, affordable) == []
    with_fallback = PriorityList([], fallback=GreedyCheapest())
    assert with_fallback.decide_purchases(state, affordable)
    assert with_fallback.enable_auto_claim


def test_registry():
    assert STRATEGY_REGISTRY["greedy_cheapest"] is GreedyCheapest
    assert STRATEGY_REGISTRY["priority_list"] is PriorityList


# ── Terminal conditions ──────────────────────────────────────────────


def test_terminal_conditions():
    state = initial_state(DEFN, now=0.0).replace(
        signal=50.0, total_signal_earned=500.0, total_relays_earned=2.0,
        milestones_claimed=("m_first_scan",),
    )
    ctx = SimulationContext(time_elapsed=100.0, last_purchase_time=30.0)
    assert Terminal.time(100).is_met(state, ctx)
    assert not Terminal.time(101).is_met(state, ctx)
    assert Terminal.milestone("m_first_scan").is_met(state, ctx)
    assert not Terminal.milestone("m_first_dish").is_met(state, ctx)
    assert Terminal.currency(CurrencyType.SIGNAL, ">=", 50).is_met(state, ctx)
    assert Terminal.total_signal(500).is_met(state, ctx)
    assert Terminal.relays(2).is_met(state, ctx)
    assert not Terminal.relays(3).is_met(state, ctx)
    assert Terminal.stall(70).is_met(state, ctx)
    assert not Terminal.stall(71).is_met(state, ctx)
    assert Terminal.any(Terminal.time(1000), Terminal.relays(1)).is_met(state, ctx)
    assert not Terminal.all(Terminal.time(1000), Terminal.relays(1)).is_met(state, ctx)


def test_terminal_descriptions():
    assert Terminal.time(60).describe() == "time(60)"
    assert Terminal.milestone("m").describe() == 'milestone("m")'
    combined = Terminal.any(Terminal.time(1), Terminal.relays(2))
    assert combined.describe() == "time(1) OR relays(2)"


# ── Simulation ───────────────────────────────────────────────────────


def test_invalid_simulation_arguments():
    with pytest.raises(ValueError, match="tick_resolution"):
        Simulation(DEFN, GreedyCheapest(), Terminal.time(10), tick_resolution=0)
    with pytest.raises(ValueError, match="Invalid GameDefinition"):
        Simulation(GameDefinition(), GreedyCheapest(), Terminal.time(10))


def test_idle_player_earns_nothing():
    report = Simulation(DEFN, GreedyCheapest(), Terminal.time(100)).run()
    assert report.outcome == "Terminal condition met"
    assert report.total_time == 100
    assert report.purchases == []
    assert report.currency_series("signal")[-1][1] == 0.0


def test_greedy_run():
    strategy = GreedyCheapest(scans_per_second=5)
    report = Simulation(DEFN, strategy, Terminal.time(300), seed=1).run()
    assert report.outcome == "Terminal condition met"
    assert report.total_time == 300
    assert len(report.purchases) > 5
    assert report.purchases[0].item_id == "scanner"
    assert report.purchases[0].kind == GENERATOR
    assert report.milestone_time("m_first_scan") is not None
    assert report.milestone_time("m_first_scan") <= report.milestone_time("m_first_dish")
    assert report.sanity_issues == []
    assert report.purchases_per_minute > 0


def test_milestone_terminal_stops_early():
    strategy = GreedyCheapest(scans_per_second=5)
    terminal = Terminal.any(Terminal.milestone("m_first_gen"), Terminal.time(600))
    report = Simulation(DEFN, strategy, terminal).run()
    assert report.outcome == "Terminal condition met"
    assert report.total_time < 600
    assert "m_first_gen" in report.milestone_times


def test_max_steps():
    sim = Simulation(DEFN, GreedyCheapest(), Terminal.time(1000), max_steps=10)
    report = sim.run()
    assert report.outcome == "Max steps reached"
    assert report.total_time == 10


def test_priority_list_run():
    strategy = PriorityList([("scanner", 3)], scans_per_second=10)
    report = Simulation(DEFN, strategy, Terminal.time(60)).run()
    assert [p.item_id for p in report.purchases] == ["scanner"] * 3


def test_seeded_fractional_scans_are_deterministic():
    def run(seed):
        strategy = GreedyCheapest(scans_per_second=0.7)
        report = Simulation(DEFN, strategy, Terminal.time(200), seed=seed).run()
        return [(p.time, p.item_id) for p in report.purchases]

    assert run(7) == run(7)
    assert run(7)


def test_relay_resets_are_recorded():
    strategy = GreedyCheapest(scans_per_second=5, prestige_mode="first_opportunity")
    report = Simulation(_make_relay_game(), strategy, Terminal.relays(3), seed=3).run()
    assert report.outcome == "Terminal condition met"
    assert len(report.resets) == 3
    assert all(r.layer == "relay" for r in report.resets)
    assert all(r.reward_amount == 1 for r in report.resets)
    assert len(report.runs) == 4
    assert [r.ended_by for r in report.runs[:3]] == ["relay"] * 3


def test_auto_buy_updates_context():
    defn = DEFN
    sim = Simulation(defn, GreedyCheapest(auto_buy=True), Terminal.time(5))
    sim.state = sim.state.replace(
        signal=100.0, upgrades={**sim.state.upgrades, "unlock_buy_max": 1}
    )
    sim.run()
    assert sim.state.auto_buy_enabled
    assert sim.state.generator_count("scanner") > 0
    assert sim.context.last_purchase_time > 0


# ── Report ───────────────────────────────────────────────────────────


def test_build_report_gaps():
    collector = MetricsCollector()
    collector.record_purchase(10.0, GENERATOR, "scanner", 15, "signal")
    collector.record_purchase(25.0, GENERATOR, "scanner", 17.25, "signal")
    collector.record_purchase(30.0, "upgrades", "better_antenna", 40, "signal")
    collector.record_milestone(12.0, "m_first_gen")
    report = build_report(collector, "s", "t", "done", total_time=60.0, sanity_issues=["x"])
    assert report.purchase_gaps == [10.0, 15.0, 5.0]
    assert report.max_purchase_gap == 15.0
    assert report.mean_purchase_gap == pytest.approx(10.0)
    assert report.purchases_per_minute == pytest.approx(3.0)
    assert report.milestone_time("m_first_gen") == 12.0
    assert report.sanity_issues == ["x"]


def test_build_report_splits_runs_at_resets():
    collector = MetricsCollector()
    for t in (5.0, 20.0, 45.0, 52.0, 90.0):
        collector.record_purchase(t, GENERATOR, "scanner", 15, "signal")
    collector.record_milestone(8.0, "m_first_gen")
    collector.record_milestone(60.0, "m_first_gen")
    collector.record_reset(40.0, "relay", 1, 40.0)
    collector.record_reset(80.0, "beacon", 2, 40.0)
    report = build_report(collector, "s", "t", "done", total_time=100.0)

    assert [(r.start, r.end, r.purchases, r.ended_by) for r in report.runs] == [
        (0.0, 40.0, 2, "relay"),
        (40.0, 80.0, 2, "beacon"),
        (80.0, 100.0, 1, None),
    ]
    assert report.runs[1].reward_amount == 2
    assert report.runs[2].duration == 20.0
    # Each run's first gap is measured from its reset.
    assert report.purchase_gaps == [5.0, 15.0, 5.0, 7.0, 10.0]
    assert report.first_reset_time("relay") == 40.0
    assert report.first_reset_time("beacon") == 80.0
    assert report.milestone_time("m_first_gen") == 8.0


def test_snapshot_interval():
    collector = MetricsCollector(snapshot_interval=10.0)
    state = initial_state(DEFN, now=0.0)
    for t in range(0, 30):
        collector.record_tick(float(t), state, {"signal": 1.0})
    times = sorted({s.time for s in collector.currency_snapshots})
    assert times == [0.0, 10.0, 20.0]
    assert len(collector.currency_snapshots) == 3 * len(CurrencyType)
