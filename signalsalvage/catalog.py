"""Signal & Salvage content: generators, upgrades, relay and beacon items, findings."""

from __future__ import annotations

from functools import lru_cache

from signalsalvage._types import Catalog, CurrencyType
from signalsalvage.cost_scaling import CostScaling
from signalsalvage.definition import GameConfig, GameDefinition
from signalsalvage.effect import Effect
from signalsalvage.generator import GeneratorDef
from signalsalvage.milestone import MilestoneDef
from signalsalvage.requirement import Req
from signalsalvage.upgrade import UpgradeDef

SIGNAL = CurrencyType.SIGNAL
DP = CurrencyType.DP

# Base upgrades kept across a relay reset when Persistent Scripts is owned.
AUTOMATION_UPGRADES = ("unlock_buy_max", "auto_scan_daemon_1", "auto_scan_daemon_2")


def _generators() -> list[GeneratorDef]:
    return [
        GeneratorDef("scanner", "Handheld Scanner", 15, 1.15, 0.2),
        GeneratorDef("dish", "Dish Array", 120, 1.16, 1.4),
        GeneratorDef("sifter", "Signal Sifter", 1_100, 1.17, 8),
        GeneratorDef("probe", "Deep-Space Probe", 12_000, 1.18, 47),
        GeneratorDef("supercomputer", "Orbital Supercomputer", 175_000, 1.19, 290),
        GeneratorDef("correlator", "Quantum Correlator", 3_500_000, 1.205, 2200),
    ]


def _mk_tiers(generator_id: str, name: str, tiers: list[tuple[float, int]]) -> list[UpgradeDef]:
    """Tripling upgrades for one generator; each tier needs the previous one."""
    result: list[UpgradeDef] = []
    previous: str | None = None
    for index, (cost, owned) in enumerate(tiers, start=2):
        upgrade_id = f"{generator_id}_mk{index}"
        requirement = Req.generator_count(generator_id, ">=", owned)
        if previous is not None:
            requirement = requirement & Req.upgrade_owned(previous)
        result.append(
            UpgradeDef(
                upgrade_id,
                f"{name} Mk {'I' * index}",
                f"{name} output x3.",
                cost=cost,
                requirement=requirement,
                effects=(Effect.generator_mult(generator_id, 3),),
            )
        )
        previous = upgrade_id
    return result


def _upgrades() -> list[UpgradeDef]:
    return [
        UpgradeDef(
            "better_antenna", "Better Antenna", "Double manual scan output.",
            cost=40, effects=(Effect.click_mult(2),),
        ),
        UpgradeDef(
            "narrowband_filter", "Narrowband Filter", "Manual scans x2 again.",
            cost=250, effects=(Effect.click_mult(2),),
        ),
        UpgradeDef(
            "burst_sampling", "Burst Sampling", "Manual scans gain +5% of passive SPS.",
            cost=2_200, effects=(Effect.click_rate_fraction(0.05),),
        ),
        UpgradeDef(
            "calibration_pass", "Calibration Pass", "Global production x1.5.",
            cost=600, effects=(Effect.global_mult(1.5),),
        ),
        UpgradeDef(
            "thermal_stabilizers", "Thermal Stabilizers", "Global production x1.8.",
            cost=7_000, effects=(Effect.global_mult(1.8),),
        ),
        UpgradeDef(
            "error_correcting", "Error-Correcting Codes", "Global production x2.",
            cost=85_000, effects=(Effect.global_mult(2),),
        ),
        UpgradeDef(
            "adaptive_gain_control", "Adaptive Gain Control", "Noise penalty is 40% weaker.",
            cost=350_000, effects=(Effect.noise_mitigation(0.4),),
        ),
        *_mk_tiers("dish", "Dish Array", [(1_500, 10), (40_000, 50)]),
        *_mk_tiers("probe", "Probe", [(180_000, 10), (2_000_000, 40)]),
        *_mk_tiers("supercomputer", "Supercomputer", [(1_250_000, 8), (18_000_000, 30)]),
        UpgradeDef(
            "unlock_buy_max", "Batch Procurement", "Unlock Buy 10 / Buy Max controls.",
            cost=8_500, requirement=Req.milestone("m_first_dish"),
            effects=(Effect.bulk_buy(),),
        ),
        UpgradeDef(
            "auto_scan_daemon_1", "Auto-Scan Daemon I", "Automatically performs 1 scan/sec.",
            cost=45_000, effects=(Effect.auto_scan(1),),
        ),
        UpgradeDef(
            "auto_scan_daemon_2", "Auto-Scan Daemon II", "Auto scan rate +4 scans/sec.",
            cost=380_000, requirement=Req.upgrade_owned("auto_scan_daemon_1"),
            effects=(Effect.auto_scan(4),),
        ),
        UpgradeDef(
            "cataloged_patterns", "Cataloged Patterns", "Repeatable: +8% global production.",
            cost=4, currency=DP, repeatable=True,
            cost_scaling=CostScaling.exponential(1.12),
            effects=(Effect.global_mult(1.08),),
        ),
        UpgradeDef(
            "signal_mapping", "Signal Mapping", "Repeatable: +10% click power.",
            cost=6, currency=DP, repeatable=True,
            cost_scaling=CostScaling.exponential(1.1),
            effects=(Effect.click_mult(1.1),),
        ),
        UpgradeDef(
            "passive_research", "Passive Research Loop", "Repeatable: +0.08 passive DP/sec.",
            cost=7, currency=DP, repeatable=True,
            cost_scaling=CostScaling.exponential(1.14),
            effects=(Effect.passive_dp(0.08),),
        ),
        UpgradeDef(
            "probe_blueprints", "Probe Blueprints", "Deep-Space Probes cost 12% less.",
            cost=20, currency=DP,
            requirement=Req.owns("probe") | Req.total_signal(">", 250_000),
            effects=(Effect.generator_cost_mult(0.88, "probe"),),
        ),
    ]


def _relay_protocols() -> list[UpgradeDef]:
    energy = CurrencyType.RELAY_ENERGY
    return [
        UpgradeDef(
            "boot_sequence_cache", "Boot Sequence Cache", "Start each run with +1 Handheld Scanner.",
            cost=1, currency=energy, effects=(Effect.start_generators("scanner", 1),),
        ),
        UpgradeDef(
            "accelerated_sampling", "Accelerated Sampling", "Manual scan click power +15%.",
            cost=1, currency=energy, effects=(Effect.click_mult(1.15),),
        ),
        UpgradeDef(
            "preloaded_coordinates", "Preloaded Coordinates", "Start each run with +200 signal.",
            cost=2, currency=energy, effects=(Effect.start_signal(200),),
        ),
        UpgradeDef(
            "relay_synchronization", "Relay Synchronization", "Generator production +5%.",
            cost=2, currency=energy, effects=(Effect.global_mult(1.05),),
        ),
        UpgradeDef(
            "persistent_scripts", "Persistent Scripts",
            "Keep buy controls and auto-scan upgrades on Relay reset.",
            cost=3, currency=energy,
            effects=(Effect.retain_on_prestige(*AUTOMATION_UPGRADES),),
        ),
    ]


def _relay_upgrades() -> list[UpgradeDef]:
    relays = CurrencyType.RELAYS

    def _unlock(tier_relays: int):
        return Req.total_relays(">=", tier_relays)

    return [
        UpgradeDef(
            "relay_efficiency", "Relay Efficiency", "Repeatable: Relays are 5% more effective.",
            cost=1, currency=relays, repeatable=True,
            cost_scaling=CostScaling.exponential(1.35), tier=1,
            requirement=_unlock(0), effects=(Effect.relay_efficiency(0.05),),
        ),
        UpgradeDef(
            "lean_procurement", "Lean Procurement", "Scanners and Dishes cost 10% less.",
            cost=2, currency=relays, tier=1, requirement=_unlock(0),
            effects=(Effect.generator_cost_mult(0.9, "scanner", "dish"),),
        ),
        UpgradeDef(
            "finding_archive", "Finding Archive", "Discovery Point rewards from findings +25%.",
            cost=4, currency=relays, tier=2, requirement=_unlock(5),
            effects=(Effect.milestone_reward_mult(1.25),),
        ),
        UpgradeDef(
            "spectral_refinement", "Spectral Refinement", "Noise grows 12% slower.",
            cost=5, currency=relays, tier=2, requirement=_unlock(5),
            effects=(Effect.noise_mult(0.88),),
        ),
        UpgradeDef(
            "autonomous_scanners", "Autonomous Scanner Swarm", "Auto scans perform +1.5 scans/sec.",
            cost=6, currency=relays, tier=2, requirement=_unlock(5),
            effects=(Effect.auto_scan(1.5),),
        ),
        UpgradeDef(
            "resonant_interface", "Resonant Interface", "Structural: manual scans gain +2% of SPS.",
            cost=10, currency=relays, tier=3, requirement=_unlock(15),
            effects=(Effect.click_rate_fraction(0.02),),
        ),
        UpgradeDef(
            "forward_outpost", "Forward Outpost", "Structural: start each run with +1 Dish Array.",
            cost=12, currency=relays, tier=3, requirement=_unlock(15),
            effects=(Effect.start_generators("dish", 1),),
        ),
    ]


def _beacon_upgrades() -> list[UpgradeDef]:
    fragments = CurrencyType.NETWORK_FRAGMENTS
    return [
        UpgradeDef(
            "signal_echo", "Signal Echo", "Repeatable: early generator costs -6%.",
            cost=1, currency=fragments, repeatable=True,
            cost_scaling=CostScaling.exponential(1.8), max_level=6,
            effects=(Effect.generator_cost_mult(0.94, "scanner", "dish", "sifter"),),
        ),
        UpgradeDef(
            "archive_persistence", "Archive Persistence",
            "Repeatable: +0.12 passive DP/sec after resets.",
            cost=1, currency=fragments, repeatable=True,
            cost_scaling=CostScaling.exponential(1.7), max_level=8,
            effects=(Effect.passive_dp(0.12),),
        ),
        UpgradeDef(
            "network_memory", "Network Memory",
            "Repeatable: gain +1 bonus Relay Energy on each Relay reset.",
            cost=2, currency=fragments, repeatable=True,
            cost_scaling=CostScaling.exponential(2), max_level=5,
            effects=(Effect.relay_energy_bonus(1),),
        ),
        UpgradeDef(
            "quantum_index", "Quantum Index", "Repeatable: relay upgrade costs -8%.",
            cost=2, currency=fragments, repeatable=True,
            cost_scaling=CostScaling.exponential(2.2), max_level=5,
            effects=(Effect.catalog_cost_mult(Catalog.RELAY_UPGRADES.value, 0.92),),
        ),
    ]


def _milestones() -> list[MilestoneDef]:
    return [
        MilestoneDef("m_first_scan", "First Contact", "Reach 100 total signal earned.",
                     3, Req.total_signal(">=", 100)),
        MilestoneDef("m_first_gen", "Basic Toolkit", "Own 1 Handheld Scanner.",
                     3, Req.owns("scanner")),
        MilestoneDef("m_first_dish", "Dish Online", "Own 1 Dish Array.",
                     4, Req.owns("dish")),
        MilestoneDef("m_dish_field", "Array Field", "Own 25 Dish Arrays.",
                     7, Req.generator_count("dish", ">=", 25)),
        MilestoneDef("m_probe_launch", "Probe Launch", "Own 1 Deep-Space Probe.",
                     8, Req.owns("probe")),
        MilestoneDef("m_supercomputer", "Orbital Think Tank", "Own 1 Orbital Supercomputer.",
                     11, Req.owns("supercomputer")),
        MilestoneDef("m_big_signal", "Signal Surge", "Reach 1e8 total signal earned.",
                     13, Req.total_signal(">=", 1e8)),
        MilestoneDef("m_noise_research", "Noise Anthropology", "Reach 30 noise.",
                     7, Req.noise(">=", 30)),
        MilestoneDef("m_correlator_sync", "Correlator Sync", "Own 1 Quantum Correlator.",
                     18, Req.owns("correlator")),
        MilestoneDef("m_deep_archive", "Deep Archive", "Reach 1e12 total signal earned.",
                     30, Req.total_signal(">=", 1e12)),
    ]


def define_game() -> GameDefinition:
    """Build the full Signal & Salvage definition."""
    return GameDefinition(
        config=GameConfig(name="Signal & Salvage"),
        generators=_generators(),
        upgrades=_upgrades(),
        relay_protocols=_relay_protocols(),
        relay_upgrades=_relay_upgrades(),
        beacon_upgrades=_beacon_upgrades(),
        milestones=_milestones(),
    )


@lru_cache(maxsize=1)
def default_definition() -> GameDefinition:
    """The process-wide definition, built on first use."""
    return define_game()
