"""Tests for definition and catalog modules."""
import warnings

import pytest

from signalsalvage._types import Catalog, CurrencyType
from signalsalvage.catalog import AUTOMATION_UPGRADES, default_definition, define_game
from signalsalvage.definition import BalanceConfig, GameConfig, GameDefinition
from signalsalvage.effect import Effect
from signalsalvage.generator import GeneratorDef
from signalsalvage.milestone import MilestoneDef
from signalsalvage.upgrade import UpgradeDef


def _make_definition(**kwargs) -> GameDefinition:
    kwargs.setdefault("generators", [GeneratorDef("miner", base_cost=10, cost_growth=1.1, base_rate=1)])
    return GameDefinition(
        config=GameConfig(name="Test", balance=BalanceConfig(relay_unlock_generator="miner")),
        **kwargs,
    )


def test_default_definition_counts():
    defn = default_definition()
    assert len(defn.generators) == 6
    assert len(defn.upgrades) == 20
    assert len(defn.relay_protocols) == 5
    assert len(defn.relay_upgrades) == 7
    assert len(defn.beacon_upgrades) == 4
    assert len(defn.milestones) == 10


def test_default_definition_is_valid_without_warnings():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert define_game().validate() == []


def test_default_definition_is_cached():
    assert default_definition() is default_definition()


def test_generators_declared_cheapest_first():
    costs = [g.base_cost for g in default_definition().generators]
    assert costs == sorted(costs)
    assert default_definition().generator_ids[0] == "scanner"
    assert default_definition().generator_ids[-1] == "correlator"


def test_catalog_currencies():
    defn = default_definition()
    for item in defn.relay_protocols:
        assert item.currency is CurrencyType.RELAY_ENERGY
    for item in defn.relay_upgrades:
        assert item.currency is CurrencyType.RELAYS
    for item in defn.beacon_upgrades:
        assert item.currency is CurrencyType.NETWORK_FRAGMENTS
        assert item.max_level is not None
    dp_ids = {u.id for u in defn.upgrades if u.currency is CurrencyType.DP}
    assert dp_ids == {"cataloged_patterns", "signal_mapping", "passive_research", "probe_blueprints"}


def test_lookups():
    defn = default_definition()
    assert defn.get_generator("dish").base_cost == 120
    assert defn.get_generator("nope") is None
    assert defn.get_upgrade("better_antenna").cost == 40
    assert defn.get_item(Catalog.RELAY_PROTOCOLS, "persistent_scripts").cost == 3
    assert defn.get_item(Catalog.UPGRADES, "persistent_scripts") is None
    assert defn.get_milestone("m_deep_archive").dp_reward == 30


def test_automation_upgrades_exist():
    defn = default_definition()
    for upgrade_id in AUTOMATION_UPGRADES:
        assert defn.get_upgrade(upgrade_id) is not None


def test_duplicate_ids():
    defn = _make_definition(
        generators=[
            GeneratorDef("miner", base_cost=10, cost_growth=1.1),
            GeneratorDef("miner", base_cost=20, cost_growth=1.1),
        ],
        milestones=[MilestoneDef("m"), MilestoneDef("m")],
    )
    errors = defn.validate()
    assert any("Duplicate generator ID" in e for e in errors)
    assert any("Duplicate milestone ID" in e for e in errors)


def test_unknown_relay_unlock_generator():
    defn = GameDefinition(generators=[GeneratorDef("miner", base_cost=10, cost_growth=1.1)])
    errors = defn.validate()
    assert any("'correlator'" in e for e in errors)


def test_wrong_catalog_currency():
    defn = _make_definition(
        relay_protocols=[UpgradeDef("p", cost=1, currency=CurrencyType.SIGNAL)],
    )
    errors = defn.validate()
    assert any("priced in 'signal'" in e for e in errors)


def test_effect_targets_unknown_generator():
    defn = _make_definition(
        upgrades=[UpgradeDef("u", cost=1, effects=(Effect.generator_mult("ghost", 2),))],
    )
    errors = defn.validate()
    assert any("unknown generator 'ghost'" in e for e in errors)


def test_retain_unknown_upgrade():
    defn = _make_definition(
        relay_protocols=[
            UpgradeDef(
                "keep", cost=1, currency=CurrencyType.RELAY_ENERGY,
                effects=(Effect.retain_on_prestige("ghost"),),
            )
        ],
    )
    errors = defn.validate()
    assert any("retains unknown upgrade 'ghost'" in e for e in errors)


def test_flat_generator_growth_warns():
    defn = _make_definition(generators=[GeneratorDef("miner", base_cost=10, cost_growth=1.0)])
    with pytest.warns(UserWarning, match="cost_growth"):
        assert defn.validate() == []


def test_unbounded_flat_repeatable_warns():
    defn = _make_definition(upgrades=[UpgradeDef("u", cost=1, repeatable=True)])
    with pytest.warns(UserWarning, match="does not grow"):
        defn.validate()
