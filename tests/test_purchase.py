"""Tests for purchase module."""
from signalsalvage._types import Catalog, CurrencyType
from signalsalvage.actions import BuyGenerator, BuyRelayProtocol, BuyUpgrade
from signalsalvage.catalog import default_definition
from signalsalvage.purchase import GENERATOR, buy_action, list_purchases
from signalsalvage.reducer import reduce
from signalsalvage.state import initial_state

DEFN = default_definition()


def test_fresh_listing():
    state = initial_state(DEFN, now=0.0)
    options = list_purchases(DEFN, state)
    ids = [o.id for o in options]
    assert ids[:6] == DEFN.generator_ids
    assert "better_antenna" in ids
    # Locked behind a finding or a relay tier.
    assert "unlock_buy_max" not in ids
    assert "finding_archive" not in ids
    assert all(not o.affordable for o in options)


def test_affordable_only():
    state = initial_state(DEFN, now=0.0).replace(signal=50.0)
    options = list_purchases(DEFN, state, affordable_only=True)
    assert {o.id for o in options} == {"scanner", "better_antenna"}


def test_maxed_items_are_hidden():
    state = initial_state(DEFN, now=0.0)
    state = state.replace(upgrades={**state.upgrades, "better_antenna": 1})
    assert "better_antenna" not in [o.id for o in list_purchases(DEFN, state)]


def test_option_fields():
    state = initial_state(DEFN, now=0.0).replace(relay_energy=2.0)
    by_id = {o.id: o for o in list_purchases(DEFN, state)}
    protocol = by_id["preloaded_coordinates"]
    assert protocol.kind == Catalog.RELAY_PROTOCOLS.value
    assert protocol.currency is CurrencyType.RELAY_ENERGY
    assert protocol.cost == 2
    assert protocol.affordable
    assert protocol.max_level == 1
    echo = by_id["signal_echo"]
    assert echo.max_level == 6
    assert by_id["cataloged_patterns"].max_level is None


def test_option_actions():
    state = initial_state(DEFN, now=0.0).replace(signal=100.0, relay_energy=1.0)
    by_id = {o.id: o for o in list_purchases(DEFN, state)}
    assert by_id["scanner"].action() == BuyGenerator("scanner", 1)
    assert by_id["better_antenna"].action() == BuyUpgrade("better_antenna")
    assert by_id["boot_sequence_cache"].action() == BuyRelayProtocol("boot_sequence_cache")
    after = reduce(DEFN, state, by_id["boot_sequence_cache"].action())
    assert after.relay_protocols["boot_sequence_cache"] == 1


def test_buy_action():
    assert buy_action(GENERATOR, "dish") == BuyGenerator("dish", 1)
    assert buy_action("upgrades", "better_antenna") == BuyUpgrade("better_antenna")
    assert buy_action("nonsense", "x") is None
