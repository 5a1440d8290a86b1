"""Tests for MCP server tool functions."""
import json

import pytest

from signalsalvage.catalog import default_definition
from signalsalvage.persistence import MemoryStorage, SaveManager
from signalsalvage.runtime import GameRuntime

from signalsalvage.mcp.server import (
    _GameHolder,
    _parse_amount,
    _tool_beacon_reset,
    _tool_buy_generator,
    _tool_buy_upgrade,
    _tool_claim_milestone,
    _tool_export_save,
    _tool_get_available_purchases,
    _tool_get_game_info,
    _tool_get_game_state,
    _tool_import_save,
    _tool_new_game,
    _tool_prestige,
    _tool_scan,
    _tool_wait,
    create_server,
)


def _make_holder(storage=None) -> _GameHolder:
    defn = default_definition()
    manager = SaveManager(storage if storage is not None else MemoryStorage(), defn)
    return _GameHolder(definition=defn, runtime=GameRuntime(defn, manager, clock=lambda: 1000.0))


def test_get_game_info():
    info = _tool_get_game_info(_make_holder())
    assert info["name"] == "Signal & Salvage"
    assert len(info["generators"]) == 6
    assert len(info["catalogs"]["upgrades"]) == 20
    assert len(info["catalogs"]["beacon_upgrades"]) == 4
    assert len(info["milestones"]) == 10
    assert info["buy_amounts"] == [1, 10, "max"]
    json.dumps(info)


def test_get_game_state():
    state = _tool_get_game_state(_make_holder())
    assert state["currencies"]["signal"] == 0.0
    assert state["rates"]["click_power"] == 1.0
    assert state["prestige"]["available"] is False
    assert state["beacon"]["projected_fragments"] == 0
    assert state["claimable_milestones"] == []
    json.dumps(state)


def test_scan():
    holder = _make_holder()
    result = _tool_scan(holder, 10)
    assert result["total_earned"] == 10.0
    assert result["signal"] == 10.0
    assert "error" in _tool_scan(holder, 0)
    assert "error" in _tool_scan(holder, 1001)


def test_buy_generator():
    holder = _make_holder()
    assert _tool_buy_generator(holder, "scanner") == {"success": False, "reason": "Cannot afford"}
    _tool_scan(holder, 40)
    result = _tool_buy_generator(holder, "scanner", "max")
    assert result["success"]
    assert result["bought"] == 2
    assert result["new_count"] == 2
    assert result["spent"] == pytest.approx(32.25)


def test_buy_generator_errors():
    holder = _make_holder()
    assert "Unknown generator" in _tool_buy_generator(holder, "ghost")["error"]
    assert "error" in _tool_buy_generator(holder, "scanner", 0)
    assert "error" in _tool_buy_generator(holder, "scanner", "lots")


def test_parse_amount():
    assert _parse_amount(3) == 3
    assert _parse_amount("10") == 10
    assert _parse_amount(" MAX ") == "max"
    assert _parse_amount(True) is None
    assert _parse_amount("1.5") is None


def test_buy_upgrade():
    holder = _make_holder()
    result = _tool_buy_upgrade(holder, "better_antenna")
    assert result["success"] is False
    assert "Cannot afford" in result["reason"]
    _tool_scan(holder, 40)
    assert _tool_buy_upgrade(holder, "better_antenna") == {
        "success": True, "id": "better_antenna", "new_level": 1,
    }
    assert _tool_buy_upgrade(holder, "better_antenna")["reason"] == "Already at max level"


def test_buy_upgrade_errors():
    holder = _make_holder()
    assert "Unknown catalog" in _tool_buy_upgrade(holder, "x", "shop")["error"]
    assert "Unknown" in _tool_buy_upgrade(holder, "ghost")["error"]
    result = _tool_buy_upgrade(holder, "unlock_buy_max")
    assert result["reason"] == "Not available (requirements not met)"


def test_buy_relay_protocol_catalog():
    holder = _make_holder()
    result = _tool_buy_upgrade(holder, "boot_sequence_cache", "relay_protocols")
    assert result["reason"] == "Cannot afford (relay_energy)"


def test_claim_milestone():
    holder = _make_holder()
    assert "error" in _tool_claim_milestone(holder, "ghost")
    assert _tool_claim_milestone(holder, "m_first_scan")["reason"] == "Condition not met"
    _tool_scan(holder, 100)
    result = _tool_claim_milestone(holder, "m_first_scan")
    assert result["success"]
    assert result["dp_gained"] == 3.0
    assert _tool_claim_milestone(holder, "m_first_scan")["reason"] == "Already claimed"


def test_wait():
    holder = _make_holder()
    assert "error" in _tool_wait(holder, 0)
    assert "error" in _tool_wait(holder, 100_000)
    _tool_scan(holder, 15)
    _tool_buy_generator(holder, "scanner")
    result = _tool_wait(holder, 10)
    assert result["time_elapsed"] == 10.0
    assert result["currencies"]["signal"] > 0


def test_wait_reports_auto_claimed_findings():
    holder = _make_holder()
    holder.runtime.state = holder.runtime.get_state().replace(auto_claim_findings=True)
    _tool_scan(holder, 100)
    result = _tool_wait(holder, 1)
    assert result["new_milestones"] == ["m_first_scan"]


def test_available_purchases():
    holder = _make_holder()
    _tool_scan(holder, 20)
    purchases = {p["id"]: p for p in _tool_get_available_purchases(holder)["purchases"]}
    assert purchases["scanner"]["affordable"]
    assert purchases["scanner"]["buy_max"] == 1
    assert purchases["scanner"]["time_to_afford"] == 0.0
    assert purchases["dish"]["time_to_afford"] is None
    assert "unlock_buy_max" not in purchases


def test_resets_unavailable():
    holder = _make_holder()
    assert _tool_prestige(holder)["reason"] == "Relay reset not available"
    assert _tool_beacon_reset(holder)["reason"] == "Beacon reset not available"


def test_prestige():
    holder = _make_holder()
    state = holder.runtime.get_state()
    holder.runtime.state = state.replace(generators={**state.generators, "correlator": 1})
    result = _tool_prestige(holder)
    assert result["success"]
    assert result["relays_gained"] == 1
    assert result["relay_energy"] == 1.0


def test_export_import():
    holder = _make_holder()
    _tool_scan(holder, 25)
    text = _tool_export_save(holder)["save"]

    other = _make_holder()
    assert _tool_import_save(other, text)["success"]
    assert other.runtime.get_state().signal == 25.0
    assert _tool_import_save(other, "garbage") == {"success": False, "reason": "Invalid save text"}


def test_new_game():
    storage = MemoryStorage()
    holder = _make_holder(storage)
    _tool_scan(holder, 50)
    _tool_wait(holder, 5)
    holder.runtime.save()
    result = _tool_new_game(holder)
    assert result["success"]
    assert holder.time_elapsed == 0.0
    assert holder.runtime.get_state().signal == 0.0
    assert storage.slots == {}


def test_create_server():
    server = create_server()
    assert server.name.startswith("Signal & Salvage")
