"""Tests for persistence module."""
import json
import logging

import pytest

from signalsalvage.catalog import default_definition
from signalsalvage.codec import serialize
from signalsalvage.persistence import FileStorage, MemoryStorage, SaveManager, SaveStorage
from signalsalvage.state import initial_state

DEFN = default_definition()
NOW = 1_700_000_000.0
SLOT = DEFN.engine.save_slot
LEGACY_SLOT = DEFN.engine.legacy_save_slot


class _BrokenStorage(SaveStorage):
    def read(self, key):
        return None

    def write(self, key, text):
        raise OSError("disk full")

    def delete(self, key):
        pass


def _state():
    base = initial_state(DEFN, now=NOW)
    return base.replace(signal=250.0, generators={**base.generators, "scanner": 3})


def test_memory_storage():
    storage = MemoryStorage({"a": "1"})
    assert storage.read("a") == "1"
    assert storage.read("b") is None
    storage.write("b", "2")
    assert storage.slots == {"a": "1", "b": "2"}
    storage.delete("a")
    storage.delete("missing")
    assert storage.slots == {"b": "2"}


def test_file_storage_round_trip(tmp_path):
    storage = FileStorage(tmp_path / "saves")
    assert storage.read("slot") is None
    storage.write("slot", "hello")
    assert storage.read("slot") == "hello"
    assert storage.path_for("slot") == tmp_path / "saves" / "slot.json"
    storage.write("slot", "again")
    assert storage.read("slot") == "again"
    assert [p.name for p in (tmp_path / "saves").iterdir()] == ["slot.json"]
    storage.delete("slot")
    storage.delete("slot")
    assert storage.read("slot") is None


def test_save_and_load():
    manager = SaveManager(MemoryStorage(), DEFN)
    assert manager.save(_state())
    assert manager.load(now=NOW) == _state()


def test_save_writes_current_slot():
    storage = MemoryStorage()
    SaveManager(storage, DEFN).save(_state())
    assert json.loads(storage.slots[SLOT])["signal"] == 250.0


def test_load_empty_returns_none():
    assert SaveManager(MemoryStorage(), DEFN).load(now=NOW) is None


def test_load_falls_back_to_legacy_slot(caplog):
    legacy = json.dumps({"relays": 4, "generators": {"dish": 2}, "upgrades": {"memory_of_void": 1}})
    manager = SaveManager(MemoryStorage({LEGACY_SLOT: legacy}), DEFN)
    with caplog.at_level(logging.INFO, logger="signalsalvage.persistence"):
        state = manager.load(now=NOW)
    assert state.generator_count("dish") == 2
    assert state.relay_energy == 4
    assert state.relay_protocols["boot_sequence_cache"] == 1
    assert "legacy" in caplog.text


def test_current_slot_wins_over_legacy():
    legacy = json.dumps({"generators": {"dish": 2}, "upgrades": {}})
    storage = MemoryStorage({LEGACY_SLOT: legacy, SLOT: serialize(_state())})
    assert SaveManager(storage, DEFN).load(now=NOW) == _state()


def test_unreadable_save_logs_warning(caplog):
    manager = SaveManager(MemoryStorage({SLOT: "{corrupt"}), DEFN)
    with caplog.at_level(logging.WARNING, logger="signalsalvage.persistence"):
        assert manager.load(now=NOW) is None
    assert "unreadable" in caplog.text


def test_save_failure_returns_false(caplog):
    manager = SaveManager(_BrokenStorage(), DEFN)
    with caplog.at_level(logging.ERROR, logger="signalsalvage.persistence"):
        assert manager.save(_state()) is False
    assert "Failed to write" in caplog.text


def test_export_import():
    manager = SaveManager(MemoryStorage(), DEFN)
    text = manager.export_text(_state())
    assert manager.import_text(text, now=NOW) == _state()
    assert manager.import_text("garbage", now=NOW) is None


def test_clear_removes_both_slots():
    storage = MemoryStorage({SLOT: "a", LEGACY_SLOT: "b", "other": "c"})
    SaveManager(storage, DEFN).clear()
    assert storage.slots == {"other": "c"}


def test_file_backed_manager(tmp_path):
    manager = SaveManager(FileStorage(tmp_path), DEFN)
    manager.save(_state())
    reopened = SaveManager(FileStorage(tmp_path), DEFN)
    assert reopened.load(now=NOW) == _state()
    reopened.clear()
    assert not any(tmp_path.iterdir())
