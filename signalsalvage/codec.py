"""Save document codec.

A save is a flat JSON object whose keys are the camelCase names listed in
``FIELD_NAMES``; those names are the compatibility contract between
versions. Loading runs ``migrate_payload`` (legacy shapes -> current shape)
and then ``validate_payload`` (repair or reject) before a ``GameState`` is
built.
"""

from __future__ import annotations

import json
import math
import time
from typing import TYPE_CHECKING, Any

from signalsalvage._types import DEFAULT_TAB, TABS, Catalog, is_buy_amount
from signalsalvage.state import GameState

if TYPE_CHECKING:
    from signalsalvage.definition import GameDefinition

SAVE_VERSION = 2

# GameState attribute -> save document key.
FIELD_NAMES: dict[str, str] = {
    "signal": "signal",
    "total_signal_earned": "totalSignalEarned",
    "noise": "noise",
    "dp": "dp",
    "relays": "relays",
    "total_relays_earned": "totalRelaysEarned",
    "relay_energy": "relayEnergy",
    "network_fragments": "networkFragments",
    "beacons": "beacons",
    "generators": "generators",
    "upgrades": "upgrades",
    "relay_protocols": "relayProtocols",
    "relay_upgrades": "relayUpgrades",
    "beacon_upgrades": "beaconUpgrades",
    "milestones_claimed": "milestonesClaimed",
    "current_tab": "currentTab",
    "auto_claim_findings": "autoClaimFindings",
    "auto_buy_enabled": "autoBuyEnabled",
    "buy_amount": "buyAmount",
    "last_save_at": "lastSaveAt",
    "started_at": "startedAt",
}

_NUMBER_FIELDS = (
    "signal",
    "total_signal_earned",
    "noise",
    "dp",
    "relays",
    "total_relays_earned",
    "relay_energy",
    "network_fragments",
    "beacons",
)

_COUNT_FIELDS: dict[str, Catalog | None] = {
    "generators": None,
    "upgrades": Catalog.UPGRADES,
    "relay_protocols": Catalog.RELAY_PROTOCOLS,
    "relay_upgrades": Catalog.RELAY_UPGRADES,
    "beacon_upgrades": Catalog.BEACON_UPGRADES,
}

# Count tables without which a document is not treated as a save at all.
_REQUIRED_TABLES = ("generators", "upgrades")

# Version-1 saves kept these flat levels in ``upgrades``.
_LEGACY_UPGRADE_KEYS = ("memory_of_void", "persistent_scripts", "relay_amplification")

# Timestamps above this are taken to be milliseconds.
_MILLISECOND_THRESHOLD = 1e11


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _is_count(value: Any) -> bool:
    if isinstance(value, bool) or not _is_number(value):
        return False
    return value >= 0 and float(value).is_integer()


def _document_version(payload: dict[str, Any]) -> float:
    version = payload.get("saveVersion")
    return version if _is_number(version) else 1


def _legacy_level(upgrades: dict[str, Any], key: str) -> int:
    value = upgrades.get(key)
    return int(value) if _is_count(value) else 0


# ── Encode ───────────────────────────────────────────────────────────


def to_payload(state: GameState) -> dict[str, Any]:
    """The save document for *state* as a plain dict."""
    payload: dict[str, Any] = {"saveVersion": SAVE_VERSION}
    for attr, key in FIELD_NAMES.items():
        value = getattr(state, attr)
        if isinstance(value, dict):
            value = dict(value)
        elif isinstance(value, tuple):
            value = list(value)
        payload[key] = value
    return payload


def serialize(state: GameState) -> str:
    return json.dumps(to_payload(state))


# ── Migrate ──────────────────────────────────────────────────────────


def migrate_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """Upgrade a parsed save document to the current shape.

    Pure and idempotent. Values already present in the current shape always
    win over values synthesized from legacy fields.

    Rules for version-1 documents:

    - ``totalRelaysEarned`` and ``relayEnergy`` default to ``relays``.
    - ``networkFragments`` and ``beacons`` default to 0.
    - ``upgrades.memory_of_void > 0`` grants the ``boot_sequence_cache`` and
      ``preloaded_coordinates`` relay protocols.
    - ``upgrades.persistent_scripts > 0`` becomes the relay protocol of the
      same name.
    - ``upgrades.relay_amplification`` becomes the ``relay_efficiency``
      relay-upgrade level.
    - Millisecond timestamps are converted to seconds. Documents already
      stamped with the current ``saveVersion`` are left alone.
    """
    migrated = dict(payload)
    legacy_upgrades = payload.get("upgrades")
    upgrades = legacy_upgrades if isinstance(legacy_upgrades, dict) else {}

    relays = payload.get("relays")
    legacy_relays = relays if _is_number(relays) else 0
    for key, default in (
        ("totalRelaysEarned", legacy_relays),
        ("relayEnergy", legacy_relays),
        ("networkFragments", 0),
        ("beacons", 0),
    ):
        if not _is_number(payload.get(key)):
            migrated[key] = default

    void = _legacy_level(upgrades, "memory_of_void") > 0
    synthesized = {
        "relayProtocols": {
            "boot_sequence_cache": 1 if void else 0,
            "preloaded_coordinates": 1 if void else 0,
            "persistent_scripts": 1 if _legacy_level(upgrades, "persistent_scripts") > 0 else 0,
        },
        "relayUpgrades": {
            "relay_efficiency": _legacy_level(upgrades, "relay_amplification"),
        },
        "beaconUpgrades": {},
    }
    for key, defaults in synthesized.items():
        explicit = payload.get(key)
        migrated[key] = {**defaults, **(explicit if isinstance(explicit, dict) else {})}

    if isinstance(legacy_upgrades, dict):
        migrated["upgrades"] = {
            k: v for k, v in legacy_upgrades.items() if k not in _LEGACY_UPGRADE_KEYS
        }

    if _document_version(payload) < SAVE_VERSION:
        for key in ("lastSaveAt", "startedAt"):
            stamp = payload.get(key)
            if _is_number(stamp) and stamp > _MILLISECOND_THRESHOLD:
                migrated[key] = stamp / 1000.0

    migrated["saveVersion"] = SAVE_VERSION
    return migrated


# ── Validate ─────────────────────────────────────────────────────────


def validate_payload(
    payload: dict[str, Any], definition: GameDefinition, now: float | None = None
) -> GameState | None:
    """Build a ``GameState`` from a migrated document, or ``None``.

    Missing, invalid or negative currencies become 0, counts become 0 unless they are
    non-negative integers, unknown milestone ids are dropped and an unknown
    tab or buy amount falls back to its default. A document without the
    ``generators`` and ``upgrades`` tables is rejected.
    """
    if any(not isinstance(payload.get(FIELD_NAMES[t]), dict) for t in _REQUIRED_TABLES):
        return None
    if now is None:
        now = time.time()

    fields: dict[str, Any] = {}
    for attr in _NUMBER_FIELDS:
        value = payload.get(FIELD_NAMES[attr])
        fields[attr] = float(value) if _is_number(value) and value >= 0 else 0.0

    for attr, catalog in _COUNT_FIELDS.items():
        source = payload.get(FIELD_NAMES[attr])
        if not isinstance(source, dict):
            source = {}
        ids = (
            definition.generator_ids
            if catalog is None
            else [item.id for item in definition.catalog_items(catalog)]
        )
        fields[attr] = {
            id: int(source[id]) if _is_count(source.get(id)) else 0 for id in ids
        }

    claimed: list[str] = []
    raw_claimed = payload.get(FIELD_NAMES["milestones_claimed"])
    if isinstance(raw_claimed, list):
        for entry in raw_claimed:
            if (
                isinstance(entry, str)
                and definition.get_milestone(entry) is not None
                and entry not in claimed
            ):
                claimed.append(entry)
    fields["milestones_claimed"] = tuple(claimed)

    tab = payload.get(FIELD_NAMES["current_tab"])
    fields["current_tab"] = tab if isinstance(tab, str) and tab in TABS else DEFAULT_TAB
    fields["auto_claim_findings"] = payload.get(FIELD_NAMES["auto_claim_findings"]) is True
    fields["auto_buy_enabled"] = payload.get(FIELD_NAMES["auto_buy_enabled"]) is True
    amount = payload.get(FIELD_NAMES["buy_amount"])
    fields["buy_amount"] = amount if is_buy_amount(amount) else 1

    for attr in ("last_save_at", "started_at"):
        value = payload.get(FIELD_NAMES[attr])
        fields[attr] = float(value) if _is_number(value) else now

    return GameState(**fields)


# ── Decode ───────────────────────────────────────────────────────────


def deserialize(
    text: str, definition: GameDefinition, now: float | None = None
) -> GameState | None:
    """Parse, migrate and validate a save; ``None`` for anything unusable."""
    if not isinstance(text, str) or not text.strip():
        return None
    try:
        parsed = json.loads(text)
    except (ValueError, TypeError, RecursionError):
        return None
    if not isinstance(parsed, dict):
        return None
    return validate_payload(migrate_payload(parsed), definition, now)
