"""MCP server wrapping GameRuntime for interactive playtesting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mcp.server.fastmcp import FastMCP

from signalsalvage._types import BUY_AMOUNTS, TABS, Catalog, CurrencyType
from signalsalvage.actions import (
    BeaconReset,
    BuyGenerator,
    ClaimMilestone,
    ManualScan,
    Prestige,
    Tick,
)
from signalsalvage.catalog import default_definition
from signalsalvage.definition import GameDefinition
from signalsalvage.economy import (
    auto_scan_rate,
    beacon_projection,
    buy_max_count,
    can_beacon_reset,
    can_claim_milestone,
    can_prestige,
    click_power,
    global_multiplier,
    noise_penalty,
    passive_dp_per_second,
    prestige_gain,
    signal_per_second,
)
from signalsalvage.purchase import GENERATOR, buy_action, list_purchases
from signalsalvage.runtime import GameRuntime

# Maximum seconds per wait() call (24 hours)
_MAX_WAIT = 86400
# Maximum scans per scan() call
_MAX_SCANS = 1000


@dataclass
class _GameHolder:
    """Holds the active game definition and runtime."""

    definition: GameDefinition
    runtime: GameRuntime
    time_elapsed: float = 0.0


def _round(value: float, places: int = 2) -> float:
    return round(value, places)


def _parse_amount(amount: int | str) -> int | str | None:
    if isinstance(amount, bool):
        return None
    if isinstance(amount, int):
        return amount
    if isinstance(amount, str):
        text = amount.strip().lower()
        if text == "max":
            return "max"
        if text.isdigit():
            return int(text)
    return None


# ── Tool logic functions (testable without MCP protocol) ────────────


def _tool_get_game_info(holder: _GameHolder) -> dict[str, Any]:
    defn = holder.definition
    return {
        "name": defn.config.name,
        "generators": [
            {
                "id": g.id,
                "display_name": g.display_name,
                "base_cost": g.base_cost,
                "base_rate": g.base_rate,
            }
            for g in defn.generators
        ],
        "catalogs": {
            catalog.value: [
                {
                    "id": item.id,
                    "display_name": item.display_name,
                    "description": item.description,
                    "currency": item.currency.value,
                    "max_level": item.level_cap,
                }
                for item in defn.catalog_items(catalog)
            ]
            for catalog in Catalog
        },
        "milestones": [
            {"id": m.id, "display_name": m.display_name, "description": m.description}
            for m in defn.milestones
        ],
        "tabs": list(TABS),
        "buy_amounts": list(BUY_AMOUNTS),
    }


def _tool_get_game_state(holder: _GameHolder) -> dict[str, Any]:
    defn = holder.definition
    state = holder.runtime.get_state()
    return {
        "time_elapsed": _round(holder.time_elapsed),
        "currencies": {c.value: _round(state.currency(c)) for c in CurrencyType},
        "total_signal_earned": _round(state.total_signal_earned),
        "total_relays_earned": _round(state.total_relays_earned),
        "beacons": state.beacons,
        "rates": {
            "signal_per_second": _round(signal_per_second(defn, state), 4),
            "click_power": _round(click_power(defn, state), 4),
            "auto_scans_per_second": _round(auto_scan_rate(defn, state), 4),
            "dp_per_second": _round(passive_dp_per_second(defn, state), 4),
        },
        "noise": _round(state.noise, 4),
        "noise_penalty": _round(noise_penalty(defn, state), 4),
        "global_multiplier": _round(global_multiplier(defn, state), 4),
        "generators": dict(state.generators),
        "levels": {
            catalog.value: {k: v for k, v in state.levels(catalog).items() if v}
            for catalog in Catalog
        },
        "milestones_claimed": list(state.milestones_claimed),
        "claimable_milestones": [
            m.id for m in defn.milestones if can_claim_milestone(defn, state, m.id)
        ],
        "prestige": {
            "available": can_prestige(defn, state),
            "projected_relays": prestige_gain(defn, state),
        },
        "beacon": {
            "available": can_beacon_reset(defn, state),
            "projected_fragments": beacon_projection(defn, state),
        },
        "auto_claim_findings": state.auto_claim_findings,
        "auto_buy_enabled": state.auto_buy_enabled,
    }


def _tool_get_available_purchases(holder: _GameHolder) -> dict[str, Any]:
    defn = holder.definition
    state = holder.runtime.get_state()
    rate = signal_per_second(defn, state)
    result = []
    for option in list_purchases(defn, state):
        entry: dict[str, Any] = {
            "kind": option.kind,
            "id": option.id,
            "display_name": option.display_name,
            "level": option.level,
            "cost": _round(option.cost),
            "currency": option.currency.value,
            "affordable": option.affordable,
        }
        if option.max_level is not None:
            entry["max_level"] = option.max_level
        if option.kind == GENERATOR:
            entry["buy_max"] = buy_max_count(defn, state, option.id)
        if option.affordable:
            entry["time_to_afford"] = 0.0
        elif option.currency is CurrencyType.SIGNAL and rate > 0:
            entry["time_to_afford"] = _round((option.cost - state.signal) / rate)
        else:
            entry["time_to_afford"] = None
        result.append(entry)
    return {"purchases": result}


def _tool_scan(holder: _GameHolder, count: int = 1) -> dict[str, Any]:
    if count < 1:
        return {"error": "Count must be at least 1"}
    if count > _MAX_SCANS:
        return {"error": f"Count cannot exceed {_MAX_SCANS}"}

    before = holder.runtime.get_state().signal
    for _ in range(count):
        holder.runtime.dispatch(ManualScan())
    after = holder.runtime.get_state().signal
    return {"scans": count, "total_earned": _round(after - before), "signal": _round(after)}


def _tool_buy_generator(
    holder: _GameHolder, generator_id: str, amount: int | str = 1
) -> dict[str, Any]:
    if holder.definition.get_generator(generator_id) is None:
        return {"error": f"Unknown generator: {generator_id!r}"}
    parsed = _parse_amount(amount)
    if parsed is None or (isinstance(parsed, int) and parsed < 1):
        return {"error": 'Amount must be a positive integer or "max"'}

    before = holder.runtime.get_state()
    after = holder.runtime.dispatch(BuyGenerator(generator_id, parsed))
    bought = after.generator_count(generator_id) - before.generator_count(generator_id)
    if not bought:
        return {"success": False, "reason": "Cannot afford"}
    return {
        "success": True,
        "generator_id": generator_id,
        "bought": bought,
        "new_count": after.generator_count(generator_id),
        "spent": _round(before.signal - after.signal),
    }


def _tool_buy_upgrade(
    holder: _GameHolder, upgrade_id: str, catalog: str = Catalog.UPGRADES.value
) -> dict[str, Any]:
    try:
        cat = Catalog(catalog)
    except ValueError:
        return {"error": f"Unknown catalog: {catalog!r}. Expected one of {[c.value for c in Catalog]}"}
    item = holder.definition.get_item(cat, upgrade_id)
    if item is None:
        return {"error": f"Unknown {cat.value} item: {upgrade_id!r}"}

    before = holder.runtime.get_state()
    level = before.level(cat, upgrade_id)
    if item.is_maxed(level):
        return {"success": False, "reason": "Already at max level"}
    if not item.requirement.evaluate(before):
        return {"success": False, "reason": "Not available (requirements not met)"}

    after = holder.runtime.dispatch(buy_action(cat.value, upgrade_id))
    if after is before:
        return {"success": False, "reason": f"Cannot afford ({item.currency.value})"}
    return {"success": True, "id": upgrade_id, "new_level": after.level(cat, upgrade_id)}


def _tool_claim_milestone(holder: _GameHolder, milestone_id: str) -> dict[str, Any]:
    mdef = holder.definition.get_milestone(milestone_id)
    if mdef is None:
        return {"error": f"Unknown milestone: {milestone_id!r}"}
    before = holder.runtime.get_state()
    if before.has_milestone(milestone_id):
        return {"success": False, "reason": "Already claimed"}
    after = holder.runtime.dispatch(ClaimMilestone(milestone_id))
    if after is before:
        return {"success": False, "reason": "Condition not met"}
    return {"success": True, "milestone_id": milestone_id, "dp_gained": _round(after.dp - before.dp)}


def _tool_wait(holder: _GameHolder, seconds: float) -> dict[str, Any]:
    if seconds <= 0:
        return {"error": "Seconds must be positive"}
    if seconds > _MAX_WAIT:
        return {"error": f"Cannot wait more than {_MAX_WAIT} seconds (24h) per call"}

    chunk = holder.definition.engine.offline_chunk_seconds
    claimed_before = set(holder.runtime.get_state().milestones_claimed)
    remaining = seconds
    while remaining > 0:
        dt = min(chunk, remaining)
        holder.runtime.dispatch(Tick(dt))
        remaining -= dt
    holder.time_elapsed += seconds

    state = holder.runtime.get_state()
    result: dict[str, Any] = {
        "waited": seconds,
        "time_elapsed": _round(holder.time_elapsed),
        "currencies": {c.value: _round(state.currency(c)) for c in CurrencyType},
        "signal_per_second": _round(signal_per_second(holder.definition, state), 4),
    }
    new_milestones = [m for m in state.milestones_claimed if m not in claimed_before]
    if new_milestones:
        result["new_milestones"] = new_milestones
    return result


def _tool_prestige(holder: _GameHolder) -> dict[str, Any]:
    before = holder.runtime.get_state()
    gain = prestige_gain(holder.definition, before)
    after = holder.runtime.dispatch(Prestige())
    if after is before:
        return {"success": False, "reason": "Relay reset not available"}
    return {
        "success": True,
        "relays_gained": gain,
        "relays": after.relays,
        "relay_energy": _round(after.relay_energy),
    }


def _tool_beacon_reset(holder: _GameHolder) -> dict[str, Any]:
    before = holder.runtime.get_state()
    gain = beacon_projection(holder.definition, before)
    after = holder.runtime.dispatch(BeaconReset())
    if after is before:
        return {"success": False, "reason": "Beacon reset not available"}
    return {
        "success": True,
        "fragments_gained": gain,
        "network_fragments": after.network_fragments,
        "beacons": after.beacons,
    }


def _tool_export_save(holder: _GameHolder) -> dict[str, Any]:
    return {"save": holder.runtime.export_text()}


def _tool_import_save(holder: _GameHolder, text: str) -> dict[str, Any]:
    if not holder.runtime.import_text(text):
        return {"success": False, "reason": "Invalid save text"}
    return {"success": True, "message": "Save imported"}


def _tool_new_game(holder: _GameHolder) -> dict[str, Any]:
    holder.runtime.hard_reset()
    holder.time_elapsed = 0.0
    return {"success": True, "message": "Game reset to initial state"}


# ── Server factory ──────────────────────────────────────────────────


def create_server(
    definition: GameDefinition | None = None, runtime: GameRuntime | None = None
) -> FastMCP:
    """Create an MCP server around *runtime*, or a fresh in-memory one."""
    if runtime is None:
        runtime = GameRuntime(definition or default_definition())
    definition = runtime.definition
    holder = _GameHolder(definition=definition, runtime=runtime)

    mcp = FastMCP(name=f"Signal & Salvage: {definition.config.name}")

    @mcp.tool()
    def get_game_info() -> dict[str, Any]:
        """Get static game overview: generators, upgrade catalogs, findings, tabs."""
        return _tool_get_game_info(holder)

    @mcp.tool()
    def get_game_state() -> dict[str, Any]:
        """Get current state: currencies, rates, noise, owned levels, reset projections."""
        return _tool_get_game_state(holder)

    @mcp.tool()
    def get_available_purchases() -> dict[str, Any]:
        """List generators and unlocked upgrades with cost and time-to-afford."""
        return _tool_get_available_purchases(holder)

    @mcp.tool()
    def scan(count: int = 1) -> dict[str, Any]:
        """Perform N manual scans (max 1000). Returns signal earned."""
        return _tool_scan(holder, count)

    @mcp.tool()
    def buy_generator(generator_id: str, amount: str = "1") -> dict[str, Any]:
        """Buy generators: amount is a count or "max". Partial fills are allowed."""
        return _tool_buy_generator(holder, generator_id, amount)

    @mcp.tool()
    def buy_upgrade(upgrade_id: str, catalog: str = "upgrades") -> dict[str, Any]:
        """Buy one level of an item from upgrades, relay_protocols, relay_upgrades or beacon_upgrades."""
        return _tool_buy_upgrade(holder, upgrade_id, catalog)

    @mcp.tool()
    def claim_milestone(milestone_id: str) -> dict[str, Any]:
        """Claim a finding whose condition is met, for Discovery Points."""
        return _tool_claim_milestone(holder, milestone_id)

    @mcp.tool()
    def wait(seconds: float) -> dict[str, Any]:
        """Advance game time by the given seconds (max 86400), in 1s ticks."""
        return _tool_wait(holder, seconds)

    @mcp.tool()
    def prestige() -> dict[str, Any]:
        """Relay reset: trade this run for relays and relay energy."""
        return _tool_prestige(holder)

    @mcp.tool()
    def beacon_reset() -> dict[str, Any]:
        """Beacon reset: wipe the relay layer for network fragments."""
        return _tool_beacon_reset(holder)

    @mcp.tool()
    def export_save() -> dict[str, Any]:
        """Export the current game as save text."""
        return _tool_export_save(holder)

    @mcp.tool()
    def import_save(text: str) -> dict[str, Any]:
        """Replace the current game with exported save text."""
        return _tool_import_save(holder, text)

    @mcp.tool()
    def new_game() -> dict[str, Any]:
        """Reset the game to initial state and clear the save."""
        return _tool_new_game(holder)

    return mcp
