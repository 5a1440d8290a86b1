"""State transition function.

``reduce(definition, state, action)`` is total: every action yields a state,
and a rejected or malformed action yields the input state unchanged.
"""

from __future__ import annotations

import math
import time
from typing import TYPE_CHECKING, Callable, get_args

from signalsalvage._types import TABS, Catalog, is_buy_amount
from signalsalvage.actions import (
    Action,
    BeaconReset,
    BuyBeaconUpgrade,
    BuyGenerator,
    BuyRelayProtocol,
    BuyRelayUpgrade,
    BuyUpgrade,
    ClaimMilestone,
    HardReset,
    LoadState,
    ManualScan,
    Prestige,
    SetBuyAmount,
    SetTab,
    Tick,
    ToggleAutoBuy,
    ToggleAutoClaim,
    UpdateSaveTime,
)
from signalsalvage.economy import (
    beacon_projection,
    bulk_buy_unlocked,
    buy_max_count,
    can_beacon_reset,
    can_claim_milestone,
    can_prestige,
    can_purchase_item,
    click_power,
    compute_noise,
    generator_cost,
    item_cost,
    milestone_dp_reward,
    owned_effects,
    passive_dp_per_second,
    prestige_gain,
    relay_energy_gain,
    signal_per_second,
)
from signalsalvage.effect import EffectType
from signalsalvage.state import GameState, initial_state

if TYPE_CHECKING:
    from signalsalvage.definition import GameDefinition

Handler = Callable[["GameDefinition", GameState, Action], GameState]


def reduce(definition: GameDefinition, state: GameState, action: Action) -> GameState:
    """Apply *action* to *state* and return the next state."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        return state
    return handler(definition, state, action)


# ── Shared helpers ───────────────────────────────────────────────────


def _now(now: float | None) -> float:
    return time.time() if now is None else now


def _sanitize(definition: GameDefinition, state: GameState) -> GameState:
    """Re-derive the cached noise value."""
    noise = compute_noise(definition, state)
    if noise == state.noise:
        return state
    return state.replace(noise=noise)


def _add_signal(state: GameState, amount: float) -> GameState:
    if amount == 0:
        return state
    return state.replace(
        signal=state.signal + amount,
        total_signal_earned=state.total_signal_earned + amount,
    )


def _buy_generator(
    definition: GameDefinition, state: GameState, generator_id: str, amount: int | str
) -> GameState:
    if definition.get_generator(generator_id) is None:
        return state
    if amount == "max":
        count = buy_max_count(definition, state, generator_id)
    elif isinstance(amount, int) and not isinstance(amount, bool):
        count = min(amount, definition.engine.buy_max_ceiling)
    else:
        return state
    if count <= 0:
        return state

    signal = state.signal
    purchased = 0
    for offset in range(count):
        cost = generator_cost(definition, state, generator_id, offset)
        if signal < cost:
            break
        signal -= cost
        purchased += 1

    if not purchased:
        return state
    generators = dict(state.generators)
    generators[generator_id] = state.generator_count(generator_id) + purchased
    return state.replace(signal=signal, generators=generators)


def _buy_item(
    definition: GameDefinition, state: GameState, catalog: Catalog, item_id: str
) -> GameState:
    item = definition.get_item(catalog, item_id)
    if item is None or not can_purchase_item(definition, state, catalog, item_id):
        return state
    cost = item_cost(definition, state, catalog, item_id)
    levels = dict(state.levels(catalog))
    levels[item_id] = levels.get(item_id, 0) + 1
    spent = state.replace(
        **{
            item.currency.value: state.currency(item.currency) - cost,
            catalog.value: levels,
        }
    )
    return _sanitize(definition, spent)


def _claim(definition: GameDefinition, state: GameState, milestone_id: str) -> GameState:
    if not can_claim_milestone(definition, state, milestone_id):
        return state
    mdef = definition.get_milestone(milestone_id)
    return state.replace(
        dp=state.dp + milestone_dp_reward(definition, state, mdef.dp_reward),
        milestones_claimed=state.milestones_claimed + (milestone_id,),
    )


def _auto_claim(definition: GameDefinition, state: GameState) -> GameState:
    if not state.auto_claim_findings:
        return state
    result = state
    for mdef in definition.milestones:
        result = _claim(definition, result, mdef.id)
    return result


def _apply_run_start_bonuses(definition: GameDefinition, state: GameState) -> GameState:
    generators = dict(state.generators)
    for eff, level in owned_effects(definition, state, EffectType.START_GENERATORS):
        for generator_id in eff.targets:
            generators[generator_id] = generators.get(generator_id, 0) + int(eff.at_level(level))
    result = state.replace(generators=generators)
    for eff, level in owned_effects(definition, state, EffectType.START_SIGNAL):
        result = _add_signal(result, eff.at_level(level))
    return result


# ── Handlers ─────────────────────────────────────────────────────────


def _tick(definition: GameDefinition, state: GameState, action: Tick) -> GameState:
    dt = action.dt
    if not isinstance(dt, (int, float)) or not math.isfinite(dt):
        return state
    dt = max(0.0, min(definition.engine.max_tick_seconds, dt))

    result = _add_signal(state, signal_per_second(definition, state) * dt)
    passive = passive_dp_per_second(definition, result)
    if passive:
        result = result.replace(dp=result.dp + passive * dt)

    if state.auto_buy_enabled and bulk_buy_unlocked(definition, state):
        for generator_id in definition.generator_ids:
            result = _buy_generator(definition, result, generator_id, "max")

    return _auto_claim(definition, _sanitize(definition, result))


def _manual_scan(definition: GameDefinition, state: GameState, action: ManualScan) -> GameState:
    return _sanitize(definition, _add_signal(state, click_power(definition, state)))


def _buy_generator_action(
    definition: GameDefinition, state: GameState, action: BuyGenerator
) -> GameState:
    return _sanitize(
        definition, _buy_generator(definition, state, action.generator_id, action.amount)
    )


def _buy_upgrade(definition: GameDefinition, state: GameState, action: BuyUpgrade) -> GameState:
    return _buy_item(definition, state, Catalog.UPGRADES, action.upgrade_id)


def _buy_relay_protocol(
    definition: GameDefinition, state: GameState, action: BuyRelayProtocol
) -> GameState:
    return _buy_item(definition, state, Catalog.RELAY_PROTOCOLS, action.protocol_id)


def _buy_relay_upgrade(
    definition: GameDefinition, state: GameState, action: BuyRelayUpgrade
) -> GameState:
    return _buy_item(definition, state, Catalog.RELAY_UPGRADES, action.upgrade_id)


def _buy_beacon_upgrade(
    definition: GameDefinition, state: GameState, action: BuyBeaconUpgrade
) -> GameState:
    return _buy_item(definition, state, Catalog.BEACON_UPGRADES, action.upgrade_id)


def _claim_milestone(
    definition: GameDefinition, state: GameState, action: ClaimMilestone
) -> GameState:
    return _claim(definition, state, action.milestone_id)


def _set_tab(definition: GameDefinition, state: GameState, action: SetTab) -> GameState:
    if action.tab not in TABS or action.tab == state.current_tab:
        return state
    return state.replace(current_tab=action.tab)


def _set_buy_amount(
    definition: GameDefinition, state: GameState, action: SetBuyAmount
) -> GameState:
    if not is_buy_amount(action.amount) or action.amount == state.buy_amount:
        return state
    return state.replace(buy_amount=action.amount)


def _toggle_auto_claim(
    definition: GameDefinition, state: GameState, action: ToggleAutoClaim
) -> GameState:
    return state.replace(auto_claim_findings=not state.auto_claim_findings)


def _toggle_auto_buy(
    definition: GameDefinition, state: GameState, action: ToggleAutoBuy
) -> GameState:
    return state.replace(auto_buy_enabled=not state.auto_buy_enabled)


def _prestige(definition: GameDefinition, state: GameState, action: Prestige) -> GameState:
    gained = prestige_gain(definition, state)
    if gained <= 0 or not can_prestige(definition, state):
        return state

    fresh = initial_state(definition, _now(action.now))
    upgrades = dict(fresh.upgrades)
    for eff, _level in owned_effects(definition, state, EffectType.RETAIN_ON_PRESTIGE):
        for upgrade_id in eff.targets:
            if upgrade_id in upgrades:
                upgrades[upgrade_id] = state.upgrades.get(upgrade_id, 0)

    result = fresh.replace(
        dp=state.dp,
        relays=state.relays + gained,
        total_relays_earned=state.total_relays_earned + gained,
        relay_energy=state.relay_energy + relay_energy_gain(definition, state, gained),
        network_fragments=state.network_fragments,
        beacons=state.beacons,
        upgrades=upgrades,
        relay_protocols=dict(state.relay_protocols),
        relay_upgrades=dict(state.relay_upgrades),
        beacon_upgrades=dict(state.beacon_upgrades),
        milestones_claimed=state.milestones_claimed,
    )
    return _sanitize(definition, _apply_run_start_bonuses(definition, result))


def _beacon_reset(definition: GameDefinition, state: GameState, action: BeaconReset) -> GameState:
    gained = beacon_projection(definition, state)
    if gained <= 0 or not can_beacon_reset(definition, state):
        return state

    fresh = initial_state(definition, _now(action.now))
    result = fresh.replace(
        network_fragments=state.network_fragments + gained,
        beacons=state.beacons + gained,
        beacon_upgrades=dict(state.beacon_upgrades),
        milestones_claimed=state.milestones_claimed,
    )
    return _sanitize(definition, _apply_run_start_bonuses(definition, result))


def _load_state(definition: GameDefinition, state: GameState, action: LoadState) -> GameState:
    if not isinstance(action.payload, GameState):
        return state
    return _sanitize(definition, action.payload)


def _update_save_time(
    definition: GameDefinition, state: GameState, action: UpdateSaveTime
) -> GameState:
    return state.replace(last_save_at=action.now)


def _hard_reset(definition: GameDefinition, state: GameState, action: HardReset) -> GameState:
    return initial_state(definition, _now(action.now))


_HANDLERS: dict[type, Handler] = {
    Tick: _tick,
    ManualScan: _manual_scan,
    BuyGenerator: _buy_generator_action,
    BuyUpgrade: _buy_upgrade,
    BuyRelayProtocol: _buy_relay_protocol,
    BuyRelayUpgrade: _buy_relay_upgrade,
    BuyBeaconUpgrade: _buy_beacon_upgrade,
    ClaimMilestone: _claim_milestone,
    SetTab: _set_tab,
    SetBuyAmount: _set_buy_amount,
    ToggleAutoClaim: _toggle_auto_claim,
    ToggleAutoBuy: _toggle_auto_buy,
    Prestige: _prestige,
    BeaconReset: _beacon_reset,
    LoadState: _load_state,
    UpdateSaveTime: _update_save_time,
    HardReset: _hard_reset,
}

_unhandled = set(get_args(Action)) - set(_HANDLERS)
if _unhandled:
    raise RuntimeError(
        "reduce() has no handler for: "
        + ", ".join(sorted(cls.__name__ for cls in _unhandled))
    )


# ── Reset verification ───────────────────────────────────────────────


def verify_prestige_reset(definition: GameDefinition, state: GameState) -> bool:
    """Whether a relay reset from *state* would keep its invariants."""
    if prestige_gain(definition, state) <= 0 or not can_prestige(definition, state):
        return True
    reset = _prestige(definition, state, Prestige(now=state.last_save_at))
    top = definition.balance.relay_unlock_generator
    return (
        reset.signal >= 0
        and reset.generator_count(top) == 0
        and reset.relays >= state.relays
    )


def verify_beacon_reset(definition: GameDefinition, state: GameState) -> bool:
    """Whether a beacon reset from *state* would keep its invariants."""
    if beacon_projection(definition, state) <= 0:
        return True
    reset = _beacon_reset(definition, state, BeaconReset(now=state.last_save_at))
    return (
        reset.relays == 0
        and reset.dp == 0
        and reset.network_fragments >= state.network_fragments
    )
