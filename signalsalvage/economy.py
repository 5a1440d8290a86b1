"""Pure economy queries.

Every function takes the definition table and a state snapshot and returns a
number or a boolean. Nothing here mutates its inputs or keeps hidden state, so
the host may call any of them on every rendered frame.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Iterator

from signalsalvage._types import Catalog, CurrencyType
from signalsalvage.effect import EffectDef, EffectType

if TYPE_CHECKING:
    from signalsalvage.definition import GameDefinition
    from signalsalvage.state import GameState


# ── Effect collection ────────────────────────────────────────────────


def owned_effects(
    definition: GameDefinition, state: GameState, etype: EffectType
) -> Iterator[tuple[EffectDef, int]]:
    """Yield ``(effect, level)`` for every owned item carrying *etype*."""
    for catalog in Catalog:
        levels = state.levels(catalog)
        for item in definition.catalog_items(catalog):
            level = levels.get(item.id, 0)
            if level <= 0:
                continue
            for eff in item.effects:
                if eff.type is etype:
                    yield eff, level


def _product(
    definition: GameDefinition, state: GameState, etype: EffectType, target: str | None = None
) -> float:
    mult = 1.0
    for eff, level in owned_effects(definition, state, etype):
        if target is None or eff.applies_to(target):
            mult *= eff.at_level(level)
    return mult


def _total(
    definition: GameDefinition, state: GameState, etype: EffectType, target: str | None = None
) -> float:
    total = 0.0
    for eff, level in owned_effects(definition, state, etype):
        if target is None or eff.applies_to(target):
            total += eff.at_level(level)
    return total


def has_effect(definition: GameDefinition, state: GameState, etype: EffectType) -> bool:
    return any(True for _ in owned_effects(definition, state, etype))


# ── Generators ───────────────────────────────────────────────────────


def generator_cost_multiplier(
    definition: GameDefinition, state: GameState, generator_id: str
) -> float:
    """Combined discount from blueprint, procurement and echo effects."""
    return _product(definition, state, EffectType.GENERATOR_COST_MULT, generator_id)


def generator_cost(
    definition: GameDefinition, state: GameState, generator_id: str, offset: int = 0
) -> float:
    """Price of the unit bought after *offset* further purchases."""
    gdef = definition.get_generator(generator_id)
    if gdef is None:
        return math.inf
    owned = state.generator_count(generator_id)
    return gdef.cost_at(owned + offset) * generator_cost_multiplier(
        definition, state, generator_id
    )


def buy_max_count(definition: GameDefinition, state: GameState, generator_id: str) -> int:
    """Largest number of units purchasable in sequence with current signal.

    Stops at the engine's iteration ceiling even while still affordable.
    """
    if definition.get_generator(generator_id) is None:
        return 0
    ceiling = definition.engine.buy_max_ceiling
    signal = state.signal
    count = 0
    while count < ceiling:
        next_cost = generator_cost(definition, state, generator_id, count)
        if signal < next_cost:
            break
        signal -= next_cost
        count += 1
    return count


def bulk_cost(
    definition: GameDefinition, state: GameState, generator_id: str, amount: int
) -> float:
    """Total price of the next *amount* units."""
    return sum(
        generator_cost(definition, state, generator_id, offset) for offset in range(amount)
    )


def can_purchase_generator(
    definition: GameDefinition, state: GameState, generator_id: str
) -> bool:
    if definition.get_generator(generator_id) is None:
        return False
    return state.signal >= generator_cost(definition, state, generator_id)


def bulk_buy_unlocked(definition: GameDefinition, state: GameState) -> bool:
    """Buy 10 / Buy Max controls and auto-buy are available."""
    return has_effect(definition, state, EffectType.BULK_BUY)


# ── Production ───────────────────────────────────────────────────────


def relay_boost_per_relay(definition: GameDefinition, state: GameState) -> float:
    efficiency = _total(definition, state, EffectType.RELAY_EFFICIENCY)
    return definition.balance.relay_global_per_relay * (1 + efficiency)


def noise_penalty(definition: GameDefinition, state: GameState) -> float:
    """Production factor lost to noise, after mitigation, before the floor."""
    balance = definition.balance
    penalty = 1 / (1 + state.noise / balance.noise_penalty_scale)
    effective = 1.0
    for eff, level in owned_effects(definition, state, EffectType.NOISE_MITIGATION):
        effective *= 1 - eff.at_level(level)
    return 1 - (1 - penalty) * effective


def global_multiplier(definition: GameDefinition, state: GameState) -> float:
    mult = _product(definition, state, EffectType.GLOBAL_MULT)
    mult *= 1 + state.relays * relay_boost_per_relay(definition, state)
    mult *= max(definition.balance.min_global_multiplier, noise_penalty(definition, state))
    return mult


def generator_multiplier(
    definition: GameDefinition, state: GameState, generator_id: str
) -> float:
    return _product(definition, state, EffectType.GENERATOR_MULT, generator_id)


def generator_production(
    definition: GameDefinition, state: GameState, generator_id: str
) -> float:
    """Signal per second from one generator type, global multiplier included."""
    gdef = definition.get_generator(generator_id)
    if gdef is None:
        return 0.0
    return (
        state.generator_count(generator_id)
        * gdef.base_rate
        * generator_multiplier(definition, state, generator_id)
        * global_multiplier(definition, state)
    )


def total_production(definition: GameDefinition, state: GameState) -> float:
    """Signal per second from all generators."""
    global_mult = global_multiplier(definition, state)
    total = 0.0
    for gdef in definition.generators:
        owned = state.generator_count(gdef.id)
        if owned <= 0:
            continue
        total += owned * gdef.base_rate * generator_multiplier(definition, state, gdef.id) * global_mult
    return total


def click_power(definition: GameDefinition, state: GameState) -> float:
    """Signal granted by one manual scan."""
    click = definition.balance.base_click_power
    click *= _product(definition, state, EffectType.CLICK_MULT)
    fraction = _total(definition, state, EffectType.CLICK_RATE_FRACTION)
    if fraction > 0:
        click += total_production(definition, state) * fraction
    return click


def auto_scan_rate(definition: GameDefinition, state: GameState) -> float:
    """Automated scans per second."""
    return _total(definition, state, EffectType.AUTO_SCAN)


def passive_dp_per_second(definition: GameDefinition, state: GameState) -> float:
    return _total(definition, state, EffectType.PASSIVE_DP)


def signal_per_second(definition: GameDefinition, state: GameState) -> float:
    """Production plus automated scans, the rate a tick accrues."""
    rate = total_production(definition, state)
    scans = auto_scan_rate(definition, state)
    if scans > 0:
        rate += click_power(definition, state) * scans
    return rate


def compute_noise(definition: GameDefinition, state: GameState) -> float:
    """Noise derived from infrastructure owned; non-finite results become 0."""
    total = max(0, state.total_generators())
    scalar = definition.balance.noise_scalar * _product(definition, state, EffectType.NOISE_MULT)
    try:
        noise = math.sqrt(total) * scalar
    except (OverflowError, ValueError):
        return 0.0
    return noise if math.isfinite(noise) else 0.0


# ── Catalogue items ──────────────────────────────────────────────────


def item_cost(
    definition: GameDefinition, state: GameState, catalog: Catalog, item_id: str
) -> float:
    """Price of the next level of an item in any catalogue."""
    item = definition.get_item(catalog, item_id)
    if item is None:
        return math.inf
    cost = item.cost_at(state.level(catalog, item_id))
    discount = _product(definition, state, EffectType.CATALOG_COST_MULT, catalog.value)
    if discount != 1.0:
        cost = max(1.0, cost * discount)
    return cost


def can_purchase_item(
    definition: GameDefinition, state: GameState, catalog: Catalog, item_id: str
) -> bool:
    """Not maxed, prerequisite met, and enough of the right currency."""
    item = definition.get_item(catalog, item_id)
    if item is None:
        return False
    if item.is_maxed(state.level(catalog, item_id)):
        return False
    if not item.requirement.evaluate(state):
        return False
    return state.currency(item.currency) >= item_cost(definition, state, catalog, item_id)


def upgrade_cost(definition: GameDefinition, state: GameState, upgrade_id: str) -> float:
    return item_cost(definition, state, Catalog.UPGRADES, upgrade_id)


def relay_protocol_cost(definition: GameDefinition, state: GameState, protocol_id: str) -> float:
    return item_cost(definition, state, Catalog.RELAY_PROTOCOLS, protocol_id)


def relay_upgrade_cost(definition: GameDefinition, state: GameState, upgrade_id: str) -> float:
    return item_cost(definition, state, Catalog.RELAY_UPGRADES, upgrade_id)


def beacon_upgrade_cost(definition: GameDefinition, state: GameState, upgrade_id: str) -> float:
    return item_cost(definition, state, Catalog.BEACON_UPGRADES, upgrade_id)


def can_purchase_upgrade(definition: GameDefinition, state: GameState, upgrade_id: str) -> bool:
    return can_purchase_item(definition, state, Catalog.UPGRADES, upgrade_id)


def can_purchase_relay_protocol(
    definition: GameDefinition, state: GameState, protocol_id: str
) -> bool:
    return can_purchase_item(definition, state, Catalog.RELAY_PROTOCOLS, protocol_id)


def can_purchase_relay_upgrade(
    definition: GameDefinition, state: GameState, upgrade_id: str
) -> bool:
    return can_purchase_item(definition, state, Catalog.RELAY_UPGRADES, upgrade_id)


def can_purchase_beacon_upgrade(
    definition: GameDefinition, state: GameState, upgrade_id: str
) -> bool:
    return can_purchase_item(definition, state, Catalog.BEACON_UPGRADES, upgrade_id)


# ── Milestones ───────────────────────────────────────────────────────


def milestone_dp_reward(definition: GameDefinition, state: GameState, base_reward: float) -> float:
    return base_reward * _product(definition, state, EffectType.MILESTONE_REWARD_MULT)


def can_claim_milestone(definition: GameDefinition, state: GameState, milestone_id: str) -> bool:
    mdef = definition.get_milestone(milestone_id)
    if mdef is None or state.has_milestone(milestone_id):
        return False
    return mdef.condition.evaluate(state)


# ── Prestige layers ──────────────────────────────────────────────────


def prestige_projection(definition: GameDefinition, total_signal_earned: float) -> int:
    """Relays a reset would pay for *total_signal_earned* lifetime signal."""
    balance = definition.balance
    if total_signal_earned < balance.relay_prestige_base:
        return 0
    projected = (total_signal_earned / balance.relay_prestige_base) ** balance.relay_prestige_exponent
    if not math.isfinite(projected):
        return 0
    return max(1, math.floor(projected))


def can_prestige(definition: GameDefinition, state: GameState) -> bool:
    balance = definition.balance
    return (
        state.generator_count(balance.relay_unlock_generator) >= 1
        or state.total_signal_earned >= balance.relay_prestige_base
    )


def prestige_gain(definition: GameDefinition, state: GameState) -> int:
    """Relays gained by resetting now (1 via the top-generator path)."""
    projected = prestige_projection(definition, state.total_signal_earned)
    if projected > 0:
        return projected
    return 1 if state.generator_count(definition.balance.relay_unlock_generator) >= 1 else 0


def relay_energy_gain(definition: GameDefinition, state: GameState, relays_gained: float) -> float:
    """Relay energy paid alongside *relays_gained* relays."""
    return relays_gained + _total(definition, state, EffectType.RELAY_ENERGY_BONUS)


def can_beacon_reset(definition: GameDefinition, state: GameState) -> bool:
    balance = definition.balance
    return (
        state.total_relays_earned >= balance.beacon_unlock_relays
        or state.total_signal_earned >= balance.beacon_unlock_signal
    )


def beacon_projection(definition: GameDefinition, state: GameState) -> int:
    """Network fragments a beacon reset would pay now."""
    if not can_beacon_reset(definition, state):
        return 0
    balance = definition.balance
    signal_term = max(1.0, state.total_signal_earned / balance.beacon_base_signal) ** (
        balance.beacon_signal_exponent
    )
    relay_term = (
        max(0.0, state.total_relays_earned) ** balance.beacon_relay_exponent
        / balance.beacon_relay_divisor
    )
    projected = signal_term + relay_term
    if not math.isfinite(projected):
        return 0
    return max(1, math.floor(projected))


# ── Self-check ───────────────────────────────────────────────────────


def run_sanity_checks(definition: GameDefinition, state: GameState) -> list[str]:
    """Collect invariant violations as readable strings; never raises."""
    issues: list[str] = []
    for gdef in definition.generators:
        if buy_max_count(definition, state, gdef.id) < 0:
            issues.append(f"Buy max produced negative count for {gdef.id!r}.")
    if not math.isfinite(compute_noise(definition, state)):
        issues.append("Noise became non-finite.")
    if not math.isclose(state.noise, compute_noise(definition, state), rel_tol=1e-9, abs_tol=1e-12):
        issues.append("Cached noise differs from derived noise.")
    balance = definition.balance
    if prestige_projection(definition, balance.relay_prestige_base) < 1:
        issues.append("Relay projection should be at least 1 at base threshold.")
    at_unlock = state.replace(
        total_relays_earned=balance.beacon_unlock_relays,
        total_signal_earned=balance.beacon_unlock_signal,
    )
    if beacon_projection(definition, at_unlock) < 1:
        issues.append("Beacon projection should be positive at unlock thresholds.")
    for currency in CurrencyType:
        value = state.currency(currency)
        if not math.isfinite(value) or value < 0:
            issues.append(f"Currency {currency.value!r} is {value!r}.")
    return issues
