from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from signalsalvage._types import Catalog, CurrencyType
from signalsalvage.actions import (
    Action,
    BuyBeaconUpgrade,
    BuyGenerator,
    BuyRelayProtocol,
    BuyRelayUpgrade,
    BuyUpgrade,
)
from signalsalvage.economy import (
    can_purchase_generator,
    can_purchase_item,
    generator_cost,
    item_cost,
)

if TYPE_CHECKING:
    from signalsalvage.definition import GameDefinition
    from signalsalvage.state import GameState

GENERATOR = "generator"

_BUY_ACTIONS = {
    Catalog.UPGRADES: BuyUpgrade,
    Catalog.RELAY_PROTOCOLS: BuyRelayProtocol,
    Catalog.RELAY_UPGRADES: BuyRelayUpgrade,
    Catalog.BEACON_UPGRADES: BuyBeaconUpgrade,
}


@dataclass(frozen=True)
class PurchaseOption:
    """Read-only snapshot of one thing the player could buy next."""

    kind: str  # GENERATOR or a Catalog value
    id: str
    display_name: str
    level: int
    cost: float
    currency: CurrencyType
    affordable: bool
    max_level: int | None = None

    def action(self) -> Action:
        """The single-unit buy action for this option."""
        if self.kind == GENERATOR:
            return BuyGenerator(self.id, 1)
        return _BUY_ACTIONS[Catalog(self.kind)](self.id)


def buy_action(kind: str, item_id: str) -> Action | None:
    """Buy action for *item_id* in *kind*, or None for an unknown kind."""
    if kind == GENERATOR:
        return BuyGenerator(item_id, 1)
    try:
        return _BUY_ACTIONS[Catalog(kind)](item_id)
    except ValueError:
        return None


def list_purchases(
    definition: GameDefinition, state: GameState, affordable_only: bool = False
) -> list[PurchaseOption]:
    """Generators plus every unlocked, non-maxed catalogue item."""
    options: list[PurchaseOption] = []
    for gdef in definition.generators:
        options.append(
            PurchaseOption(
                kind=GENERATOR,
                id=gdef.id,
                display_name=gdef.display_name,
                level=state.generator_count(gdef.id),
                cost=generator_cost(definition, state, gdef.id),
                currency=CurrencyType.SIGNAL,
                affordable=can_purchase_generator(definition, state, gdef.id),
            )
        )

    for catalog in Catalog:
        for item in definition.catalog_items(catalog):
            level = state.level(catalog, item.id)
            if item.is_maxed(level) or not item.requirement.evaluate(state):
                continue
            options.append(
                PurchaseOption(
                    kind=catalog.value,
                    id=item.id,
                    display_name=item.display_name,
                    level=level,
                    cost=item_cost(definition, state, catalog, item.id),
                    currency=item.currency,
                    affordable=can_purchase_item(definition, state, catalog, item.id),
                    max_level=item.level_cap,
                )
            )

    if affordable_only:
        return [o for o in options if o.affordable]
    return options
