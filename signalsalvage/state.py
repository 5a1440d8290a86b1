from __future__ import annotations

import dataclasses
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from signalsalvage._types import DEFAULT_TAB, BuyAmount, Catalog, CurrencyType

if TYPE_CHECKING:
    from signalsalvage.definition import GameDefinition


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of everything the simulation knows.

    Owned by the reducer: each transition returns a new instance and never
    mutates the previous one, including its dicts. ``noise`` is a cache of
    ``compute_noise`` and is re-derived after every transition.
    """

    signal: float = 0.0
    total_signal_earned: float = 0.0
    noise: float = 0.0
    dp: float = 0.0
    relays: float = 0.0
    total_relays_earned: float = 0.0
    relay_energy: float = 0.0
    network_fragments: float = 0.0
    beacons: float = 0.0
    generators: dict[str, int] = field(default_factory=dict)
    upgrades: dict[str, int] = field(default_factory=dict)
    relay_protocols: dict[str, int] = field(default_factory=dict)
    relay_upgrades: dict[str, int] = field(default_factory=dict)
    beacon_upgrades: dict[str, int] = field(default_factory=dict)
    milestones_claimed: tuple[str, ...] = ()
    current_tab: str = DEFAULT_TAB
    auto_claim_findings: bool = False
    auto_buy_enabled: bool = False
    buy_amount: BuyAmount = 1
    last_save_at: float = 0.0
    started_at: float = 0.0

    def generator_count(self, id: str) -> int:
        return self.generators.get(id, 0)

    def level(self, catalog: Catalog, id: str) -> int:
        levels: dict[str, int] = getattr(self, catalog.value)
        return levels.get(id, 0)

    def levels(self, catalog: Catalog) -> dict[str, int]:
        return getattr(self, catalog.value)

    def currency(self, currency: CurrencyType) -> float:
        return getattr(self, currency.value)

    def has_milestone(self, id: str) -> bool:
        return id in self.milestones_claimed

    def total_generators(self) -> int:
        return sum(self.generators.values())

    def replace(self, **changes: Any) -> GameState:
        return dataclasses.replace(self, **changes)


def initial_state(definition: GameDefinition, now: float | None = None) -> GameState:
    """Fresh-run defaults: every known id present at level/count 0."""
    if now is None:
        now = time.time()
    return GameState(
        generators={g.id: 0 for g in definition.generators},
        upgrades={u.id: 0 for u in definition.upgrades},
        relay_protocols={u.id: 0 for u in definition.relay_protocols},
        relay_upgrades={u.id: 0 for u in definition.relay_upgrades},
        beacon_upgrades={u.id: 0 for u in definition.beacon_upgrades},
        last_save_at=now,
        started_at=now,
    )
