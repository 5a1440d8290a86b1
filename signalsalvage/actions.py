"""Typed actions accepted by the reducer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from signalsalvage._types import BuyAmount

if TYPE_CHECKING:
    from signalsalvage.state import GameState


@dataclass(frozen=True)
class Tick:
    dt: float


@dataclass(frozen=True)
class ManualScan:
    pass


@dataclass(frozen=True)
class BuyGenerator:
    generator_id: str
    amount: int | str = 1  # a count, or "max"


@dataclass(frozen=True)
class BuyUpgrade:
    upgrade_id: str


@dataclass(frozen=True)
class BuyRelayProtocol:
    protocol_id: str


@dataclass(frozen=True)
class BuyRelayUpgrade:
    upgrade_id: str


@dataclass(frozen=True)
class BuyBeaconUpgrade:
    upgrade_id: str


@dataclass(frozen=True)
class ClaimMilestone:
    milestone_id: str


@dataclass(frozen=True)
class SetTab:
    tab: str


@dataclass(frozen=True)
class SetBuyAmount:
    amount: BuyAmount


@dataclass(frozen=True)
class ToggleAutoClaim:
    pass


@dataclass(frozen=True)
class ToggleAutoBuy:
    pass


@dataclass(frozen=True)
class Prestige:
    """Tier-1 relay reset."""

    now: float | None = None


@dataclass(frozen=True)
class BeaconReset:
    """Tier-2 meta reset."""

    now: float | None = None


@dataclass(frozen=True)
class LoadState:
    payload: GameState


@dataclass(frozen=True)
class UpdateSaveTime:
    now: float


@dataclass(frozen=True)
class HardReset:
    now: float | None = None


Action = Union[
    Tick,
    ManualScan,
    BuyGenerator,
    BuyUpgrade,
    BuyRelayProtocol,
    BuyRelayUpgrade,
    BuyBeaconUpgrade,
    ClaimMilestone,
    SetTab,
    SetBuyAmount,
    ToggleAutoClaim,
    ToggleAutoBuy,
    Prestige,
    BeaconReset,
    LoadState,
    UpdateSaveTime,
    HardReset,
]
