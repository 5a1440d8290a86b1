from __future__ import annotations

import operator
from enum import Enum
from typing import Callable, Literal, Union

BuyAmount = Union[Literal[1, 10], Literal["max"]]

BUY_AMOUNTS: tuple[BuyAmount, ...] = (1, 10, "max")

TABS: tuple[str, ...] = (
    "Control",
    "Generators",
    "Upgrades",
    "DP Upgrades",
    "Findings",
    "Prestige",
    "Stats",
)

DEFAULT_TAB = "Control"


class CurrencyType(Enum):
    """A spendable pool. The value is the GameState attribute holding it."""

    SIGNAL = "signal"
    DP = "dp"
    RELAYS = "relays"
    RELAY_ENERGY = "relay_energy"
    NETWORK_FRAGMENTS = "network_fragments"


class Catalog(Enum):
    """An upgrade catalogue. The value is the GameState attribute holding its levels."""

    UPGRADES = "upgrades"
    RELAY_PROTOCOLS = "relay_protocols"
    RELAY_UPGRADES = "relay_upgrades"
    BEACON_UPGRADES = "beacon_upgrades"


_OPS: dict[str, Callable[[float, float], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
    "==": operator.eq,
    "!=": operator.ne,
}


def compare(left: float, op: str, right: float) -> bool:
    """Compare two values using a string operator."""
    fn = _OPS.get(op)
    if fn is None:
        raise ValueError(f"Unknown operator: {op!r}. Expected one of {list(_OPS)}")
    return fn(left, right)


def is_buy_amount(value: object) -> bool:
    """True for exactly 1, 10 or "max" (bools are not amounts)."""
    if isinstance(value, bool):
        return False
    return value in BUY_AMOUNTS
