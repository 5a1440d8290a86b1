from __future__ import annotations

import warnings
from dataclasses import dataclass, field

from signalsalvage._types import Catalog, CurrencyType
from signalsalvage.effect import EffectType
from signalsalvage.generator import GeneratorDef
from signalsalvage.milestone import MilestoneDef
from signalsalvage.upgrade import UpgradeDef


@dataclass(frozen=True)
class BalanceConfig:
    """Balance curves shared by the economy functions."""

    relay_global_per_relay: float = 0.025
    relay_prestige_base: float = 1e12
    relay_prestige_exponent: float = 0.22
    relay_unlock_generator: str = "correlator"
    beacon_unlock_relays: float = 25
    beacon_unlock_signal: float = 1e18
    beacon_base_signal: float = 1e18
    beacon_signal_exponent: float = 0.2
    beacon_relay_exponent: float = 0.72
    beacon_relay_divisor: float = 8
    noise_scalar: float = 4.0
    noise_penalty_scale: float = 100.0
    min_global_multiplier: float = 0.05
    base_click_power: float = 1.0


@dataclass(frozen=True)
class EngineConfig:
    """Host-loop and persistence settings."""

    max_tick_seconds: float = 1.0
    offline_chunk_seconds: float = 1.0
    max_offline_seconds: float = 3600.0
    buy_max_ceiling: int = 10_000
    autosave_interval: float = 8.0
    frame_interval: float = 1 / 60
    save_slot: str = "signal-and-salvage-save-v2"
    legacy_save_slot: str = "signal-and-salvage-save-v1"


@dataclass(frozen=True)
class GameConfig:
    """Top-level game configuration."""

    name: str = "Untitled"
    balance: BalanceConfig = field(default_factory=BalanceConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)


# Currencies each catalogue may be priced in.
CATALOG_CURRENCIES: dict[Catalog, tuple[CurrencyType, ...]] = {
    Catalog.UPGRADES: (CurrencyType.SIGNAL, CurrencyType.DP),
    Catalog.RELAY_PROTOCOLS: (CurrencyType.RELAY_ENERGY,),
    Catalog.RELAY_UPGRADES: (CurrencyType.RELAYS,),
    Catalog.BEACON_UPGRADES: (CurrencyType.NETWORK_FRAGMENTS,),
}


@dataclass
class GameDefinition:
    """Complete static definition of the game.

    Built once and passed by reference to every economy function and to the
    reducer; nothing mutates it after construction.
    """

    config: GameConfig = field(default_factory=GameConfig)
    generators: list[GeneratorDef] = field(default_factory=list)
    upgrades: list[UpgradeDef] = field(default_factory=list)
    relay_protocols: list[UpgradeDef] = field(default_factory=list)
    relay_upgrades: list[UpgradeDef] = field(default_factory=list)
    beacon_upgrades: list[UpgradeDef] = field(default_factory=list)
    milestones: list[MilestoneDef] = field(default_factory=list)

    # Lookup dicts built in __post_init__
    _generators_by_id: dict[str, GeneratorDef] = field(
        default_factory=dict, init=False, repr=False
    )
    _catalogs: dict[Catalog, dict[str, UpgradeDef]] = field(
        default_factory=dict, init=False, repr=False
    )
    _milestones_by_id: dict[str, MilestoneDef] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self._generators_by_id = {g.id: g for g in self.generators}
        self._catalogs = {
            catalog: {u.id: u for u in self.catalog_items(catalog)}
            for catalog in Catalog
        }
        self._milestones_by_id = {m.id: m for m in self.milestones}

    @property
    def balance(self) -> BalanceConfig:
        return self.config.balance

    @property
    def engine(self) -> EngineConfig:
        return self.config.engine

    @property
    def generator_ids(self) -> list[str]:
        """Generator ids in declared order (cheapest first)."""
        return [g.id for g in self.generators]

    def catalog_items(self, catalog: Catalog) -> list[UpgradeDef]:
        if catalog is Catalog.UPGRADES:
            return self.upgrades
        if catalog is Catalog.RELAY_PROTOCOLS:
            return self.relay_protocols
        if catalog is Catalog.RELAY_UPGRADES:
            return self.relay_upgrades
        return self.beacon_upgrades

    def get_generator(self, id: str) -> GeneratorDef | None:
        return self._generators_by_id.get(id)

    def get_item(self, catalog: Catalog, id: str) -> UpgradeDef | None:
        return self._catalogs[catalog].get(id)

    def get_upgrade(self, id: str) -> UpgradeDef | None:
        return self.get_item(Catalog.UPGRADES, id)

    def get_milestone(self, id: str) -> MilestoneDef | None:
        return self._milestones_by_id.get(id)

    def validate(self) -> list[str]:
        """Check for common definition errors. Returns list of error messages."""
        errors: list[str] = []
        generator_ids = set(self._generators_by_id)

        def _check_duplicates(kind: str, ids: list[str]) -> None:
            seen: set[str] = set()
            for id in ids:
                if id in seen:
                    errors.append(f"Duplicate {kind} ID: {id!r}")
                seen.add(id)

        _check_duplicates("generator", [g.id for g in self.generators])
        _check_duplicates("milestone", [m.id for m in self.milestones])
        for catalog in Catalog:
            _check_duplicates(catalog.value, [u.id for u in self.catalog_items(catalog)])

        if self.balance.relay_unlock_generator not in generator_ids:
            errors.append(
                f"Relay unlock generator {self.balance.relay_unlock_generator!r} "
                "is not a known generator"
            )

        for catalog in Catalog:
            allowed = CATALOG_CURRENCIES[catalog]
            for u in self.catalog_items(catalog):
                if u.currency not in allowed:
                    errors.append(
                        f"{catalog.value} item {u.id!r} is priced in "
                        f"{u.currency.value!r}, expected one of "
                        f"{[c.value for c in allowed]}"
                    )
                for eff in u.effects:
                    if eff.type in (
                        EffectType.GENERATOR_MULT,
                        EffectType.GENERATOR_COST_MULT,
                        EffectType.START_GENERATORS,
                    ):
                        for target in eff.targets:
                            if target not in generator_ids:
                                errors.append(
                                    f"{catalog.value} item {u.id!r} has effect "
                                    f"targeting unknown generator {target!r}"
                                )
                    elif eff.type is EffectType.CATALOG_COST_MULT:
                        for target in eff.targets:
                            if target not in {c.value for c in Catalog}:
                                errors.append(
                                    f"{catalog.value} item {u.id!r} discounts "
                                    f"unknown catalogue {target!r}"
                                )
                    elif eff.type is EffectType.RETAIN_ON_PRESTIGE:
                        for target in eff.targets:
                            if self.get_upgrade(target) is None:
                                errors.append(
                                    f"{catalog.value} item {u.id!r} retains "
                                    f"unknown upgrade {target!r}"
                                )

        for g in self.generators:
            if g.cost_growth <= 1.0:
                warnings.warn(
                    f"Generator {g.id!r} has cost_growth={g.cost_growth}; "
                    f"buy-max will only stop at the iteration ceiling "
                    f"({self.engine.buy_max_ceiling}) once it is affordable.",
                    stacklevel=2,
                )

        for catalog in Catalog:
            for u in self.catalog_items(catalog):
                if u.repeatable and u.max_level is None and u.cost_growth <= 1.0:
                    warnings.warn(
                        f"Repeatable {catalog.value} item {u.id!r} has no max "
                        f"level and does not grow in cost.",
                        stacklevel=2,
                    )

        return errors
