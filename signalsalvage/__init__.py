# signalsalvage: Signal & Salvage simulation core and balance simulator

from signalsalvage._types import BUY_AMOUNTS, TABS, Catalog, CurrencyType, compare
from signalsalvage.requirement import Requirement, Req
from signalsalvage.cost_scaling import CostScaling
from signalsalvage.effect import EffectType, EffectDef, Effect
from signalsalvage.generator import GeneratorDef
from signalsalvage.upgrade import UpgradeDef
from signalsalvage.milestone import MilestoneDef
from signalsalvage.definition import BalanceConfig, EngineConfig, GameConfig, GameDefinition
from signalsalvage.catalog import define_game, default_definition
from signalsalvage.state import GameState, initial_state
from signalsalvage.actions import (
    Action,
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
)
from signalsalvage.reducer import reduce, verify_prestige_reset, verify_beacon_reset
from signalsalvage.codec import SAVE_VERSION, serialize, deserialize, migrate_payload
from signalsalvage.persistence import SaveStorage, MemoryStorage, FileStorage, SaveManager
from signalsalvage.runtime import GameRuntime
from signalsalvage.purchase import PurchaseOption, list_purchases
from signalsalvage.terminal import TerminalCondition, Terminal, SimulationContext
from signalsalvage.strategy import Strategy, GreedyCheapest, PriorityList
from signalsalvage.metrics import MetricsCollector
from signalsalvage.simulation import Simulation
from signalsalvage.report import RunSummary, SimulationReport, build_report
from signalsalvage.formatting import format_number, format_text_report

__all__ = [
    # Types
    "BUY_AMOUNTS",
    "TABS",
    "Catalog",
    "CurrencyType",
    "compare",
    # Requirements
    "Requirement",
    "Req",
    # Cost
    "CostScaling",
    # Effects
    "EffectType",
    "EffectDef",
    "Effect",
    # Content
    "GeneratorDef",
    "UpgradeDef",
    "MilestoneDef",
    "define_game",
    "default_definition",
    # Definition
    "BalanceConfig",
    "EngineConfig",
    "GameConfig",
    "GameDefinition",
    # State
    "GameState",
    "initial_state",
    # Actions
    "Action",
    "Tick",
    "ManualScan",
    "BuyGenerator",
    "BuyUpgrade",
    "BuyRelayProtocol",
    "BuyRelayUpgrade",
    "BuyBeaconUpgrade",
    "ClaimMilestone",
    "SetTab",
    "SetBuyAmount",
    "ToggleAutoClaim",
    "ToggleAutoBuy",
    "Prestige",
    "BeaconReset",
    "LoadState",
    "UpdateSaveTime",
    "HardReset",
    # Reducer
    "reduce",
    "verify_prestige_reset",
    "verify_beacon_reset",
    # Persistence
    "SAVE_VERSION",
    "serialize",
    "deserialize",
    "migrate_payload",
    "SaveStorage",
    "MemoryStorage",
    "FileStorage",
    "SaveManager",
    # Runtime
    "GameRuntime",
    # Simulation
    "PurchaseOption",
    "list_purchases",
    "TerminalCondition",
    "Terminal",
    "SimulationContext",
    "Strategy",
    "GreedyCheapest",
    "PriorityList",
    "MetricsCollector",
    "Simulation",
    "RunSummary",
    "SimulationReport",
    "build_report",
    # Formatting
    "format_number",
    "format_text_report",
]
