# clickfluencer — Clickfluencer Idle simulation core & headless playtesting

from clickfluencer._types import SimulatedClock, compare, now_ms
from clickfluencer.cost_scaling import CostScaling
from clickfluencer.state import (
    EffectType,
    UpgradeKind,
    UpgradeEffect,
    Generator,
    Upgrade,
    Theme,
    Achievement,
    Statistics,
    Settings,
    GameState,
    SaveSlot,
    SaveSystemState,
    create_initial_state,
)
from clickfluencer.results import (
    Outcome,
    InvalidSaveFormat,
    ActionResult,
    ClickResult,
    OfflineProgress,
)
from clickfluencer.definition import EngineConfig, GameDefinition
from clickfluencer.composer import (
    BreakdownStep,
    click_breakdown,
    production_breakdown,
    compute_click_power,
    compute_creds_per_second,
)
from clickfluencer.prestige import prestige_cost, prestige_multiplier, can_prestige
from clickfluencer.achievements import (
    AchievementDef,
    AchievementCheck,
    AchievementEvaluator,
)
from clickfluencer.engine import ProgressionEngine
from clickfluencer.codec import export_save, import_save, diff
from clickfluencer.store import SaveStore, MemoryStore, JsonFileStore, StoreError
from clickfluencer.slots import SaveSlotManager, SlotResult, SlotInfo
from clickfluencer.runtime import GameRuntime
from clickfluencer.catalogue import default_definition
from clickfluencer.strategy import Strategy, GreedyCheapest, PriorityList, Idle
from clickfluencer.metrics import MetricsCollector
from clickfluencer.simulation import Simulation
from clickfluencer.report import SimulationReport, build_report
from clickfluencer.formatting import format_number, format_simulation_report

__all__ = [
    # Types
    "SimulatedClock",
    "compare",
    "now_ms",
    # Cost
    "CostScaling",
    # Data model
    "EffectType",
    "UpgradeKind",
    "UpgradeEffect",
    "Generator",
    "Upgrade",
    "Theme",
    "Achievement",
    "Statistics",
    "Settings",
    "GameState",
    "SaveSlot",
    "SaveSystemState",
    "create_initial_state",
    # Results
    "Outcome",
    "InvalidSaveFormat",
    "ActionResult",
    "ClickResult",
    "OfflineProgress",
    # Definition
    "EngineConfig",
    "GameDefinition",
    "default_definition",
    # Multipliers
    "BreakdownStep",
    "click_breakdown",
    "production_breakdown",
    "compute_click_power",
    "compute_creds_per_second",
    # Prestige
    "prestige_cost",
    "prestige_multiplier",
    "can_prestige",
    # Achievements
    "AchievementDef",
    "AchievementCheck",
    "AchievementEvaluator",
    # Engine
    "ProgressionEngine",
    "GameRuntime",
    # Persistence
    "export_save",
    "import_save",
    "diff",
    "SaveStore",
    "MemoryStore",
    "JsonFileStore",
    "StoreError",
    "SaveSlotManager",
    "SlotResult",
    "SlotInfo",
    # Simulation
    "Strategy",
    "GreedyCheapest",
    "PriorityList",
    "Idle",
    "MetricsCollector",
    "Simulation",
    "SimulationReport",
    "build_report",
    # Formatting
    "format_number",
    "format_simulation_report",
]
