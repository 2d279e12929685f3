"""sms-tracker - progress tracker for randomized Super Mario Sunshine worlds."""

__version__ = "0.1.0"

from smstracker.aggregate import (
    Aggregator,
    CategoryStats,
    Completion,
    CompletionState,
    TrackerSummary,
)
from smstracker.autotrack import AutoTracker, MemoryState, file_source
from smstracker.config import Config, PathsConfig, TrackerConfig, load_config
from smstracker.gate import DEFAULT_GATE_LEVELS, BossGate, GateLevel
from smstracker.persistence import (
    InvalidSaveError,
    Snapshot,
    load_snapshot,
    save_snapshot,
)
from smstracker.report import export_report, format_report
from smstracker.stores import AssignmentStore, ProgressStore, ShineStatus
from smstracker.tracker import FixedRouteError, Tracker
from smstracker.validator import ValidationResult, validate_world
from smstracker.walker import GraphWalker, LoopMarker, RouteNode, WalkResult
from smstracker.world import (
    CoinKey,
    Entrance,
    Exit,
    RoutingKey,
    ShineDefinition,
    WorldData,
    WorldDataError,
    Zone,
    load_world,
    zone_group,
)

__all__ = [
    # Config
    "Config",
    "PathsConfig",
    "TrackerConfig",
    "load_config",
    # World
    "CoinKey",
    "Entrance",
    "Exit",
    "RoutingKey",
    "ShineDefinition",
    "WorldData",
    "WorldDataError",
    "Zone",
    "load_world",
    "zone_group",
    # Stores
    "AssignmentStore",
    "ProgressStore",
    "ShineStatus",
    # Walker
    "GraphWalker",
    "LoopMarker",
    "RouteNode",
    "WalkResult",
    # Gate
    "DEFAULT_GATE_LEVELS",
    "BossGate",
    "GateLevel",
    # Aggregator
    "Aggregator",
    "CategoryStats",
    "Completion",
    "CompletionState",
    "TrackerSummary",
    # Session
    "FixedRouteError",
    "Tracker",
    # Auto-tracking
    "AutoTracker",
    "MemoryState",
    "file_source",
    # Persistence
    "InvalidSaveError",
    "Snapshot",
    "load_snapshot",
    "save_snapshot",
    # Validator
    "ValidationResult",
    "validate_world",
    # Report
    "export_report",
    "format_report",
]
