"""Deterministic, headless rule engine for pushbox.

IMPORTANT: This package must never do file or network I/O.
"""

from .game import Engine, EngineConfig, EngineStatus
from .grid import GridState, validate_level
from .history import HistoryManager
from .moves import Blocked, EntityMove, MoveOutcome, PlayerPush, PlayerStep, try_move
from .types import Direction, LevelDefinition, LoadError, LoadResult, Position, Snapshot, TileKind
from .win import is_won

__all__ = [
    "Blocked",
    "Direction",
    "Engine",
    "EngineConfig",
    "EngineStatus",
    "EntityMove",
    "GridState",
    "HistoryManager",
    "LevelDefinition",
    "LoadError",
    "LoadResult",
    "MoveOutcome",
    "PlayerPush",
    "PlayerStep",
    "Position",
    "Snapshot",
    "TileKind",
    "is_won",
    "try_move",
    "validate_level",
]
