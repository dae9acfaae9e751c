"""Sokoban rule engine package."""

from .game import (
    Direction,
    GameState,
    Level,
    MoveResult,
    Player,
    Position,
    SokobanGame,
    SolutionValidator,
    Tile,
    apply_move,
    is_solved,
    start_session,
)
from .loader import LevelCollectionLoader, LevelFormat, LevelParseError, LevelParser, load_levels

__all__ = [
    "Direction",
    "GameState",
    "Level",
    "LevelCollectionLoader",
    "LevelFormat",
    "LevelParseError",
    "LevelParser",
    "MoveResult",
    "Player",
    "Position",
    "SokobanGame",
    "SolutionValidator",
    "Tile",
    "apply_move",
    "is_solved",
    "load_levels",
    "start_session",
]
