"""
Core module - fundamental types, errors and hashing.

This module provides the building blocks used throughout the engine.
"""

from strategy_core.core.errors import (
    ErrorKind,
    GameError,
    OutOfBounds,
    PositionOccupied,
    GameAlreadyOver,
    InvalidPlayer,
    BoardError,
    InvalidMove,
)
from strategy_core.core.types import (
    Coord,
    Player,
    Cell,
    Outcome,
    GamePhase,
    Difficulty,
    GameKind,
    Stats,
    MoveOutcome,
    PositionAnalysis,
)

__all__ = [
    # Errors
    "ErrorKind",
    "GameError",
    "OutOfBounds",
    "PositionOccupied",
    "GameAlreadyOver",
    "InvalidPlayer",
    "BoardError",
    "InvalidMove",
    # Types
    "Coord",
    "Player",
    "Cell",
    "Outcome",
    "GamePhase",
    "Difficulty",
    "GameKind",
    "Stats",
    "MoveOutcome",
    "PositionAnalysis",
]
