"""
Core types, constants, and data structures.

This module contains the fundamental types used throughout the engine:
- Player / Cell: board markers
- Outcome: game result from one player's point of view
- GamePhase, Difficulty, GameKind: small enums shared by rules and search
- Stats: rollout outcome counts with scoring properties
- MoveOutcome / PositionAnalysis: read-only snapshots handed to callers
"""

from __future__ import annotations

from enum import Enum, IntEnum, auto
from typing import Any, NamedTuple, Optional, Tuple

from strategy_core.core.errors import InvalidPlayer

Coord = Tuple[int, int]


class Player(IntEnum):
    ONE = 1
    TWO = 2

    @property
    def opponent(self) -> "Player":
        return Player(3 - self.value)

    @classmethod
    def coerce(cls, value: Any) -> "Player":
        """Accept a Player or a plain 1/2, raise InvalidPlayer otherwise."""
        if isinstance(value, bool):
            raise InvalidPlayer(f"Unknown player: {value!r}")
        try:
            return cls(int(value))
        except (TypeError, ValueError) as e:
            raise InvalidPlayer(f"Unknown player: {value!r}. Expected 1 or 2.") from e


class Cell(IntEnum):
    EMPTY = 0
    PLAYER1 = 1
    PLAYER2 = 2
    NEUTRAL = 3


class Outcome(Enum):
    WIN = auto()
    TIE = auto()
    LOSS = auto()
    NEUTRAL = auto()


class GamePhase(Enum):
    OPENING = "opening"
    MIDDLE = "middle"
    ENDGAME = "endgame"

    @classmethod
    def for_progress(cls, pieces: int, total_cells: int) -> "GamePhase":
        """Classify by how much of the board is filled."""
        if pieces <= total_cells * OPENING_FRACTION:
            return cls.OPENING
        if pieces <= total_cells * MIDDLE_FRACTION:
            return cls.MIDDLE
        return cls.ENDGAME


# On a 6x7 board these give Opening <= 10 pieces, Middle <= 30.
OPENING_FRACTION = 0.25
MIDDLE_FRACTION = 0.72


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"

    @classmethod
    def parse(cls, value: Any) -> "Difficulty":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as e:
            available = ", ".join(d.value for d in cls)
            raise ValueError(f"Unknown difficulty: {value}. Available: {available}") from e


class GameKind(Enum):
    CONNECT4 = "connect4"
    GOMOKU = "gomoku"
    LGAME = "lgame"
    TRIO = "trio"


# ─── Rollout scoring ──────────────────────────────────────────────────────────

W_WEIGHT = 1.0   # Utility for a WIN
T_WEIGHT = 0.0   # Utility for a TIE
L_WEIGHT = -1.0  # Utility for a LOSS

# Visits after which a rollout average counts as fully trusted.
CONFIDENCE_VISITS = 50


class Stats(NamedTuple):
    """Outcome counts with derived scoring properties."""

    wins: int = 0
    ties: int = 0
    losses: int = 0

    @property
    def total(self) -> int:
        return self.wins + self.ties + self.losses

    @property
    def utility(self) -> float:
        """Raw expected value in [-1, 1]."""
        if self.total == 0:
            return 0.0
        return (self.wins * W_WEIGHT + self.ties * T_WEIGHT + self.losses * L_WEIGHT) / self.total

    @property
    def confidence(self) -> float:
        """Visit-based trust in [0, 1]."""
        return min(self.total / CONFIDENCE_VISITS, 1.0)

    def record(self, outcome: Outcome) -> "Stats":
        if outcome is Outcome.WIN:
            return self._replace(wins=self.wins + 1)
        if outcome is Outcome.LOSS:
            return self._replace(losses=self.losses + 1)
        return self._replace(ties=self.ties + 1)


# ─── Snapshots ────────────────────────────────────────────────────────────────

class MoveOutcome(NamedTuple):
    """What a successful make_move did."""

    move: Any
    player: Player
    cells: Tuple[Coord, ...]
    move_count: int
    is_game_over: bool
    winner: Optional[Player] = None
    solution: Any = None


class PositionAnalysis(NamedTuple):
    """Derived read-only view of a position, from the side to move."""

    current_player_threats: int
    opponent_threats: int
    total_pieces: int
    connectivity_score: int
    phase: GamePhase
    evaluation_score: int
