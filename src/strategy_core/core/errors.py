"""
Typed rule violations.

Every game raises a GameError subclass *before* touching any state, so a
failed call leaves the game exactly as it was. The facade converts these
into MoveResult error kinds; the search engine prunes on them.
"""

from enum import Enum


class ErrorKind(Enum):
    OUT_OF_BOUNDS = "out_of_bounds"
    POSITION_OCCUPIED = "position_occupied"
    GAME_ALREADY_OVER = "game_already_over"
    INVALID_PLAYER = "invalid_player"
    BOARD_ERROR = "board_error"
    INVALID_MOVE = "invalid_move"


class GameError(ValueError):
    """Base class for rule violations. Subclasses pin their ErrorKind."""

    kind: ErrorKind = ErrorKind.INVALID_MOVE


class OutOfBounds(GameError):
    kind = ErrorKind.OUT_OF_BOUNDS


class PositionOccupied(GameError):
    kind = ErrorKind.POSITION_OCCUPIED


class GameAlreadyOver(GameError):
    kind = ErrorKind.GAME_ALREADY_OVER


class InvalidPlayer(GameError):
    kind = ErrorKind.INVALID_PLAYER


class BoardError(GameError):
    """Bit-domain or shape violation on a BitPackedBoard."""

    kind = ErrorKind.BOARD_ERROR


class InvalidMove(GameError):
    """Illegal shape, orientation, adjacency or move encoding."""

    kind = ErrorKind.INVALID_MOVE


ERRORS_BY_KIND = {
    cls.kind: cls
    for cls in (OutOfBounds, PositionOccupied, GameAlreadyOver, InvalidPlayer, BoardError, InvalidMove)
}
