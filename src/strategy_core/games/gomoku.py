"""
Gomoku game implementation.

15x15 free-placement board, 2 bits per cell:
    0 = empty
    1 = black (player 1, moves first)
    2 = white (player 2)

Five or more in a row wins. A full board is a draw.
"""

from __future__ import annotations

from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from strategy_core.board.bitboard import BitPackedBoard
from strategy_core.core.errors import BoardError, GameAlreadyOver, InvalidMove, OutOfBounds, PositionOccupied
from strategy_core.core.types import Coord, MoveOutcome, Player
from strategy_core.games.game_base import GameBase
from strategy_core.games.game_rules import find_winner, is_winning_placement
from strategy_core.games.game_state import GameState

SIZE = 15
CONNECT = 5
CENTER = (SIZE // 2, SIZE // 2)

CELL_STRINGS = {0: "·", 1: "●", 2: "○"}


class GomokuMove(NamedTuple):
    row: int
    col: int
    player: Player


def _neighbourhood(occupied: np.ndarray, radius: int) -> np.ndarray:
    """Cells within `radius` (Chebyshev) of any occupied cell."""
    near = occupied.copy()
    rows, cols = occupied.shape
    for dr in range(-radius, radius + 1):
        for dc in range(-radius, radius + 1):
            if dr == 0 and dc == 0:
                continue
            src_r = slice(max(0, -dr), rows - max(0, dr))
            dst_r = slice(max(0, dr), rows - max(0, -dr))
            src_c = slice(max(0, -dc), cols - max(0, dc))
            dst_c = slice(max(0, dc), cols - max(0, -dc))
            near[dst_r, dst_c] |= occupied[src_r, src_c]
    return near


class Gomoku(GameBase):
    """Five in a row on a bit-packed 15x15 board."""

    __slots__ = ('state',)

    ROWS = SIZE
    COLS = SIZE
    WIN_LENGTH = CONNECT
    GRAVITY = False

    def __init__(self, starting_player: int = Player.ONE):
        self.state = GameState(BitPackedBoard(SIZE, SIZE, 2), Player.coerce(starting_player))

    def get_cell_strings(self) -> dict[int, str]:
        return CELL_STRINGS

    def game_id(self) -> str:
        return "gomoku"

    def num_players(self) -> int:
        return 2

    def clone(self, keep_history: bool = True) -> "Gomoku":
        g = Gomoku.__new__(Gomoku)
        g.state = self.state.copy(keep_history)
        return g

    def reset(self, starting_player: int = Player.ONE) -> None:
        self.state = GameState(BitPackedBoard(SIZE, SIZE, 2), Player.coerce(starting_player))

    # ---------------------------------------------------------------------------
    # Moves
    # ---------------------------------------------------------------------------

    def legal_moves(self) -> List[Coord]:
        if self.state.is_over:
            return []
        return self.state.board.cells_with_value(0)

    def _validate_cell(self, move) -> Coord:
        try:
            row, col = move
            if isinstance(row, bool) or isinstance(col, bool):
                raise TypeError
            row, col = int(row), int(col)
        except (TypeError, ValueError) as e:
            raise InvalidMove(f"Gomoku moves are (row, col) pairs, got {move!r}") from e
        if not self.state.board.is_within_bounds(row, col):
            raise OutOfBounds(f"Cell ({row},{col}) is outside the {SIZE}x{SIZE} board")
        return row, col

    def make_move(self, move: Coord) -> MoveOutcome:
        state = self.state
        if state.is_over:
            raise GameAlreadyOver("Game is already over")
        row, col = self._validate_cell(move)
        if state.board.get_cell(row, col) != 0:
            raise PositionOccupied(f"Cell ({row},{col}) is occupied")

        player = state.current_player
        state.board.set_cell(row, col, player)
        state.move_count += 1
        state.history.push(GomokuMove(row, col, player))

        if is_winning_placement(state.board, row, col, player, CONNECT):
            state.is_over = True
            state.winner = player
        elif state.move_count >= SIZE * SIZE:
            state.is_over = True
        else:
            state.current_player = player.opponent

        return MoveOutcome(
            move=(row, col),
            player=player,
            cells=((row, col),),
            move_count=state.move_count,
            is_game_over=state.is_over,
            winner=state.winner,
        )

    def undo(self) -> bool:
        entry = self.state.history.pop()
        if entry is None:
            return False
        state = self.state
        state.board.clear_cell(entry.row, entry.col)
        state.move_count -= 1
        state.current_player = entry.player
        state.is_over = False
        state.winner = None
        return True

    def last_move(self) -> Optional[Coord]:
        entry = self.state.history.peek()
        return (entry.row, entry.col) if entry else None

    # ---------------------------------------------------------------------------
    # Geometry used by threat analysis and search
    # ---------------------------------------------------------------------------

    def candidate_cells(self, radius: int = 1) -> List[Coord]:
        """
        Empty cells within `radius` of a stone, nearest the centre first.

        A line can only be extended next to an existing stone, so every
        immediate win or block lies in the radius-1 neighbourhood.
        """
        grid = self.state.board.to_array()
        occupied = grid != 0
        if not occupied.any():
            return [CENTER]
        near = _neighbourhood(occupied, radius) & ~occupied
        cells = [(int(r), int(c)) for r, c in np.argwhere(near)]
        cells.sort(key=lambda rc: self.center_distance(rc))
        return cells

    def playable_cells(self) -> List[Tuple[Coord, Coord]]:
        """(move, cell) pairs worth inspecting; moves are cells here."""
        return [(cell, cell) for cell in self.candidate_cells()]

    def move_for_cell(self, cell: Coord) -> Coord:
        return cell

    def center_distance(self, move: Coord) -> int:
        return abs(move[0] - CENTER[0]) + abs(move[1] - CENTER[1])

    # ---------------------------------------------------------------------------
    # Whole-board checks
    # ---------------------------------------------------------------------------

    def check_win(self) -> Optional[Player]:
        """Exhaustive full-board scan for five in a row."""
        winner = find_winner(self.state.board.to_array(), CONNECT)
        return Player(winner) if winner else None

    @classmethod
    def from_grid(cls, grid: Sequence[Sequence[int]], current_player: Optional[int] = None) -> "Gomoku":
        """Load a 15x15 position of 0/1/2. History starts empty."""
        arr = np.asarray(grid, dtype=np.int8)
        if arr.shape != (SIZE, SIZE):
            raise BoardError(f"Gomoku grid must be {SIZE}x{SIZE}, got {arr.shape}")
        if np.any((arr < 0) | (arr > 2)):
            raise BoardError("Gomoku cells must be 0, 1 or 2")

        game = cls()
        game.state.board = BitPackedBoard.from_array(arr, 2)
        blacks = int(np.count_nonzero(arr == 1))
        whites = int(np.count_nonzero(arr == 2))
        game.state.move_count = blacks + whites

        winner = find_winner(arr, CONNECT)
        if current_player is not None:
            game.state.current_player = Player.coerce(current_player)
        else:
            game.state.current_player = Player.ONE if blacks <= whites else Player.TWO
        if winner:
            game.state.is_over = True
            game.state.winner = Player(winner)
        elif game.state.move_count >= SIZE * SIZE:
            game.state.is_over = True
        return game
