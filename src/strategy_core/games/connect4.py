"""
Connect4 game implementation.

6x7 gravity board, 2 bits per cell:
    0 = empty
    1 = player 1
    2 = player 2

Moves are column indices. A move that completes four in a row ends the
game with the mover still recorded as current player.
"""

from __future__ import annotations

from typing import List, NamedTuple, Optional, Sequence, Set, Tuple

import numpy as np

from strategy_core.board.bitboard import BitPackedBoard
from strategy_core.core.errors import BoardError, GameAlreadyOver, InvalidMove, OutOfBounds, PositionOccupied
from strategy_core.core.types import Coord, MoveOutcome, Player
from strategy_core.games.game_base import GameBase
from strategy_core.games.game_rules import find_winner, is_winning_placement
from strategy_core.games.game_state import GameState

ROWS = 6
COLS = 7
CONNECT = 4

# Cell strings: each cell value maps to its display string
CELL_STRINGS = {0: " ", 1: "X", 2: "O"}

# Centre-out column order used for move ordering.
CENTER_ORDER = (3, 2, 4, 1, 5, 0, 6)


class Connect4Move(NamedTuple):
    """History record for one drop."""

    row: int
    col: int
    player: Player


class Connect4(GameBase):
    """Connect4 on a bit-packed 6x7 board."""

    __slots__ = ('state',)

    ROWS = ROWS
    COLS = COLS
    WIN_LENGTH = CONNECT
    GRAVITY = True

    def __init__(self, starting_player: int = Player.ONE):
        self.state = GameState(BitPackedBoard(ROWS, COLS, 2), Player.coerce(starting_player))

    def get_cell_strings(self) -> dict[int, str]:
        return CELL_STRINGS

    def game_id(self) -> str:
        return "connect4"

    def num_players(self) -> int:
        return 2

    def clone(self, keep_history: bool = True) -> "Connect4":
        g = Connect4.__new__(Connect4)
        g.state = self.state.copy(keep_history)
        return g

    def reset(self, starting_player: int = Player.ONE) -> None:
        self.state = GameState(BitPackedBoard(ROWS, COLS, 2), Player.coerce(starting_player))

    # ---------------------------------------------------------------------------
    # Moves
    # ---------------------------------------------------------------------------

    def legal_moves(self) -> List[int]:
        if self.state.is_over:
            return []
        board = self.state.board
        return [c for c in range(COLS) if not board.is_column_full(c)]

    def _validate_column(self, col) -> int:
        if isinstance(col, bool) or not isinstance(col, (int, np.integer)):
            raise InvalidMove(f"Connect4 moves are column indices, got {col!r}")
        col = int(col)
        if not 0 <= col < COLS:
            raise OutOfBounds(f"Column {col} is outside 0..{COLS - 1}")
        return col

    def make_move(self, col: int) -> MoveOutcome:
        state = self.state
        if state.is_over:
            raise GameAlreadyOver("Game is already over")
        col = self._validate_column(col)
        row = state.board.get_drop_row(col)
        if row is None:
            raise PositionOccupied(f"Column {col} is full")

        player = state.current_player
        state.board.set_cell(row, col, player)
        state.move_count += 1
        state.history.push(Connect4Move(row, col, player))

        if is_winning_placement(state.board, row, col, player, CONNECT):
            state.is_over = True
            state.winner = player
        elif state.move_count >= ROWS * COLS:
            state.is_over = True
        else:
            state.current_player = player.opponent

        return MoveOutcome(
            move=col,
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

    # ---------------------------------------------------------------------------
    # Geometry used by threat analysis and search
    # ---------------------------------------------------------------------------

    def playable_cells(self) -> List[Tuple[int, Coord]]:
        """(move, landing cell) for every open column, centre first."""
        board = self.state.board
        cells = []
        for col in CENTER_ORDER:
            row = board.get_drop_row(col)
            if row is not None:
                cells.append((col, (row, col)))
        return cells

    def move_for_cell(self, cell: Coord) -> int:
        return cell[1]

    def center_distance(self, move: int) -> int:
        return abs(move - COLS // 2)

    def column_height(self, col: int) -> int:
        return self.state.board.column_height(self._validate_column(col))

    # ---------------------------------------------------------------------------
    # Whole-board checks
    # ---------------------------------------------------------------------------

    def check_win(self) -> Optional[Player]:
        """Exhaustive full-board scan for four in a row."""
        winner = find_winner(self.state.board.to_array(), CONNECT)
        return Player(winner) if winner else None

    @classmethod
    def from_grid(cls, grid: Sequence[Sequence[int]], current_player: Optional[int] = None) -> "Connect4":
        """
        Load a position from a 6x7 grid of 0/1/2 (row 0 is the top).

        Pieces must rest on the bottom or on another piece. The side to move
        defaults to whoever has fewer pieces (player 1 on a tie). History
        starts empty.
        """
        arr = np.asarray(grid, dtype=np.int8)
        if arr.shape != (ROWS, COLS):
            raise BoardError(f"Connect4 grid must be {ROWS}x{COLS}, got {arr.shape}")
        if np.any((arr < 0) | (arr > 2)):
            raise BoardError("Connect4 cells must be 0, 1 or 2")
        occupied = arr != 0
        if np.any(occupied[:-1] & ~occupied[1:]):
            raise InvalidMove("Grid has floating pieces")

        game = cls()
        game.state.board = BitPackedBoard.from_array(arr, 2)
        ones = int(np.count_nonzero(arr == 1))
        twos = int(np.count_nonzero(arr == 2))
        game.state.move_count = ones + twos

        winner = find_winner(arr, CONNECT)
        if current_player is not None:
            game.state.current_player = Player.coerce(current_player)
        elif winner:
            game.state.current_player = Player(winner)
        else:
            game.state.current_player = Player.ONE if ones <= twos else Player.TWO

        if winner:
            game.state.is_over = True
            game.state.winner = Player(winner)
        elif game.state.move_count >= ROWS * COLS:
            game.state.is_over = True
        return game

    def is_reachable(self) -> bool:
        """
        True if the position can arise from legal play with player 1 starting.

        Peels top pieces off, last mover first, until the board is empty.
        Intermediate positions must not already contain a win.
        """
        grid = self.state.board.to_array().copy()
        return _peel(grid, set())


def _peel(grid: np.ndarray, failed: Set[bytes]) -> bool:
    ones = int(np.count_nonzero(grid == 1))
    twos = int(np.count_nonzero(grid == 2))
    if ones == 0 and twos == 0:
        return True
    if twos > ones or ones > twos + 1:
        return False
    occupied = grid != 0
    if np.any(occupied[:-1] & ~occupied[1:]):
        return False

    key = grid.tobytes()
    if key in failed:
        return False

    last = 1 if ones > twos else 2
    for col in range(COLS):
        rows = np.flatnonzero(occupied[:, col])
        if rows.size == 0:
            continue
        top = int(rows[0])
        if grid[top, col] != last:
            continue
        grid[top, col] = 0
        clean = find_winner(grid, CONNECT) == 0
        ok = clean and _peel(grid, failed)
        grid[top, col] = last
        if ok:
            return True

    failed.add(key)
    return False

