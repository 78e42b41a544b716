"""
L-Game implementation.

4x4 board, 2 bits per cell:
    0 = empty
    1 = player 1's L piece
    2 = player 2's L piece
    3 = neutral piece

A turn relocates the mover's L-tetromino to a different footprint (its own
cells count as free), then optionally moves one neutral piece to an empty
cell. A player who has no legal L placement at the start of their turn
loses.

Turns can be played in one call (make_move with an LMove) or in two steps:
place_l_piece() followed by move_neutral() or skip_neutral(). Between the
two steps the game is in the NEUTRAL phase and the same player stays to
move.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from strategy_core.board.bitboard import BitPackedBoard
from strategy_core.core.errors import BoardError, GameAlreadyOver, InvalidMove, OutOfBounds
from strategy_core.core.types import Cell, Coord, MoveOutcome, Player
from strategy_core.games.game_base import GameBase
from strategy_core.games.game_state import GameState

SIZE = 4

CELL_STRINGS = {0: " ", 1: "A", 2: "B", 3: "●"}

# Cell offsets (row, col) from the anchor for the 8 orientations:
# 4 rotations of the L and 4 of its mirror image.
ORIENTATIONS: Tuple[Tuple[Coord, ...], ...] = (
    ((0, 0), (1, 0), (2, 0), (2, 1)),
    ((0, 0), (0, 1), (0, 2), (1, 0)),
    ((0, 0), (0, 1), (1, 1), (2, 1)),
    ((0, 2), (1, 0), (1, 1), (1, 2)),
    ((0, 1), (1, 1), (2, 0), (2, 1)),
    ((0, 0), (1, 0), (1, 1), (1, 2)),
    ((0, 0), (0, 1), (1, 0), (2, 0)),
    ((0, 0), (0, 1), (0, 2), (1, 2)),
)

Placement = Tuple[int, int, int]  # (anchor row, anchor col, orientation)


def footprint(row: int, col: int, orientation: int) -> Tuple[Coord, ...]:
    """Cells covered by an L at this anchor/orientation (may leave the board)."""
    return tuple((row + dr, col + dc) for dr, dc in ORIENTATIONS[orientation])


# Every on-board placement, enumerated once.
ON_BOARD: Dict[Placement, FrozenSet[Coord]] = {
    (r, c, o): frozenset(footprint(r, c, o))
    for r in range(SIZE)
    for c in range(SIZE)
    for o in range(len(ORIENTATIONS))
    if all(0 <= rr < SIZE and 0 <= cc < SIZE for rr, cc in footprint(r, c, o))
}

INITIAL_PIECES: Dict[Player, Placement] = {
    Player.ONE: (0, 0, 0),
    Player.TWO: (1, 2, 2),
}
INITIAL_NEUTRALS: Tuple[Coord, ...] = ((0, 3), (3, 0))


class LPhase(Enum):
    L_PIECE = "l_piece"
    NEUTRAL = "neutral"


class LMove(NamedTuple):
    """Full turn: L placement plus an optional neutral relocation."""

    row: int
    col: int
    orientation: int
    neutral_from: Optional[Coord] = None
    neutral_to: Optional[Coord] = None

    @property
    def placement(self) -> Placement:
        return (self.row, self.col, self.orientation)


class LTurn(NamedTuple):
    """History record. `completed` is False while a neutral move is pending."""

    player: Player
    previous: Placement
    placement: Placement
    neutral_from: Optional[Coord]
    neutral_to: Optional[Coord]
    completed: bool


def _coerce_move(move) -> LMove:
    if isinstance(move, LMove):
        return move
    try:
        return LMove(*move)
    except TypeError as e:
        raise InvalidMove(f"L-Game moves are (row, col, orientation[, from, to]), got {move!r}") from e


class LGame(GameBase):
    """The 4x4 L-Game with neutral pieces."""

    __slots__ = ('state', 'pieces', 'phase_state')

    ROWS = SIZE
    COLS = SIZE

    def __init__(self, starting_player: int = Player.ONE):
        self.state = GameState(BitPackedBoard(SIZE, SIZE, 2), Player.coerce(starting_player))
        self.pieces: Dict[Player, Placement] = dict(INITIAL_PIECES)
        self.phase_state = LPhase.L_PIECE
        for player, placement in self.pieces.items():
            self.state.board.fill(ON_BOARD[placement], player)
        self.state.board.fill(INITIAL_NEUTRALS, Cell.NEUTRAL)

    def get_cell_strings(self) -> dict[int, str]:
        return CELL_STRINGS

    def game_id(self) -> str:
        return "lgame"

    def num_players(self) -> int:
        return 2

    def clone(self, keep_history: bool = True) -> "LGame":
        g = LGame.__new__(LGame)
        g.state = self.state.copy(keep_history)
        g.pieces = dict(self.pieces)
        g.phase_state = self.phase_state
        return g

    def reset(self, starting_player: int = Player.ONE) -> None:
        self.__init__(starting_player)

    # ---------------------------------------------------------------------------
    # Queries
    # ---------------------------------------------------------------------------

    def l_piece_position(self, player: int) -> Placement:
        return self.pieces[Player.coerce(player)]

    def l_piece_cells(self, player: int) -> List[Coord]:
        return sorted(ON_BOARD[self.l_piece_position(player)])

    def neutral_positions(self) -> List[Coord]:
        return self.state.board.cells_with_value(Cell.NEUTRAL)

    def legal_l_placements(self, player: Optional[int] = None) -> List[Placement]:
        """
        All placements the player may move their L to.

        Scans every anchor x orientation; the player's own cells count as
        free and the current footprint is excluded.
        """
        player = self.state.current_player if player is None else Player.coerce(player)
        grid = self.state.board.to_array()
        current = ON_BOARD[self.pieces[player]]
        legal = []
        for placement, cells in ON_BOARD.items():
            if cells == current:
                continue
            if all(grid[r, c] == 0 or grid[r, c] == player for r, c in cells):
                legal.append(placement)
        return legal

    def mobility(self, player: int) -> int:
        return len(self.legal_l_placements(player))

    def is_current_player_blocked(self) -> bool:
        return not self.legal_l_placements()

    def phase_of_turn(self) -> LPhase:
        return self.phase_state

    def legal_moves(self) -> List[LMove]:
        """
        Every full turn for the side to move: each L placement alone, and
        each placement combined with every neutral relocation.

        Empty while a two-step turn waits for its neutral move.
        """
        if self.state.is_over or self.phase_state is not LPhase.L_PIECE:
            return []
        player = self.state.current_player
        grid = self.state.board.to_array()
        old = ON_BOARD[self.pieces[player]]
        neutrals = [(int(r), int(c)) for r, c in np.argwhere(grid == Cell.NEUTRAL)]

        moves: List[LMove] = []
        for placement in self.legal_l_placements(player):
            new = ON_BOARD[placement]
            empty = [
                (r, c) for r in range(SIZE) for c in range(SIZE)
                if (r, c) not in new and (grid[r, c] == 0 or (r, c) in old)
            ]
            moves.append(LMove(*placement))
            for src in neutrals:
                for dst in empty:
                    moves.append(LMove(*placement, src, dst))
        return moves

    # ---------------------------------------------------------------------------
    # Validation
    # ---------------------------------------------------------------------------

    def _validate_placement(self, row, col, orientation) -> Placement:
        if not all(isinstance(v, (int, np.integer)) and not isinstance(v, bool) for v in (row, col, orientation)):
            raise InvalidMove(f"L placement needs integer row, col, orientation: {(row, col, orientation)!r}")
        row, col, orientation = int(row), int(col), int(orientation)
        if not 0 <= orientation < len(ORIENTATIONS):
            raise InvalidMove(f"Orientation {orientation} is outside 0..{len(ORIENTATIONS) - 1}")
        placement = (row, col, orientation)
        if placement not in ON_BOARD:
            raise InvalidMove(f"L piece at {placement} leaves the {SIZE}x{SIZE} board")

        player = self.state.current_player
        new = ON_BOARD[placement]
        if new == ON_BOARD[self.pieces[player]]:
            raise InvalidMove("L piece must move to a different position")
        board = self.state.board
        for r, c in new:
            if board.get_cell(r, c) not in (0, player):
                raise InvalidMove(f"L piece overlaps occupied cell ({r},{c})")
        return placement

    def _validate_neutral(self, src, dst, placement: Placement, old: Placement) -> Tuple[Coord, Coord]:
        board = self.state.board
        try:
            src = (int(src[0]), int(src[1]))
            dst = (int(dst[0]), int(dst[1]))
        except (TypeError, ValueError, IndexError) as e:
            raise InvalidMove(f"Neutral move needs two (row, col) cells, got {src!r} -> {dst!r}") from e
        for r, c in (src, dst):
            if not board.is_within_bounds(r, c):
                raise OutOfBounds(f"Cell ({r},{c}) is outside the {SIZE}x{SIZE} board")
        if board.get_cell(*src) != Cell.NEUTRAL:
            raise InvalidMove(f"No neutral piece at {src}")
        if dst == src:
            raise InvalidMove("Neutral piece must move to a different cell")
        freed = ON_BOARD[old] - ON_BOARD[placement]
        if dst in ON_BOARD[placement] or (board.get_cell(*dst) != 0 and dst not in freed):
            raise InvalidMove(f"Neutral target {dst} is not empty")
        return src, dst

    # ---------------------------------------------------------------------------
    # Moves
    # ---------------------------------------------------------------------------

    def _move_l(self, player: Player, placement: Placement) -> None:
        board = self.state.board
        board.fill(ON_BOARD[self.pieces[player]], Cell.EMPTY)
        board.fill(ON_BOARD[placement], player)
        self.pieces[player] = placement

    def _move_neutral(self, src: Coord, dst: Coord) -> None:
        self.state.board.set_cell(*src, Cell.EMPTY)
        self.state.board.set_cell(*dst, Cell.NEUTRAL)

    def _finish_turn(self, player: Player) -> None:
        state = self.state
        state.move_count += 1
        state.current_player = player.opponent
        self.phase_state = LPhase.L_PIECE
        if self.is_current_player_blocked():
            state.is_over = True
            state.winner = player

    def _outcome(self, move, player: Player, cells) -> MoveOutcome:
        return MoveOutcome(
            move=move,
            player=player,
            cells=tuple(sorted(cells)),
            move_count=self.state.move_count,
            is_game_over=self.state.is_over,
            winner=self.state.winner,
        )

    def make_move(self, move) -> MoveOutcome:
        """Play a whole turn atomically."""
        if self.state.is_over:
            raise GameAlreadyOver("Game is already over")
        if self.phase_state is not LPhase.L_PIECE:
            raise InvalidMove("Finish the pending neutral move first")
        move = _coerce_move(move)
        player = self.state.current_player
        old = self.pieces[player]
        placement = self._validate_placement(move.row, move.col, move.orientation)

        src = dst = None
        if (move.neutral_from is None) != (move.neutral_to is None):
            raise InvalidMove("Neutral move needs both a source and a target")
        if move.neutral_from is not None:
            src, dst = self._validate_neutral(move.neutral_from, move.neutral_to, placement, old)

        self._move_l(player, placement)
        if src is not None:
            self._move_neutral(src, dst)
        self.state.history.push(LTurn(player, old, placement, src, dst, completed=True))
        self._finish_turn(player)

        cells = set(ON_BOARD[placement])
        if dst is not None:
            cells.add(dst)
        return self._outcome(LMove(*placement, src, dst), player, cells)

    def place_l_piece(self, row: int, col: int, orientation: int) -> MoveOutcome:
        """First step of a two-step turn. The same player stays to move."""
        if self.state.is_over:
            raise GameAlreadyOver("Game is already over")
        if self.phase_state is not LPhase.L_PIECE:
            raise InvalidMove("L piece already placed this turn")
        player = self.state.current_player
        old = self.pieces[player]
        placement = self._validate_placement(row, col, orientation)

        self._move_l(player, placement)
        self.state.history.push(LTurn(player, old, placement, None, None, completed=False))
        self.phase_state = LPhase.NEUTRAL
        return self._outcome(LMove(*placement), player, ON_BOARD[placement])

    def move_neutral(self, src: Coord, dst: Coord) -> MoveOutcome:
        """Second step: relocate a neutral piece and end the turn."""
        if self.phase_state is not LPhase.NEUTRAL:
            raise InvalidMove("Neutral pieces move only after the L piece")
        pending: LTurn = self.state.history.peek()
        # The L is already on its new cells, so validate against an unchanged footprint.
        src, dst = self._validate_neutral(src, dst, pending.placement, pending.placement)

        self._move_neutral(src, dst)
        self.state.history.pop()
        self.state.history.push(pending._replace(neutral_from=src, neutral_to=dst, completed=True))
        self._finish_turn(pending.player)
        return self._outcome(LMove(*pending.placement, src, dst), pending.player, [dst])

    def skip_neutral(self) -> MoveOutcome:
        """Second step: leave the neutral pieces where they are."""
        if self.phase_state is not LPhase.NEUTRAL:
            raise InvalidMove("No turn is waiting for a neutral move")
        pending: LTurn = self.state.history.pop()
        self.state.history.push(pending._replace(completed=True))
        self._finish_turn(pending.player)
        return self._outcome(LMove(*pending.placement), pending.player, [])

    def undo(self) -> bool:
        """Revert the newest turn, or the pending half-turn."""
        entry: Optional[LTurn] = self.state.history.pop()
        if entry is None:
            return False
        state = self.state
        if entry.neutral_to is not None:
            self._move_neutral(entry.neutral_to, entry.neutral_from)
        self._move_l(entry.player, entry.previous)
        if entry.completed:
            state.move_count -= 1
        state.current_player = entry.player
        state.is_over = False
        state.winner = None
        self.phase_state = LPhase.L_PIECE
        return True

    # ---------------------------------------------------------------------------
    # Loading
    # ---------------------------------------------------------------------------

    @classmethod
    def from_grid(cls, grid: Sequence[Sequence[int]], current_player: int = Player.ONE) -> "LGame":
        """
        Load a position from a 4x4 grid of 0/1/2/3.

        Each player needs exactly one L of four cells and there must be two
        neutral pieces. A blocked side to move ends the game immediately.
        """
        arr = np.asarray(grid, dtype=np.int8)
        if arr.shape != (SIZE, SIZE):
            raise BoardError(f"L-Game grid must be {SIZE}x{SIZE}, got {arr.shape}")
        if np.any((arr < 0) | (arr > 3)):
            raise BoardError("L-Game cells must be 0..3")
        if np.count_nonzero(arr == Cell.NEUTRAL) != 2:
            raise BoardError("L-Game needs exactly two neutral pieces")

        game = cls.__new__(cls)
        game.state = GameState(BitPackedBoard.from_array(arr, 2), Player.coerce(current_player))
        game.pieces = {}
        game.phase_state = LPhase.L_PIECE
        for player in Player:
            cells = frozenset((int(r), int(c)) for r, c in np.argwhere(arr == player))
            match = next((p for p, fp in ON_BOARD.items() if fp == cells), None)
            if match is None:
                raise BoardError(f"Player {int(player)} does not hold a single L piece")
            game.pieces[player] = match

        if game.is_current_player_blocked():
            game.state.is_over = True
            game.state.winner = game.state.current_player.opponent
        return game
