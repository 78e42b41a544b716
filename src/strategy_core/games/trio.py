"""
Trio puzzle implementation.

7x7 board, 4 bits per cell, pre-filled with digits 1-9. There is no
opponent: the solver claims triples of linearly adjacent cells whose
digits satisfy a*b + c == target or a*b - c == target. The round ends when
every solution has been found.

A claim that is not a solution (wrong shape or wrong arithmetic) is not an
error; make_move reports it with solution=None.
"""

from __future__ import annotations

import copy
from typing import List, NamedTuple, Optional, Sequence

import numpy as np

from strategy_core.board.bitboard import BitPackedBoard
from strategy_core.core.errors import BoardError, GameAlreadyOver, InvalidMove, OutOfBounds
from strategy_core.core.types import Coord, Difficulty, GamePhase, MoveOutcome, Player
from strategy_core.games.game_base import GameBase
from strategy_core.games.game_state import GameState
from strategy_core.solver.trio_solver import (
    ADJACENT_TRIPLES,
    SIZE,
    TRIO_LEVELS,
    Solution,
    SolveReport,
    Triple,
    check_triple,
    generate_puzzle,
    pick_target,
    solve,
    suggest_solution,
)

CELL_STRINGS = {0: " ", **{d: str(d) for d in range(1, 10)}}


class TrioClaim(NamedTuple):
    """History record for a found solution."""

    solution: Solution


class TrioGame(GameBase):
    """Single-player Trio round on a bit-packed 7x7 digit board."""

    __slots__ = ('state', 'level', 'target', 'solutions', 'found', '_rng')

    ROWS = SIZE
    COLS = SIZE
    BITS_PER_CELL = 4

    def __init__(
        self,
        level: int = 1,
        seed: Optional[int] = None,
        digits: Optional[Sequence[Sequence[int]]] = None,
        target: Optional[int] = None,
    ):
        if level not in TRIO_LEVELS:
            raise ValueError(f"Unknown Trio level: {level}. Available: {', '.join(map(str, TRIO_LEVELS))}")
        self.level = level
        self._rng = np.random.default_rng(seed)

        if digits is None:
            grid, generated = generate_puzzle(level, self._rng)
            target = generated if target is None else target
        else:
            grid = np.asarray(digits, dtype=np.int8)
            if grid.shape != (SIZE, SIZE):
                raise BoardError(f"Trio board must be {SIZE}x{SIZE}, got {grid.shape}")
            if np.any((grid < 1) | (grid > 9)):
                raise BoardError("Trio cells must hold digits 1-9")
            if target is None:
                target = pick_target(grid, level, self._rng)
                if target is None:
                    raise BoardError("No target in range has a suitable number of solutions")

        self.state = GameState(BitPackedBoard.from_array(grid, self.BITS_PER_CELL), Player.ONE)
        self._start_round(int(target))

    def _start_round(self, target: int) -> None:
        self.target = target
        self.solutions = solve(self.state.board.to_array(), target).solutions
        self.found: List[Solution] = []
        self.state.history.clear()
        self.state.move_count = 0
        self._update_terminal()

    def _update_terminal(self) -> None:
        done = len(self.found) == len(self.solutions)
        self.state.is_over = done
        self.state.winner = Player.ONE if done and self.solutions else None

    def get_cell_strings(self) -> dict[int, str]:
        return CELL_STRINGS

    def game_id(self) -> str:
        return "trio"

    def num_players(self) -> int:
        return 1

    def clone(self, keep_history: bool = True) -> "TrioGame":
        g = TrioGame.__new__(TrioGame)
        g.state = self.state.copy(keep_history)
        g.level = self.level
        g.target = self.target
        g.solutions = self.solutions
        g.found = list(self.found)
        g._rng = copy.deepcopy(self._rng)
        return g

    def reset(self, starting_player: int = Player.ONE) -> None:
        """Start the same round again with nothing found."""
        self._start_round(self.target)

    def new_round(self, target: Optional[int] = None) -> int:
        """Keep the board, pick a fresh target. Returns the target."""
        if target is None:
            target = pick_target(self.state.board.to_array(), self.level, self._rng)
            if target is None:
                raise BoardError("No target in range has a suitable number of solutions")
        self._start_round(int(target))
        return self.target

    # ---------------------------------------------------------------------------
    # Queries
    # ---------------------------------------------------------------------------

    def digit(self, row: int, col: int) -> int:
        return self.state.board.get_cell(row, col)

    def legal_moves(self) -> List[Triple]:
        """Every claimable run of three cells."""
        if self.state.is_over:
            return []
        return list(ADJACENT_TRIPLES)

    def remaining_solutions(self) -> List[Solution]:
        found = {s.cells for s in self.found}
        return [s for s in self.solutions if s.cells not in found]

    def check_triple(self, cells: Sequence[Coord]) -> Optional[Solution]:
        """Non-mutating check. None means no match."""
        return check_triple(self.state.board.to_array(), self._validate_cells(cells), self.target)

    def report(self) -> SolveReport:
        return solve(self.state.board.to_array(), self.target)

    def hint(self, difficulty: Difficulty = Difficulty.MEDIUM) -> Optional[Solution]:
        return suggest_solution(self.remaining_solutions(), Difficulty.parse(difficulty), self._rng)

    def piece_count(self) -> int:
        return len(self.found)

    def phase(self) -> GamePhase:
        return GamePhase.for_progress(len(self.found), max(1, len(self.solutions)))

    # ---------------------------------------------------------------------------
    # Moves
    # ---------------------------------------------------------------------------

    def _validate_cells(self, cells) -> Triple:
        try:
            triple = tuple((int(r), int(c)) for r, c in cells)
        except (TypeError, ValueError) as e:
            raise InvalidMove(f"Trio claims are three (row, col) cells, got {cells!r}") from e
        if len(triple) != 3:
            raise InvalidMove(f"Trio claims need exactly three cells, got {len(triple)}")
        for r, c in triple:
            if not self.state.board.is_within_bounds(r, c):
                raise OutOfBounds(f"Cell ({r},{c}) is outside the {SIZE}x{SIZE} board")
        return triple

    def make_move(self, cells) -> MoveOutcome:
        if self.state.is_over:
            raise GameAlreadyOver("All solutions have been found")
        triple = self._validate_cells(cells)
        solution = check_triple(self.state.board.to_array(), triple, self.target)
        if solution is not None and any(s.cells == solution.cells for s in self.found):
            solution = None

        if solution is not None:
            self.found.append(solution)
            self.state.history.push(TrioClaim(solution))
            self.state.move_count += 1
            self._update_terminal()

        return MoveOutcome(
            move=triple,
            player=Player.ONE,
            cells=triple if solution is not None else (),
            move_count=self.state.move_count,
            is_game_over=self.state.is_over,
            winner=self.state.winner,
            solution=solution,
        )

    def undo(self) -> bool:
        entry = self.state.history.pop()
        if entry is None:
            return False
        self.found.remove(entry.solution)
        self.state.move_count -= 1
        self._update_terminal()
        return True

    def state_string(self) -> str:
        return f"Target: {self.target}   Found: {len(self.found)}/{len(self.solutions)}\n" + super().state_string()
