"""
ThreatAnalyzer - pattern scanning for line games (Connect4, Gomoku).

Everything returns coordinates so callers can highlight exact cells:
- winning / blocking / threatening moves: landing cells
- open threes / closed fours: the stones forming the pattern
- forks: empty cells that would create two open threes at once

Only cells the game reports as playable are tried (landing cells for
Connect4, stones' neighbourhood for Gomoku). Trial placements never touch
the board: local checks treat the trial cell as the player's stone.

Usage:
    analyzer = ThreatAnalyzer.for_game(game)
    analyzer.winning_moves(game, Player.ONE)     # [(5, 3)]
    analyzer.report(game, Player.TWO).forks
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, List, NamedTuple, Tuple

import numpy as np

from strategy_core.core.types import Coord, Player
from strategy_core.games.game_rules import DIRECTIONS, cell_windows, is_winning_placement, line_windows

if TYPE_CHECKING:
    from strategy_core.games.game_base import GameBase

# Connectivity counts stones in short unblocked windows.
CONNECTIVITY_WINDOW = 3
CONNECTIVITY_WEIGHT = 10


class Run(NamedTuple):
    cells: Tuple[Coord, ...]
    open_ends: int


class ThreatReport(NamedTuple):
    winning: List[Coord]
    blocking: List[Coord]
    threatening: List[Coord]
    open_threes: List[Tuple[Coord, ...]]
    closed_fours: List[Tuple[Coord, ...]]
    forks: List[Coord]


def _is_empty(grid: np.ndarray, r: int, c: int) -> bool:
    rows, cols = grid.shape
    return 0 <= r < rows and 0 <= c < cols and grid[r, c] == 0


def scan_runs(grid: np.ndarray, player: int) -> Iterator[Run]:
    """Maximal runs of the player's stones, one per (start, direction)."""
    rows, cols = grid.shape
    for r, c in np.argwhere(grid == player):
        r, c = int(r), int(c)
        for dr, dc in DIRECTIONS:
            pr, pc = r - dr, c - dc
            if 0 <= pr < rows and 0 <= pc < cols and grid[pr, pc] == player:
                continue  # not the start of this run
            cells = [(r, c)]
            nr, nc = r + dr, c + dc
            while 0 <= nr < rows and 0 <= nc < cols and grid[nr, nc] == player:
                cells.append((nr, nc))
                nr, nc = nr + dr, nc + dc
            if len(cells) < 2:
                continue
            open_ends = int(_is_empty(grid, pr, pc)) + int(_is_empty(grid, nr, nc))
            yield Run(tuple(cells), open_ends)


def run_through(grid: np.ndarray, r: int, c: int, dr: int, dc: int, player: int) -> Tuple[int, int]:
    """(length, open ends) of the run a stone at (r, c) would join."""
    rows, cols = grid.shape
    length = 1
    ends = 0
    for sign in (1, -1):
        nr, nc = r + sign * dr, c + sign * dc
        while 0 <= nr < rows and 0 <= nc < cols and grid[nr, nc] == player:
            length += 1
            nr, nc = nr + sign * dr, nc + sign * dc
        ends += int(_is_empty(grid, nr, nc))
    return length, ends


def connectivity(grid: np.ndarray, player: int) -> int:
    """
    Own stones in unblocked 3-windows holding at least two of them, minus
    the same for the opponent, times CONNECTIVITY_WEIGHT.
    """
    rows, cols = grid.shape
    windows = line_windows(rows, cols, CONNECTIVITY_WINDOW)
    if windows.size == 0:
        return 0
    vals = grid.ravel()[windows]
    mine = np.count_nonzero(vals == player, axis=1)
    theirs = np.count_nonzero(vals == 3 - player, axis=1)
    own = mine[(mine >= 2) & (theirs == 0)].sum()
    opp = theirs[(theirs >= 2) & (mine == 0)].sum()
    return int(own - opp) * CONNECTIVITY_WEIGHT


class ThreatAnalyzer:
    """Stateless scanner parameterised by the game's line length."""

    def __init__(self, win_length: int = 4):
        self.win_length = win_length

    @classmethod
    def for_game(cls, game: "GameBase") -> "ThreatAnalyzer":
        return cls(game.WIN_LENGTH)

    # ---------------------------------------------------------------------------
    # Immediate tactics
    # ---------------------------------------------------------------------------

    def winning_moves(self, game: "GameBase", player: int) -> List[Coord]:
        """Playable cells where player's stone would complete a line."""
        if game.is_terminal():
            return []
        player = Player.coerce(player)
        grid = game.state.board.to_array()
        return [
            cell for _, cell in game.playable_cells()
            if is_winning_placement(grid, cell[0], cell[1], player, self.win_length)
        ]

    def blocking_moves(self, game: "GameBase", player: int) -> List[Coord]:
        """Cells player must take to stop the opponent's immediate wins."""
        return self.winning_moves(game, Player.coerce(player).opponent)

    def count_threats(self, game: "GameBase", player: int) -> int:
        return len(self.winning_moves(game, player))

    def threatening_moves(self, game: "GameBase", player: int) -> List[Coord]:
        """
        Playable cells after which player wins, holds a four (solid or
        gapped, one empty cell short of a line) or an open three.
        """
        if game.is_terminal():
            return []
        player = Player.coerce(player)
        grid = game.state.board.to_array()
        rows, cols = grid.shape
        per_cell = cell_windows(rows, cols, self.win_length)
        flat = grid.ravel()
        threats = []
        for _, (r, c) in game.playable_cells():
            if is_winning_placement(grid, r, c, player, self.win_length):
                threats.append((r, c))
                continue
            windows = per_cell[r * cols + c]
            vals = flat[windows]
            mine = np.count_nonzero(vals == player, axis=1) + 1  # the trial stone
            theirs = np.count_nonzero(vals == player.opponent, axis=1)
            if np.any((mine == self.win_length - 1) & (theirs == 0)):
                threats.append((r, c))
                continue
            if self._open_three_directions(grid, r, c, player) > 0:
                threats.append((r, c))
        return threats

    # ---------------------------------------------------------------------------
    # Patterns
    # ---------------------------------------------------------------------------

    def open_threes(self, game: "GameBase", player: int) -> List[Tuple[Coord, ...]]:
        """Runs of exactly three with both extensions empty."""
        grid = game.state.board.to_array()
        return [run.cells for run in scan_runs(grid, Player.coerce(player)) if len(run.cells) == 3 and run.open_ends == 2]

    def closed_fours(self, game: "GameBase", player: int) -> List[Tuple[Coord, ...]]:
        """Runs of exactly four with one extension empty."""
        grid = game.state.board.to_array()
        return [run.cells for run in scan_runs(grid, Player.coerce(player)) if len(run.cells) == 4 and run.open_ends == 1]

    def _open_three_directions(self, grid: np.ndarray, r: int, c: int, player: int) -> int:
        count = 0
        for dr, dc in DIRECTIONS:
            length, ends = run_through(grid, r, c, dr, dc, player)
            if length == 3 and ends == 2:
                count += 1
        return count

    def forks(self, game: "GameBase", player: int) -> List[Coord]:
        """Playable cells that would create two open threes at once."""
        if game.is_terminal():
            return []
        player = Player.coerce(player)
        grid = game.state.board.to_array()
        return [cell for _, cell in game.playable_cells() if self._open_three_directions(grid, *cell, player) >= 2]

    def open_four_moves(self, game: "GameBase", player: int) -> List[Coord]:
        """Playable cells giving a run one short of a line with both ends open."""
        if game.is_terminal():
            return []
        player = Player.coerce(player)
        grid = game.state.board.to_array()
        target = self.win_length - 1
        found = []
        for _, (r, c) in game.playable_cells():
            for dr, dc in DIRECTIONS:
                length, ends = run_through(grid, r, c, dr, dc, player)
                if length == target and ends == 2:
                    found.append((r, c))
                    break
        return found

    def threat_level(self, game: "GameBase", cell: Coord, player: int) -> int:
        """
        Strength of placing player's stone on cell:
            5 wins, 4/3/2 makes a run of that length, 1 anything else,
            0 if the cell cannot be played.
        """
        if game.is_terminal():
            return 0
        player = Player.coerce(player)
        board = game.state.board
        r, c = cell
        if not board.is_within_bounds(r, c) or board.get_cell(r, c) != 0:
            return 0
        if getattr(game, "GRAVITY", False) and board.get_drop_row(c) != r:
            return 0
        grid = board.to_array()
        if is_winning_placement(grid, r, c, player, self.win_length):
            return 5
        longest = max(run_through(grid, r, c, dr, dc, player)[0] for dr, dc in DIRECTIONS)
        return max(1, min(longest, 4))

    def connectivity(self, game: "GameBase", player: int) -> int:
        return connectivity(game.state.board.to_array(), Player.coerce(player))

    def report(self, game: "GameBase", player: int) -> ThreatReport:
        return ThreatReport(
            winning=self.winning_moves(game, player),
            blocking=self.blocking_moves(game, player),
            threatening=self.threatening_moves(game, player),
            open_threes=self.open_threes(game, player),
            closed_fours=self.closed_fours(game, player),
            forks=self.forks(game, player),
        )
