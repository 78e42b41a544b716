"""
Tests for strategy_core.games.game_rules

Line helpers shared by Connect4, Gomoku and threat analysis.
"""

import numpy as np
import pytest

from strategy_core.board.bitboard import BitPackedBoard
from strategy_core.games.game_rules import (
    board_full,
    cell_windows,
    find_winner,
    in_bounds,
    is_winning_placement,
    line_length_through,
    line_windows,
)


class TestLineWindows:
    """Pre-computed windows."""

    @pytest.mark.parametrize("rows,cols,length,count", [
        (6, 7, 4, 69),
        (15, 15, 5, 572),
        (3, 3, 3, 8),
        (4, 4, 5, 0),
    ])
    def test_window_counts(self, rows, cols, length, count):
        """Window counts match the classic tables."""
        assert line_windows(rows, cols, length).shape == (count, length)

    def test_windows_read_only(self):
        """Cached tables cannot be modified."""
        with pytest.raises(ValueError):
            line_windows(6, 7, 4)[0, 0] = 99

    def test_cell_windows_contain_cell(self):
        """Every window listed for a cell includes it."""
        per_cell = cell_windows(6, 7, 4)
        for idx, windows in enumerate(per_cell):
            assert all(idx in w for w in windows)
        # The centre of the bottom row sits in 4 horizontal, 1 vertical, 2 diagonal windows.
        assert len(per_cell[5 * 7 + 3]) == 7


class TestWinChecks:
    """Local and exhaustive checks."""

    def test_find_winner(self):
        """Exhaustive scan finds the owner of a full window."""
        grid = np.zeros((6, 7), dtype=np.int8)
        assert find_winner(grid, 4) == 0
        grid[2:6, 4] = 2
        assert find_winner(grid, 4) == 2

    def test_trial_placement(self):
        """The trial cell itself is not read."""
        board = BitPackedBoard(6, 7)
        for c in range(3):
            board.set_cell(5, c, 1)
        assert is_winning_placement(board, 5, 3, 1, 4)
        assert not is_winning_placement(board, 5, 3, 2, 4)
        assert line_length_through(board, 5, 3, 0, 1, 1) == 4

    def test_gap_fill_wins(self):
        """Filling the gap in X X _ X completes a line."""
        grid = np.zeros((6, 7), dtype=np.int8)
        grid[5, [0, 1, 3]] = 1
        assert is_winning_placement(grid, 5, 2, 1, 4)

    def test_helpers(self):
        """Bounds and fullness."""
        grid = np.ones((2, 2), dtype=np.int8)
        assert in_bounds(grid, 1, 1) and not in_bounds(grid, 2, 0)
        assert board_full(grid)
        grid[0, 0] = 0
        assert not board_full(grid)
