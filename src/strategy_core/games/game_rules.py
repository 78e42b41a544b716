"""
Line utilities for connection games.

Functions accept any board-like object exposing ``.shape`` and
``board[r, c]`` - both BitPackedBoard and decoded numpy grids qualify.
Local checks walk outward from a single cell; exhaustive checks use
pre-computed flat index windows and stay vectorized.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Tuple

import numpy as np

# The four canonical line directions; each is scanned forward and backward.
DIRECTIONS: Tuple[Tuple[int, int], ...] = ((0, 1), (1, 0), (1, 1), (1, -1))


def in_bounds(board, r: int, c: int) -> bool:
    """Return True if (r, c) is inside the board."""
    rows, cols = board.shape
    return 0 <= r < rows and 0 <= c < cols


def count_direction(board, r: int, c: int, dr: int, dc: int, value: int) -> int:
    """Consecutive cells equal to value, starting one step from (r, c)."""
    rows, cols = board.shape
    count = 0
    r, c = r + dr, c + dc
    while 0 <= r < rows and 0 <= c < cols and board[r, c] == value:
        count += 1
        r, c = r + dr, c + dc
    return count


def line_length_through(board, r: int, c: int, dr: int, dc: int, value: int) -> int:
    """Run length through (r, c) along one axis, counting (r, c) as value."""
    return 1 + count_direction(board, r, c, dr, dc, value) + count_direction(board, r, c, -dr, -dc, value)


def is_winning_placement(board, r: int, c: int, value: int, length: int) -> bool:
    """
    True if a stone of value at (r, c) completes a line of at least length.

    The cell itself is not read, so this doubles as a trial placement check
    on an empty cell.
    """
    for dr, dc in DIRECTIONS:
        if line_length_through(board, r, c, dr, dc, value) >= length:
            return True
    return False


@lru_cache(maxsize=None)
def line_windows(rows: int, cols: int, length: int) -> np.ndarray:
    """
    All straight windows of `length` cells as flat indices, shape (N, length).

    Generalizes a hard-coded win-line table to any board size.
    """
    windows: List[List[int]] = []
    for r in range(rows):
        for c in range(cols):
            for dr, dc in DIRECTIONS:
                end_r, end_c = r + dr * (length - 1), c + dc * (length - 1)
                if 0 <= end_r < rows and 0 <= end_c < cols:
                    windows.append([(r + dr * i) * cols + (c + dc * i) for i in range(length)])
    table = np.array(windows, dtype=np.int32).reshape(-1, length)
    table.flags.writeable = False
    return table


def find_winner(grid: np.ndarray, length: int) -> int:
    """
    Exhaustive scan. Returns the marker owning a full window, or 0.

    Args:
        grid: Decoded (rows, cols) array
        length: Stones needed in a row
    """
    rows, cols = grid.shape
    windows = line_windows(rows, cols, length)
    if windows.size == 0:
        return 0
    vals = grid.ravel()[windows]
    first = vals[:, 0]
    hits = (first != 0) & np.all(vals == first[:, None], axis=1)
    if not np.any(hits):
        return 0
    return int(first[hits][0])


def board_full(grid: np.ndarray) -> bool:
    """Return True if no cell is empty."""
    return not np.any(grid == 0)


@lru_cache(maxsize=None)
def cell_windows(rows: int, cols: int, length: int) -> tuple:
    """Per flat cell, the line_windows rows that contain it."""
    windows = line_windows(rows, cols, length)
    per_cell = [[] for _ in range(rows * cols)]
    for i, window in enumerate(windows):
        for idx in window:
            per_cell[idx].append(i)
    return tuple(windows[np.array(ids, dtype=np.int32)] if ids else windows[:0] for ids in per_cell)
