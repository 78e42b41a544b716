"""
BitPackedBoard - fixed-size grid storage with B bits per cell.

Cells are packed into unsigned 64-bit words (numpy uint64). A cell never
straddles two words, so B must divide 64. Cloning copies the word array
only, which keeps search-tree branching cheap.

Usage:
    board = BitPackedBoard(6, 7, bits_per_cell=2)
    board.set_cell(5, 3, 1)
    board.get_cell(5, 3)        # -> 1
    board.get_drop_row(3)       # -> 4
    copy = board.fast_clone()
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from strategy_core.core.errors import BoardError, OutOfBounds

WORD_BITS = 64
VALID_BITS = (1, 2, 4, 8)


class BitPackedBoard:
    """
    R x C grid, B bits per cell, packed into ceil(R*C*B / 64) words.

    Per-column occupancy counters are maintained on every write so gravity
    games can answer "lowest empty row" in O(1).
    """

    __slots__ = ('rows', 'cols', 'bits_per_cell', '_mask', '_per_word', '_words', '_heights')

    def __init__(self, rows: int, cols: int, bits_per_cell: int = 2):
        if rows <= 0 or cols <= 0:
            raise BoardError(f"Board dimensions must be positive, got {rows}x{cols}")
        if bits_per_cell not in VALID_BITS:
            raise BoardError(f"bits_per_cell must be one of {VALID_BITS}, got {bits_per_cell}")

        self.rows = rows
        self.cols = cols
        self.bits_per_cell = bits_per_cell
        self._mask = (1 << bits_per_cell) - 1
        self._per_word = WORD_BITS // bits_per_cell
        n_words = -(-(rows * cols) // self._per_word)
        self._words = np.zeros(n_words, dtype=np.uint64)
        self._heights = [0] * cols

    # ---------------------------------------------------------------------------
    # Construction
    # ---------------------------------------------------------------------------

    @classmethod
    def from_array(cls, grid: Sequence[Sequence[int]], bits_per_cell: int = 2) -> "BitPackedBoard":
        """Build a board from a 2D grid of cell values."""
        arr = np.asarray(grid)
        if arr.ndim != 2:
            raise BoardError(f"Expected a 2D grid, got shape {arr.shape}")
        board = cls(arr.shape[0], arr.shape[1], bits_per_cell)
        for (r, c), value in np.ndenumerate(arr):
            if value:
                board.set_cell(r, c, int(value))
        return board

    def fast_clone(self) -> "BitPackedBoard":
        """O(words) copy. The clone shares no storage with self."""
        b = BitPackedBoard.__new__(BitPackedBoard)
        b.rows = self.rows
        b.cols = self.cols
        b.bits_per_cell = self.bits_per_cell
        b._mask = self._mask
        b._per_word = self._per_word
        b._words = self._words.copy()
        b._heights = self._heights.copy()
        return b

    # ---------------------------------------------------------------------------
    # Cell access
    # ---------------------------------------------------------------------------

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    @property
    def dimensions(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    @property
    def total_cells(self) -> int:
        return self.rows * self.cols

    @property
    def max_value(self) -> int:
        return self._mask

    @property
    def words(self) -> np.ndarray:
        """Read-only view of the packed words."""
        view = self._words.view()
        view.flags.writeable = False
        return view

    def is_within_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def _locate(self, row: int, col: int) -> Tuple[int, int]:
        row, col = int(row), int(col)
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise OutOfBounds(f"Cell ({row},{col}) is outside the {self.rows}x{self.cols} board")
        word, slot = divmod(row * self.cols + col, self._per_word)
        return word, slot * self.bits_per_cell

    def get_cell(self, row: int, col: int) -> int:
        word, shift = self._locate(row, col)
        return (int(self._words[word]) >> shift) & self._mask

    def set_cell(self, row: int, col: int, value: int) -> None:
        word, shift = self._locate(row, col)
        value = int(value)
        if not 0 <= value <= self._mask:
            raise BoardError(
                f"Value {value} does not fit in {self.bits_per_cell} bits (max {self._mask})"
            )

        current = int(self._words[word])
        old = (current >> shift) & self._mask
        self._words[word] = (current & ~(self._mask << shift)) | (value << shift)

        if old == 0 and value != 0:
            self._heights[col] += 1
        elif old != 0 and value == 0:
            self._heights[col] -= 1

    def clear_cell(self, row: int, col: int) -> None:
        self.set_cell(row, col, 0)

    def clear(self) -> None:
        self._words[:] = 0
        self._heights = [0] * self.cols

    def __getitem__(self, key: Tuple[int, int]) -> int:
        row, col = key
        return self.get_cell(row, col)

    def __setitem__(self, key: Tuple[int, int], value: int) -> None:
        row, col = key
        self.set_cell(row, col, value)

    # ---------------------------------------------------------------------------
    # Column accelerators (gravity games)
    # ---------------------------------------------------------------------------

    def _check_column(self, col: int) -> None:
        if not 0 <= col < self.cols:
            raise OutOfBounds(f"Column {col} is outside 0..{self.cols - 1}")

    def column_height(self, col: int) -> int:
        """Number of occupied cells in the column."""
        self._check_column(col)
        return self._heights[col]

    def is_column_full(self, col: int) -> bool:
        self._check_column(col)
        return self._heights[col] >= self.rows

    def get_drop_row(self, col: int) -> Optional[int]:
        """Lowest empty row in a gravity-stacked column, None if full."""
        self._check_column(col)
        height = self._heights[col]
        if height >= self.rows:
            return None
        return self.rows - 1 - height

    # ---------------------------------------------------------------------------
    # Bulk queries
    # ---------------------------------------------------------------------------

    def to_array(self) -> np.ndarray:
        """Decode to a (rows, cols) integer grid, vectorized over words."""
        shifts = np.arange(self._per_word, dtype=np.uint64) * np.uint64(self.bits_per_cell)
        cells = (self._words[:, None] >> shifts[None, :]) & np.uint64(self._mask)
        dtype = np.int8 if self._mask <= 127 else np.int16
        flat = cells.ravel()[: self.total_cells].astype(dtype)
        return flat.reshape(self.rows, self.cols)

    def to_list(self) -> List[int]:
        """Flat row-major list of cell values."""
        return self.to_array().ravel().tolist()

    def count_cells_with_value(self, value: int) -> int:
        return int(np.count_nonzero(self.to_array() == value))

    def occupied_count(self) -> int:
        return sum(self._heights)

    def occupied_cells(self) -> List[Tuple[int, int]]:
        return [(int(r), int(c)) for r, c in np.argwhere(self.to_array() != 0)]

    def cells_with_value(self, value: int) -> List[Tuple[int, int]]:
        return [(int(r), int(c)) for r, c in np.argwhere(self.to_array() == value)]

    def is_full(self) -> bool:
        return self.occupied_count() == self.total_cells

    def fill(self, cells: Iterable[Tuple[int, int]], value: int) -> None:
        for r, c in cells:
            self.set_cell(r, c, value)

    def memory_usage(self) -> int:
        """Bytes held by the packed words."""
        return int(self._words.nbytes)

    # ---------------------------------------------------------------------------
    # Dunder
    # ---------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitPackedBoard):
            return NotImplemented
        return (
            self.shape == other.shape
            and self.bits_per_cell == other.bits_per_cell
            and bool(np.array_equal(self._words, other._words))
        )

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return (
            f"BitPackedBoard({self.rows}x{self.cols}, bits={self.bits_per_cell}, "
            f"words={len(self._words)})"
        )
