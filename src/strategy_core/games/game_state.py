"""
GameState - mutable game state container, and its MoveHistory.

Optimized for fast copying: the board clones by word array, and search
copies drop the history entirely.
"""

from __future__ import annotations

import sys
from typing import Any, Iterator, List, Optional

from strategy_core.board.bitboard import BitPackedBoard
from strategy_core.core.types import Player


class MoveHistory:
    """
    Stack-based undo log.

    Entries are small immutable records (NamedTuples) chosen by each game,
    holding whatever that game needs to reverse one move.
    """

    __slots__ = ('_entries',)

    def __init__(self, entries: Optional[List[Any]] = None):
        self._entries: List[Any] = list(entries) if entries else []

    def push(self, entry: Any) -> None:
        self._entries.append(entry)

    def pop(self) -> Optional[Any]:
        """Remove and return the newest entry, None when empty."""
        if not self._entries:
            return None
        return self._entries.pop()

    def peek(self) -> Optional[Any]:
        return self._entries[-1] if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def copy(self) -> "MoveHistory":
        # Entries are immutable, a shallow copy is enough.
        return MoveHistory(self._entries)

    def memory_usage(self) -> int:
        return sys.getsizeof(self._entries) + sum(sys.getsizeof(e) for e in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._entries)


class GameState:
    """
    Lightweight game state container.

    The board holds cell markers:
        0 = empty
        1 = player 1's piece
        2 = player 2's piece
        3 = neutral piece (L-Game)
    Trio stores digits 1-9 instead.
    """
    __slots__ = ('board', 'current_player', 'move_count', 'is_over', 'winner', 'history')

    def __init__(
        self,
        board: BitPackedBoard,
        current_player: Player = Player.ONE,
        move_count: int = 0,
        is_over: bool = False,
        winner: Optional[Player] = None,
        history: Optional[MoveHistory] = None,
    ):
        self.board = board
        self.current_player = current_player
        self.move_count = move_count
        self.is_over = is_over
        self.winner = winner
        self.history = history if history is not None else MoveHistory()

    def copy(self, keep_history: bool = True) -> "GameState":
        """Fast copy - board.fast_clone() copies words only."""
        return GameState(
            self.board.fast_clone(),
            self.current_player,
            self.move_count,
            self.is_over,
            self.winner,
            self.history.copy() if keep_history else MoveHistory(),
        )
