"""
Tests for strategy_core.games.game_state

MoveHistory and GameState copying.
"""

from strategy_core.board.bitboard import BitPackedBoard
from strategy_core.core.types import Player
from strategy_core.games.game_state import GameState, MoveHistory


class TestMoveHistory:
    """Undo log tests."""

    def test_push_pop_order(self):
        """Entries come back newest first."""
        history = MoveHistory()
        history.push("a")
        history.push("b")
        assert history.peek() == "b"
        assert history.pop() == "b"
        assert history.pop() == "a"
        assert history.pop() is None
        assert history.peek() is None

    def test_copy_is_independent(self):
        """Copies do not share the entry list."""
        history = MoveHistory(["a"])
        copy = history.copy()
        copy.push("b")
        assert len(history) == 1
        assert list(copy) == ["a", "b"]

    def test_memory_grows(self):
        """Memory estimate grows with entries."""
        history = MoveHistory()
        empty = history.memory_usage()
        history.push((1, 2, 3))
        assert history.memory_usage() > empty


class TestGameState:
    """GameState copy tests."""

    def test_copy_board_independent(self):
        """Copies own their board."""
        state = GameState(BitPackedBoard(6, 7), Player.ONE)
        copy = state.copy()
        copy.board.set_cell(5, 0, 1)
        assert state.board.get_cell(5, 0) == 0

    def test_copy_without_history(self):
        """Search copies drop the history."""
        state = GameState(BitPackedBoard(4, 4), Player.TWO, move_count=3)
        state.history.push("x")
        copy = state.copy(keep_history=False)
        assert len(copy.history) == 0
        assert copy.move_count == 3
        assert copy.current_player == Player.TWO
