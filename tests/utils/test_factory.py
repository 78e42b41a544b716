"""
Tests for strategy_core.utils.factory

Tests factory functions for creating games and engines.
"""

import pytest

from strategy_core.core.types import Difficulty
from strategy_core.games.game_base import GameBase
from strategy_core.search.engine import SearchEngine
from strategy_core.utils.factory import create_engine, create_game


class TestCreateGame:
    """create_game function tests."""

    @pytest.mark.parametrize("name", ["connect4", "gomoku", "lgame"])
    def test_creates_game(self, name):
        """Creates a fresh game of the requested kind."""
        game = create_game(name)
        assert isinstance(game, GameBase)
        assert game.game_id() == name
        assert game.move_count() == 0

    def test_options_forwarded(self):
        """Constructor options reach the game."""
        assert create_game("connect4", starting_player=2).current_player() == 2

    def test_trio_options(self, trio_digits):
        """Trio takes a fixed board and target."""
        game = create_game("trio", digits=trio_digits, target=10)
        assert len(game.solutions) == 2

    def test_unknown_game(self):
        """Unknown names raise ValueError listing the registry."""
        with pytest.raises(ValueError, match="Available"):
            create_game("chess")


class TestCreateEngine:
    """create_engine function tests."""

    def test_creates_engine(self):
        """Engine carries difficulty and seed."""
        engine = create_engine(difficulty="hard", seed=3)
        assert isinstance(engine, SearchEngine)
        assert engine.difficulty is Difficulty.HARD
        assert engine.seed == 3

    def test_warms_evaluator(self, connect4):
        """The evaluator for the given game is built up front."""
        engine = create_engine(connect4)
        assert "connect4" in engine._evaluators

    def test_single_player_game_skips_evaluator(self, trio_game):
        """Trio has no evaluator to warm."""
        engine = create_engine(trio_game)
        assert engine._evaluators == {}

    def test_invalid_difficulty(self):
        """Unknown difficulty raises ValueError."""
        with pytest.raises(ValueError):
            create_engine(difficulty="impossible")
