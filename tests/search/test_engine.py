"""
Tests for strategy_core.search.engine

Tactical positions are resolved before any deep search runs.
"""

import pytest

from strategy_core.core.errors import InvalidPlayer
from strategy_core.core.types import Difficulty, Player
from strategy_core.games.connect4 import Connect4
from strategy_core.search.engine import SearchEngine

PLUS = ((0, 1), (0, 2), (0, 3))


@pytest.fixture
def p2_must_block() -> Connect4:
    game = Connect4()
    for col in (1, 4, 2, 4, 3):
        game.make_move(col)
    return game


@pytest.fixture
def p2_unsafe_columns() -> Connect4:
    """P1 holds (4,1)-(4,3); dropping in column 0 or 4 hands P1 the win."""
    grid = [[0] * 7 for _ in range(6)]
    grid[5] = [0, 2, 1, 2, 0, 0, 2]
    grid[4] = [0, 1, 1, 1, 0, 0, 0]
    return Connect4.from_grid(grid, current_player=2)


class TestTactics:
    """Wins and blocks come before search."""

    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_takes_win(self, connect4_p1_three, difficulty):
        """Every tier takes an immediate win."""
        engine = SearchEngine(difficulty, seed=0)
        assert engine.get_best_move(connect4_p1_three) == 0

    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_blocks(self, p2_must_block, difficulty):
        """Every tier blocks an immediate loss."""
        assert SearchEngine(difficulty, seed=0).get_best_move(p2_must_block) == 0

    def test_gomoku_win(self, gomoku_open_four):
        """Gomoku completes an open four."""
        move = SearchEngine(Difficulty.EASY, seed=0).get_best_move(gomoku_open_four)
        assert move in {(7, 4), (7, 9)}

    def test_gomoku_block(self, gomoku_white_four):
        """Gomoku blocks a closed four."""
        assert SearchEngine(Difficulty.HARD, seed=0).get_best_move(gomoku_white_four) == (7, 7)

    def test_safe_moves(self, p2_unsafe_columns):
        """Drops that let the opponent win on top are filtered out."""
        engine = SearchEngine(Difficulty.EASY, seed=0)
        game = p2_unsafe_columns
        assert engine._safe_moves(game, Player.TWO, game.legal_moves()) == [1, 2, 3, 5, 6]

    def test_easy_avoids_unsafe(self, p2_unsafe_columns):
        """Even random easy moves come from the safe pool."""
        for seed in range(5):
            move = SearchEngine(Difficulty.EASY, seed=seed).get_best_move(p2_unsafe_columns)
            assert move not in (0, 4)


class TestMoveSelection:
    """General behaviour."""

    def test_terminal_is_none(self, connect4):
        """Finished games have no best move."""
        for col in (0, 1, 0, 1, 0, 1, 0):
            connect4.make_move(col)
        assert SearchEngine(seed=0).get_best_move(connect4) is None

    def test_other_player(self, connect4_p1_three):
        """Asking for the side not to move plans on a copy."""
        engine = SearchEngine(Difficulty.HARD, seed=0)
        assert engine.get_best_move_for_player(connect4_p1_three, Player.TWO) == 0
        assert connect4_p1_three.current_player() == Player.ONE
        assert connect4_p1_three.move_count() == 6

    @pytest.mark.parametrize("player", [0, 3, "x", True])
    def test_invalid_player(self, connect4, player):
        """Unknown players are rejected."""
        with pytest.raises(InvalidPlayer):
            SearchEngine(seed=0).get_best_move_for_player(connect4, player)

    def test_gomoku_opening(self, gomoku):
        """The first stone goes in the centre, the reply next to it."""
        engine = SearchEngine(Difficulty.HARD, seed=4)
        assert engine.get_best_move(gomoku) == (7, 7)
        gomoku.make_move((7, 7))
        r, c = engine.get_best_move(gomoku)
        assert max(abs(r - 7), abs(c - 7)) == 1

    def test_lgame_search_stats(self, lgame):
        """Searched moves leave statistics behind."""
        engine = SearchEngine(Difficulty.MEDIUM, seed=0)
        move = engine.get_best_move(lgame)
        assert move in lgame.legal_moves()
        assert engine.last_stats is not None
        assert engine.last_stats.nodes > 0

    def test_seeded_engines_agree(self):
        """Two engines with the same seed play the same game."""
        moves = []
        for _ in range(2):
            game = Connect4()
            engine = SearchEngine(Difficulty.EASY, seed=21)
            played = []
            for _ in range(4):
                move = engine.get_best_move(game)
                game.make_move(move)
                played.append(move)
            moves.append(played)
        assert moves[0] == moves[1]

    def test_simulation_floor(self):
        """Tiny budgets are raised to the minimum."""
        from strategy_core.utils.config import MIN_SIMULATIONS

        assert SearchEngine(simulations=5).simulations == MIN_SIMULATIONS

    def test_bad_difficulty(self):
        """Unknown tiers are rejected."""
        with pytest.raises(ValueError, match="Unknown difficulty"):
            SearchEngine("impossible")


class TestTrio:
    """Single-player hints."""

    def test_hint_cells(self, trio_game):
        """The engine's move is the best-ranked solution's cells."""
        assert SearchEngine(Difficulty.HARD, seed=0).get_best_move(trio_game) == PLUS

    def test_progress_evaluation(self, trio_game):
        """Trio scores the share of solutions found."""
        engine = SearchEngine(seed=0)
        assert engine.evaluate_position(trio_game) == 0
        trio_game.make_move(PLUS)
        assert engine.evaluate_position(trio_game) == 50


class TestEvaluatePosition:
    """Heuristic scores through the engine."""

    def test_symmetric_start(self, lgame):
        """The L-Game start is level for both sides."""
        engine = SearchEngine(seed=0)
        assert engine.evaluate_position_for(lgame, 1) == 0
        assert engine.evaluate_position_for(lgame, 2) == 0

    def test_perspective(self, connect4):
        """A centre stone is good for its owner."""
        connect4.make_move(3)
        engine = SearchEngine(seed=0)
        assert engine.evaluate_position_for(connect4, 1) > 0
        assert engine.evaluate_position_for(connect4, 2) < 0
