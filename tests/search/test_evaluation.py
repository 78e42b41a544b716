"""
Tests for strategy_core.search.evaluation
"""

import pytest

from strategy_core.games.connect4 import Connect4
from strategy_core.search.evaluation import (
    DEFAULT_WEIGHTS,
    WIN_THRESHOLD,
    EvaluationWeights,
    LineEvaluator,
    MobilityEvaluator,
    center_weights,
    evaluator_for,
)


class TestEvaluatorFor:
    """Evaluator lookup."""

    def test_line_games(self, connect4, gomoku):
        """Connection games share the line evaluator."""
        assert isinstance(evaluator_for(connect4), LineEvaluator)
        assert isinstance(evaluator_for(gomoku), LineEvaluator)

    def test_lgame(self, lgame):
        """The L-Game scores mobility."""
        assert isinstance(evaluator_for(lgame), MobilityEvaluator)

    def test_trio_unsupported(self, trio_game):
        """Trio has no heuristic evaluator."""
        with pytest.raises(ValueError, match="No evaluator"):
            evaluator_for(trio_game)


class TestLineEvaluator:
    """Window and pattern scoring."""

    def test_empty_board_is_level(self, connect4):
        """Nothing on the board scores zero."""
        assert LineEvaluator().evaluate(connect4, 1) == 0

    def test_centre_stone_favours_owner(self, connect4):
        """A centre drop is good for its owner and bad for the other side."""
        connect4.make_move(3)
        evaluator = LineEvaluator()
        assert evaluator.evaluate(connect4, 1) > 0
        assert evaluator.evaluate(connect4, 2) < 0

    def test_terminal_scores_shift_by_ply(self, connect4):
        """Faster wins score higher."""
        for col in (0, 1, 0, 1, 0, 1, 0):
            connect4.make_move(col)
        evaluator = LineEvaluator()
        assert evaluator.evaluate(connect4, 1, ply=3) == DEFAULT_WEIGHTS.win - 3
        assert evaluator.evaluate(connect4, 2, ply=3) == -DEFAULT_WEIGHTS.win + 3
        assert evaluator.evaluate(connect4, 1, ply=1) > evaluator.evaluate(connect4, 1, ply=5)

    def test_draw_scores_zero(self):
        """A finished game without winner is level."""
        grid = [[1, 2, 1, 2, 1, 2, 1] if r % 4 < 2 else [2, 1, 2, 1, 2, 1, 2] for r in range(6)]
        game = Connect4.from_grid(grid)
        assert game.is_terminal() and game.winner() is None
        assert LineEvaluator().evaluate(game, 1) == 0

    def test_cached_scores_repeat(self, connect4_p1_three):
        """Repeated evaluation returns the cached value."""
        evaluator = LineEvaluator()
        first = evaluator.evaluate(connect4_p1_three, 1)
        assert evaluator.evaluate(connect4_p1_three, 1) == first

    def test_custom_weights(self, connect4):
        """Zero centre weight removes the opening bonus."""
        connect4.make_move(3)
        flat = LineEvaluator(EvaluationWeights(center=0))
        assert flat.evaluate(connect4, 1) < LineEvaluator().evaluate(connect4, 1)

    def test_threshold_below_win(self):
        """Decided scores are recognisable."""
        assert 0 < WIN_THRESHOLD < DEFAULT_WEIGHTS.win


class TestMobilityEvaluator:
    """L-Game mobility."""

    def test_initial_is_level(self, lgame):
        """Both sides start with the same number of placements."""
        assert MobilityEvaluator().evaluate(lgame, 1) == 0

    def test_blockade_is_decided(self, lgame_blocked_grid):
        """A blockaded side has lost."""
        from strategy_core.games.lgame import LGame

        game = LGame.from_grid(lgame_blocked_grid, current_player=2)
        assert MobilityEvaluator().evaluate(game, 1) == DEFAULT_WEIGHTS.win
        assert MobilityEvaluator().evaluate(game, 2) == -DEFAULT_WEIGHTS.win


class TestCenterWeights:
    """Centre bonus tables."""

    def test_gravity_columns(self):
        """Gravity boards weight whole columns."""
        weights = center_weights(6, 7, True)
        assert list(weights[0]) == [0, 1, 2, 3, 2, 1, 0]
        assert list(weights[5]) == list(weights[0])

    def test_open_board_rings(self):
        """Open boards peak at the centre point."""
        weights = center_weights(15, 15, False)
        assert weights[7, 7] == 3
        assert weights[6, 8] == 2
        assert weights[0, 0] == 0
