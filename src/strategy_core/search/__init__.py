"""
Search module - evaluation, minimax, Monte Carlo rollouts and the engine
that chooses between them per difficulty tier.
"""

from strategy_core.search.engine import SearchEngine
from strategy_core.search.evaluation import (
    DEFAULT_WEIGHTS,
    WIN_THRESHOLD,
    EvaluationWeights,
    LineEvaluator,
    MobilityEvaluator,
    evaluator_for,
)
from strategy_core.search.minimax import MinimaxSearch, SearchStats, candidate_moves
from strategy_core.search.monte_carlo import MonteCarloSearch

__all__ = [
    "SearchEngine",
    "MinimaxSearch",
    "MonteCarloSearch",
    "SearchStats",
    "candidate_moves",
    "EvaluationWeights",
    "DEFAULT_WEIGHTS",
    "WIN_THRESHOLD",
    "LineEvaluator",
    "MobilityEvaluator",
    "evaluator_for",
]
