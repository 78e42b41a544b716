"""
Factory functions for creating games and engines.
"""

from typing import Optional

from strategy_core.core.types import Difficulty
from strategy_core.games.game_base import GameBase
from strategy_core.search.engine import SearchEngine
from strategy_core.search.evaluation import DEFAULT_WEIGHTS, EvaluationWeights
from strategy_core.utils.config import DEFAULT_SIMULATIONS, GAMES


def create_game(game_name: str, **options) -> GameBase:
    """
    Create a game instance in its initial state.

    Args:
        game_name: Key from GAMES registry (e.g., "connect4")
        **options: Constructor options (starting_player; Trio also takes
            level, seed, digits and target)

    Returns:
        Fresh game instance
    """
    if game_name not in GAMES:
        available = ", ".join(GAMES.keys())
        raise ValueError(f"Unknown game: {game_name}. Available: {available}")

    game_class = GAMES[game_name]
    return game_class(**options)


def create_engine(
    game: Optional[GameBase] = None,
    difficulty: Difficulty = Difficulty.MEDIUM,
    seed: Optional[int] = None,
    simulations: int = DEFAULT_SIMULATIONS,
    weights: EvaluationWeights = DEFAULT_WEIGHTS,
) -> SearchEngine:
    """
    Create a search engine, warming its evaluator for `game` when given.

    Raises ValueError for an unknown difficulty.
    """
    engine = SearchEngine(difficulty, seed=seed, weights=weights, simulations=simulations)
    if game is not None and game.num_players() > 1:
        engine.evaluator(game)
    return engine
