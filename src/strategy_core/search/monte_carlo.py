"""
Monte Carlo rollout search.

For each candidate move, play a budget of randomized games to the end and
keep the outcomes as Stats (wins, ties, losses). The move with the best
utility wins; confidence breaks near-ties in favour of better-sampled moves.

The budget is a playout count, never a wall-clock deadline, so a seeded
search is reproducible.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from strategy_core.core.types import Outcome, Player, Stats

if TYPE_CHECKING:
    from strategy_core.games.game_base import GameBase

logger = logging.getLogger(__name__)

# Playouts that run this long are scored as draws.
MAX_PLAYOUT_MOVES = 100

# Confidence adds at most this fraction on top of utility.
CONFIDENCE_BONUS = 0.1


class MonteCarloSearch:
    """
    Random playout search.

    Args:
        simulations: Total playout budget per decision, split across moves
        rng: Seeded random.Random
        min_per_move: Floor on playouts per candidate move
        center_bias: Weight playout moves by closeness to the centre
    """

    def __init__(
        self,
        simulations: int,
        rng: Optional[random.Random] = None,
        min_per_move: int = 1,
        center_bias: bool = True,
        max_playout_moves: int = MAX_PLAYOUT_MOVES,
    ):
        self.simulations = max(1, simulations)
        self.rng = rng or random.Random()
        self.min_per_move = max(1, min_per_move)
        self.center_bias = center_bias
        self.max_playout_moves = max_playout_moves
        self.last_stats: Dict[Any, Stats] = {}

    def playouts_per_move(self, move_count: int) -> int:
        return max(self.min_per_move, self.simulations // max(1, move_count))

    def _pick(self, game: "GameBase", moves: List[Any]) -> Any:
        if not self.center_bias or not hasattr(game, "center_distance"):
            return self.rng.choice(moves)
        weights = [1.0 / (1 + game.center_distance(m)) for m in moves]
        return self.rng.choices(moves, weights=weights, k=1)[0]

    def playout(self, game: "GameBase", player: int) -> Outcome:
        """Play random moves on a copy until the game ends; result for player."""
        sim = game.clone(keep_history=False)
        for _ in range(self.max_playout_moves):
            if sim.is_terminal():
                break
            moves = sim.legal_moves()
            if not moves:
                break
            sim.make_move(self._pick(sim, moves))
        if not sim.is_terminal():
            return Outcome.TIE
        return sim.get_result(player)

    def evaluate_moves(
        self,
        game: "GameBase",
        player: Optional[int] = None,
        moves: Optional[Sequence[Any]] = None,
    ) -> Dict[Any, Stats]:
        player = game.current_player() if player is None else Player.coerce(player)
        moves = list(moves) if moves is not None else game.legal_moves()
        budget = self.playouts_per_move(len(moves))

        results: Dict[Any, Stats] = {}
        for move in moves:
            child = game.simulate(move)
            stats = Stats()
            for _ in range(budget):
                stats = stats.record(self.playout(child, player))
            results[move] = stats
        self.last_stats = results
        return results

    @staticmethod
    def score(stats: Stats) -> float:
        return stats.utility * (1 + CONFIDENCE_BONUS * stats.confidence)

    def best_move(
        self,
        game: "GameBase",
        player: Optional[int] = None,
        moves: Optional[Sequence[Any]] = None,
    ) -> Optional[Any]:
        results = self.evaluate_moves(game, player, moves)
        if not results:
            return None
        best = max(results, key=lambda m: self.score(results[m]))
        logger.debug(
            "monte carlo: %d moves x %d playouts, best=%r utility=%.3f",
            len(results), self.playouts_per_move(len(results)), best, results[best].utility,
        )
        return best
