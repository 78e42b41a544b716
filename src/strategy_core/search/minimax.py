"""
Minimax with alpha-beta pruning over simulated game copies.

The root runs iterative deepening: each iteration tries the previous
iteration's best move first, then central moves, which tightens the
alpha-beta window early. A decided win stops the deepening.

Illegal simulated moves (a move generator bug, never expected) are logged
and pruned rather than raised.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Tuple

from strategy_core.core.errors import GameError
from strategy_core.core.types import Player
from strategy_core.search.evaluation import WIN_THRESHOLD

if TYPE_CHECKING:
    from strategy_core.games.game_base import GameBase

logger = logging.getLogger(__name__)

MAX_DEPTH = 12


@dataclass
class SearchStats:
    nodes: int = 0
    cutoffs: int = 0
    pruned_illegal: int = 0
    depth_reached: int = 0


def candidate_moves(game: "GameBase", limit: Optional[int] = None) -> List[Any]:
    """
    Moves worth searching.

    Games with a `candidate_cells` method (Gomoku) are restricted to the
    neighbourhood of existing stones, immediate wins and blocks first.
    """
    if game.is_terminal():
        return []
    if not hasattr(game, "candidate_cells"):
        return game.legal_moves()

    from strategy_core.analysis.threats import ThreatAnalyzer

    analyzer = ThreatAnalyzer.for_game(game)
    mover = game.current_player()
    urgent = analyzer.winning_moves(game, mover) + analyzer.blocking_moves(game, mover)
    cells = list(dict.fromkeys(urgent + game.candidate_cells()))
    return cells[:limit] if limit else cells


class MinimaxSearch:
    """
    Fixed-depth alpha-beta search.

    Args:
        evaluator: Object with evaluate(game, player, ply) -> int
        depth: Plies to search (clamped to 1..MAX_DEPTH)
        rng: If given, moves are shuffled before the stable ordering sort
        max_candidates: Cap on moves searched per node
    """

    def __init__(
        self,
        evaluator,
        depth: int,
        rng: Optional[random.Random] = None,
        max_candidates: Optional[int] = None,
    ):
        self.evaluator = evaluator
        self.depth = max(1, min(MAX_DEPTH, depth))
        self.rng = rng
        self.max_candidates = max_candidates
        self.stats = SearchStats()

    # ---------------------------------------------------------------------------
    # Ordering
    # ---------------------------------------------------------------------------

    def order_moves(self, game: "GameBase", moves: Sequence[Any], first: Any = None) -> List[Any]:
        ordered = list(moves)
        if self.rng is not None:
            self.rng.shuffle(ordered)
        if hasattr(game, "center_distance"):
            ordered.sort(key=game.center_distance)
        if first is not None and first in ordered:
            ordered.remove(first)
            ordered.insert(0, first)
        return ordered

    def _child(self, game: "GameBase", move: Any) -> Optional["GameBase"]:
        try:
            return game.simulate(move)
        except GameError as e:
            self.stats.pruned_illegal += 1
            logger.debug("Pruned illegal move %r: %s", move, e)
            return None

    # ---------------------------------------------------------------------------
    # Search
    # ---------------------------------------------------------------------------

    def best_move(
        self,
        game: "GameBase",
        player: Optional[int] = None,
        root_moves: Optional[Sequence[Any]] = None,
    ) -> Optional[Any]:
        """Best move for player (default: side to move), None if there is none."""
        move, _ = self.search(game, player, root_moves)
        return move

    def search(
        self,
        game: "GameBase",
        player: Optional[int] = None,
        root_moves: Optional[Sequence[Any]] = None,
    ) -> Tuple[Optional[Any], float]:
        player = game.current_player() if player is None else Player.coerce(player)
        if game.current_player() != player:
            game = game.with_current_player(player)
        self.stats = SearchStats()
        moves = list(root_moves) if root_moves is not None else candidate_moves(game, self.max_candidates)
        if not moves:
            return None, -math.inf

        best, score = None, -math.inf
        for depth in range(1, self.depth + 1):
            ordered = self.order_moves(game, moves, first=best)
            found, found_score = self._root(game, ordered, depth, player)
            if found is None:
                break
            best, score = found, found_score
            self.stats.depth_reached = depth
            if abs(score) >= WIN_THRESHOLD:
                break

        logger.debug(
            "minimax depth=%d nodes=%d cutoffs=%d best=%r score=%s",
            self.stats.depth_reached, self.stats.nodes, self.stats.cutoffs, best, score,
        )
        return best, score

    def _root(self, game: "GameBase", moves: List[Any], depth: int, player: Player) -> Tuple[Optional[Any], float]:
        alpha, beta = -math.inf, math.inf
        best_move, best_score = None, -math.inf
        for move in moves:
            child = self._child(game, move)
            if child is None:
                continue
            score = self._alpha_beta(child, depth - 1, alpha, beta, player, ply=1)
            if score > best_score:
                best_move, best_score = move, score
            alpha = max(alpha, score)
        return best_move, best_score

    def _alpha_beta(self, game: "GameBase", depth: int, alpha: float, beta: float, player: Player, ply: int) -> float:
        self.stats.nodes += 1
        if depth <= 0 or game.is_terminal():
            return self.evaluator.evaluate(game, player, ply)

        moves = self.order_moves(game, candidate_moves(game, self.max_candidates))
        maximizing = game.current_player() == player
        value = -math.inf if maximizing else math.inf
        searched = False

        for move in moves:
            child = self._child(game, move)
            if child is None:
                continue
            searched = True
            score = self._alpha_beta(child, depth - 1, alpha, beta, player, ply + 1)
            if maximizing:
                value = max(value, score)
                alpha = max(alpha, value)
            else:
                value = min(value, score)
                beta = min(beta, value)
            if alpha >= beta:
                self.stats.cutoffs += 1
                break

        if not searched:
            return self.evaluator.evaluate(game, player, ply)
        return value
