"""
SearchEngine - picks moves for any registered game.

Decision pipeline for two-player games:
    1. Opening book (Gomoku, first moves)
    2. Immediate win, then block the opponent's immediate win
    3. Own open four, then block the opponent's
    4. Drop moves that hand the opponent an immediate win (gravity games)
    5. Tier-specific random safe move
    6. Minimax, or Monte Carlo for tiers that ask for it

Trio has a single solver, so the "best move" is a hint from the solver.

Usage:
    engine = SearchEngine(Difficulty.HARD, seed=7)
    col = engine.get_best_move(connect4)
    engine.evaluate_position_for(connect4, Player.TWO)
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from strategy_core.analysis.threats import ThreatAnalyzer
from strategy_core.core.types import Difficulty, Player
from strategy_core.search.evaluation import DEFAULT_WEIGHTS, EvaluationWeights, evaluator_for
from strategy_core.search.minimax import MinimaxSearch, SearchStats
from strategy_core.search.monte_carlo import MonteCarloSearch
from strategy_core.utils.config import (
    DEFAULT_SIMULATIONS,
    GOMOKU_MAX_CANDIDATES,
    MIN_SIMULATIONS,
    TierSettings,
    tier_settings,
)

if TYPE_CHECKING:
    from strategy_core.games.game_base import GameBase

logger = logging.getLogger(__name__)

# Gomoku opening book: centre, then the ring around it.
GOMOKU_BOOK_MOVES = 3


class SearchEngine:
    """
    Difficulty-tiered move selection.

    Args:
        difficulty: Tier controlling depth, randomness and strategy
        seed: Seed for every random choice the engine makes
        weights: Evaluation weights for the heuristic evaluators
        simulations: Playout budget for Monte Carlo tiers
    """

    def __init__(
        self,
        difficulty: Difficulty = Difficulty.MEDIUM,
        seed: Optional[int] = None,
        weights: EvaluationWeights = DEFAULT_WEIGHTS,
        simulations: int = DEFAULT_SIMULATIONS,
    ):
        self.difficulty = Difficulty.parse(difficulty)
        self.seed = seed
        self.rng = random.Random(seed)
        self.weights = weights
        self.simulations = max(MIN_SIMULATIONS, simulations)
        self.last_stats: Optional[SearchStats] = None
        self._evaluators: Dict[str, Any] = {}

    def settings(self, game: "GameBase") -> Optional[TierSettings]:
        return tier_settings(game.game_id(), self.difficulty)

    def evaluator(self, game: "GameBase"):
        gid = game.game_id()
        if gid not in self._evaluators:
            self._evaluators[gid] = evaluator_for(game, self.weights)
        return self._evaluators[gid]

    # ---------------------------------------------------------------------------
    # Evaluation
    # ---------------------------------------------------------------------------

    def evaluate_position(self, game: "GameBase") -> int:
        return self.evaluate_position_for(game, game.current_player())

    def evaluate_position_for(self, game: "GameBase", player: int) -> int:
        """
        Heuristic score of the position from player's point of view.

        Works whether or not player is to move; Trio scores solving progress
        in percent.
        """
        player = Player.coerce(player)
        if game.num_players() == 1:
            total = len(game.solutions)
            return 100 if total == 0 else (100 * len(game.found)) // total
        if not game.is_terminal() and game.current_player() != player:
            game = game.with_current_player(player)
        return int(self.evaluator(game).evaluate(game, player))

    # ---------------------------------------------------------------------------
    # Move selection
    # ---------------------------------------------------------------------------

    def get_best_move(self, game: "GameBase") -> Optional[Any]:
        return self.get_best_move_for_player(game, game.current_player())

    def get_best_move_for_player(self, game: "GameBase", player: int) -> Optional[Any]:
        """
        Best move for player, or None if the game is over or has no moves.

        If player is not to move, the move is chosen for a hypothetical copy
        where they are. The live game is never mutated.
        """
        player = Player.coerce(player)
        self.last_stats = None
        if game.is_terminal():
            return None

        if game.num_players() == 1:
            hint = game.hint(self.difficulty)
            return hint.cells if hint else None

        if game.current_player() != player:
            game = game.with_current_player(player)
        moves = game.legal_moves()
        if not moves:
            return None

        move = self._choose(game, player, moves)
        logger.info("%s AI (%s, player %d) chose %r", game.game_id(), self.difficulty.value, player, move)
        return move

    def _choose(self, game: "GameBase", player: Player, moves: List[Any]) -> Any:
        tier = self.settings(game)
        gravity = getattr(game, "GRAVITY", False)

        book = self._opening_move(game)
        if book is not None:
            return book

        safe = self._safe_moves(game, player, moves) if gravity else moves

        if hasattr(game, "playable_cells"):
            tactic = self._tactical_move(game, player, safe)
            if tactic is not None:
                return tactic

        if tier.random_rate and self.rng.random() < tier.random_rate:
            pool = safe if gravity else self._random_pool(game, moves)
            return self.rng.choice(pool)

        if tier.monte_carlo:
            search = MonteCarloSearch(self.simulations, self.rng)
            move = search.best_move(game, player, safe)
            self.last_stats = SearchStats(nodes=sum(s.total for s in search.last_stats.values()))
            return move

        search = MinimaxSearch(
            self.evaluator(game),
            tier.depth,
            rng=self.rng if tier.shuffle else None,
            max_candidates=GOMOKU_MAX_CANDIDATES if hasattr(game, "candidate_cells") else None,
        )
        move = search.best_move(game, player, root_moves=safe if gravity else None)
        self.last_stats = search.stats
        return move if move is not None else self.rng.choice(safe)

    def _random_pool(self, game: "GameBase", moves: List[Any]) -> List[Any]:
        if hasattr(game, "candidate_cells"):
            return game.candidate_cells()
        return moves

    def _opening_move(self, game: "GameBase") -> Optional[Any]:
        """Centre first, then a random free cell next to it."""
        if game.game_id() != "gomoku" or game.move_count() >= GOMOKU_BOOK_MOVES:
            return None
        from strategy_core.games.gomoku import CENTER

        board = game.state.board
        if board.get_cell(*CENTER) == 0:
            return CENTER
        ring = [
            (CENTER[0] + dr, CENTER[1] + dc)
            for dr in (-1, 0, 1) for dc in (-1, 0, 1)
            if (dr or dc) and board.get_cell(CENTER[0] + dr, CENTER[1] + dc) == 0
        ]
        return self.rng.choice(ring) if ring else None

    def _tactical_move(self, game: "GameBase", player: Player, allowed: List[Any]) -> Optional[Any]:
        analyzer = ThreatAnalyzer.for_game(game)

        for cell in analyzer.winning_moves(game, player):
            return game.move_for_cell(cell)
        for cell in analyzer.blocking_moves(game, player):
            return game.move_for_cell(cell)

        allowed_set = set(allowed)
        for who in (player, player.opponent):
            for cell in analyzer.open_four_moves(game, who):
                move = game.move_for_cell(cell)
                if move in allowed_set:
                    return move
        return None

    def _safe_moves(self, game: "GameBase", player: Player, moves: List[Any]) -> List[Any]:
        """Moves after which the opponent has no immediate win; all moves if none."""
        analyzer = ThreatAnalyzer.for_game(game)
        safe = []
        for move in moves:
            child = game.simulate(move)
            if child.is_terminal() or not analyzer.winning_moves(child, player.opponent):
                safe.append(move)
        return safe or list(moves)
