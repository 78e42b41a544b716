"""
Heuristic position evaluation.

All numbers live in EvaluationWeights so they can be tuned without touching
the search. Scores are from the given player's point of view; terminal
positions score ±win, shifted by ply so faster wins rank higher.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Dict

import numpy as np

from strategy_core.analysis.threats import connectivity, scan_runs
from strategy_core.core.hashing import hash_board
from strategy_core.core.types import GamePhase, Player
from strategy_core.games.game_rules import line_windows

if TYPE_CHECKING:
    from strategy_core.games.game_base import GameBase


# ╔═════════════════════════════════════════════════════════════════════════════╗
# ║                       CONFIGURABLE EVALUATION WEIGHTS                       ║
# ║                                                                             ║
# ║  line_base ** (k - 1) scores an unblocked window holding k own stones;      ║
# ║  opponent windows count opponent_factor times as much (defence first).      ║
# ╚═════════════════════════════════════════════════════════════════════════════╝

@dataclass(frozen=True)
class EvaluationWeights:
    win: int = 10000
    line_base: int = 10
    opponent_factor: float = 2.0
    open_three: int = 50
    closed_four: int = 400
    connectivity: float = 1.0
    center: int = 5
    opening_center_factor: int = 2
    fork: int = 50
    opponent_fork: int = 75
    mobility: int = 10


DEFAULT_WEIGHTS = EvaluationWeights()

# Scores at or beyond this are decided games.
WIN_THRESHOLD = DEFAULT_WEIGHTS.win // 2

# Evaluation cache is dropped wholesale when it grows past this.
CACHE_LIMIT = 50_000


@lru_cache(maxsize=None)
def _line_table(length: int, base: int) -> np.ndarray:
    """Value of a window by own-stone count; full windows are handled as wins."""
    table = np.zeros(length + 1, dtype=np.int64)
    for k in range(1, length):
        table[k] = base ** (k - 1)
    return table


@lru_cache(maxsize=None)
def center_weights(rows: int, cols: int, gravity: bool) -> np.ndarray:
    """
    Centre bonus per cell: 3 on the centre, fading to 0.

    Gravity boards weight whole columns; open boards use rings around the
    centre point.
    """
    r = np.abs(np.arange(rows) - (rows - 1) / 2)[:, None]
    c = np.abs(np.arange(cols) - (cols - 1) / 2)[None, :]
    if gravity:
        dist = np.broadcast_to(c, (rows, cols))
    else:
        dist = np.maximum(r, c)
    weights = np.clip(3 - np.floor(dist), 0, None).astype(np.int64)
    weights.flags.writeable = False
    return weights


def terminal_score(game: "GameBase", player: int, ply: int, weights: EvaluationWeights) -> int:
    winner = game.winner()
    if winner is None:
        return 0
    return weights.win - ply if winner == player else -weights.win + ply


class LineEvaluator:
    """
    Window/pattern evaluator for Connect4 and Gomoku.

    score = line windows + open threes + closed fours + connectivity
            + phase term (centre in the opening, forks in the middle game)
    """

    def __init__(self, weights: EvaluationWeights = DEFAULT_WEIGHTS):
        self.weights = weights
        self._cache: Dict[str, int] = {}

    def evaluate(self, game: "GameBase", player: int, ply: int = 0) -> int:
        if game.is_terminal():
            return terminal_score(game, player, ply, self.weights)

        key = hash_board(game.state.board, player)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        score = self._score(game, Player.coerce(player))
        if len(self._cache) >= CACHE_LIMIT:
            self._cache.clear()
        self._cache[key] = score
        return score

    def _score(self, game: "GameBase", player: Player) -> int:
        w = self.weights
        grid = game.state.board.to_array()
        rows, cols = grid.shape
        length = game.WIN_LENGTH
        opponent = player.opponent

        vals = grid.ravel()[line_windows(rows, cols, length)]
        mine = np.count_nonzero(vals == player, axis=1)
        theirs = np.count_nonzero(vals == opponent, axis=1)
        table = _line_table(length, w.line_base)
        own_lines = int(table[mine[theirs == 0]].sum())
        opp_lines = int(table[theirs[mine == 0]].sum())
        score = own_lines - w.opponent_factor * opp_lines

        score += w.open_three * (self._count_runs(grid, player, 3, 2) - self._count_runs(grid, opponent, 3, 2))
        score += w.closed_four * (self._count_runs(grid, player, 4, 1) - self._count_runs(grid, opponent, 4, 1))
        score += w.connectivity * connectivity(grid, player)

        phase = game.phase()
        if phase is GamePhase.OPENING or phase is GamePhase.MIDDLE:
            centre = center_weights(rows, cols, getattr(game, "GRAVITY", False))
            balance = int(centre[grid == player].sum() - centre[grid == opponent].sum())
            factor = w.opening_center_factor if phase is GamePhase.OPENING else 1
            score += w.center * balance * factor
        if phase is GamePhase.MIDDLE:
            # Windows one stone short of a line are live threats.
            own_threats = int(np.count_nonzero((mine == length - 1) & (theirs == 0)))
            opp_threats = int(np.count_nonzero((theirs == length - 1) & (mine == 0)))
            if own_threats >= 2:
                score += w.fork * own_threats ** 2
            if opp_threats >= 2:
                score -= w.opponent_fork * opp_threats ** 2

        return int(score)

    @staticmethod
    def _count_runs(grid: np.ndarray, player: int, length: int, open_ends: int) -> int:
        return sum(1 for run in scan_runs(grid, player) if len(run.cells) == length and run.open_ends == open_ends)


class MobilityEvaluator:
    """L-Game: the side with more L placements available is better off."""

    def __init__(self, weights: EvaluationWeights = DEFAULT_WEIGHTS):
        self.weights = weights

    def evaluate(self, game: "GameBase", player: int, ply: int = 0) -> int:
        if game.is_terminal():
            return terminal_score(game, player, ply, self.weights)
        player = Player.coerce(player)
        return (game.mobility(player) - game.mobility(player.opponent)) * self.weights.mobility


EVALUATORS = {
    "connect4": LineEvaluator,
    "gomoku": LineEvaluator,
    "lgame": MobilityEvaluator,
}


def evaluator_for(game: "GameBase", weights: EvaluationWeights = DEFAULT_WEIGHTS):
    """Evaluator instance for the game, ValueError for unsupported games."""
    try:
        return EVALUATORS[game.game_id()](weights)
    except KeyError:
        available = ", ".join(EVALUATORS)
        raise ValueError(f"No evaluator for game: {game.game_id()}. Available: {available}") from None

