"""
strategy_core - rules and AI for four abstract strategy games.

Connect4, Gomoku, the L-Game and the Trio arithmetic puzzle share one
bit-packed board, one game interface and one search engine, exposed through
an explicitly owned GameSession.

Quick Start:
    from strategy_core import GameSession

    with GameSession.create("gomoku", difficulty="hard", seed=3) as session:
        session.make_move((7, 7))
        session.play_ai_move()
        print(session.get_threatening_moves())

Modules:
    board    - BitPackedBoard storage
    games    - Connect4, Gomoku, LGame, TrioGame rules
    analysis - Threat scanning (line games) and blockade tactics (L-Game)
    search   - Evaluation, minimax, Monte Carlo and the tiered engine
    solver   - Trio solving, generation and hints
"""

from strategy_core.api import (
    GameSession,
    MoveResult,
    create_session,
    play_match,
)

from strategy_core.core import (
    Difficulty,
    ErrorKind,
    GameError,
    GameKind,
    Player,
    PositionAnalysis,
)

__version__ = "1.0.0"

__all__ = [
    # Main API
    "GameSession",
    "MoveResult",
    "create_session",
    "play_match",
    # Types
    "Difficulty",
    "ErrorKind",
    "GameError",
    "GameKind",
    "Player",
    "PositionAnalysis",
]
