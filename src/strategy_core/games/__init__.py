"""
Games module - board game implementations.
"""

from strategy_core.games.game_state import GameState, MoveHistory
from strategy_core.games.game_base import GameBase
from strategy_core.games.game_rules import in_bounds, board_full, find_winner, is_winning_placement
from strategy_core.games.connect4 import Connect4
from strategy_core.games.gomoku import Gomoku
from strategy_core.games.lgame import LGame, LMove
from strategy_core.games.trio import TrioGame

__all__ = [
    "GameState",
    "MoveHistory",
    "GameBase",
    "Connect4",
    "Gomoku",
    "LGame",
    "LMove",
    "TrioGame",
    "in_bounds",
    "board_full",
    "find_winner",
    "is_winning_placement",
]
