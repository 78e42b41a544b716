"""
Shared test fixtures for strategy_core tests.

Design principles:
- Hand-checked positions, loaded through from_grid where possible
- Fixed seeds for everything random
- Minimal, focused fixtures
"""

from typing import List

import numpy as np
import pytest

from strategy_core.api import GameSession
from strategy_core.games.connect4 import Connect4
from strategy_core.games.gomoku import Gomoku
from strategy_core.games.lgame import LGame
from strategy_core.games.trio import TrioGame


# =============================================================================
# Grid Helpers
# =============================================================================

def _gomoku_grid(stones: dict) -> List[List[int]]:
    grid = [[0] * 15 for _ in range(15)]
    for (r, c), player in stones.items():
        grid[r][c] = player
    return grid


# Row 0 is 1..7, everything else 9. With target 10 the only solutions are
# 2*3+4 along (0,1)->(0,3) and 4*3-2 read backwards.
TRIO_ROW_DIGITS = [[1, 2, 3, 4, 5, 6, 7]] + [[9] * 7 for _ in range(6)]
TRIO_ROW_TARGET = 10

# P2 to move has no legal L placement.
LGAME_BLOCKED = [
    [2, 2, 2, 0],
    [2, 1, 1, 1],
    [3, 0, 0, 1],
    [0, 3, 0, 0],
]

# P1 to move; LMove(1, 1, 7) produces LGAME_BLOCKED.
LGAME_PRE_BLOCKADE = [
    [2, 2, 2, 0],
    [2, 0, 1, 0],
    [3, 0, 1, 0],
    [0, 3, 1, 1],
]


# =============================================================================
# Game Fixtures
# =============================================================================

@pytest.fixture
def connect4() -> Connect4:
    return Connect4()


@pytest.fixture
def gomoku() -> Gomoku:
    return Gomoku()


@pytest.fixture
def lgame() -> LGame:
    return LGame()


@pytest.fixture
def trio_game() -> TrioGame:
    """Trio on the hand-checked row board."""
    return TrioGame(digits=TRIO_ROW_DIGITS, target=TRIO_ROW_TARGET)


@pytest.fixture
def trio_grid() -> np.ndarray:
    return np.array(TRIO_ROW_DIGITS, dtype=np.int8)


@pytest.fixture
def connect4_p1_three() -> Connect4:
    """P1 has three on the bottom row (cols 1-3), P2 stacked on col 4; P1 to move."""
    game = Connect4()
    for col in (1, 4, 2, 4, 3):
        game.make_move(col)
    # P2 replies elsewhere so P1 is to move
    game.make_move(6)
    return game


@pytest.fixture
def lgame_pre_blockade() -> LGame:
    return LGame.from_grid(LGAME_PRE_BLOCKADE, current_player=1)


# =============================================================================
# Session Fixtures
# =============================================================================

@pytest.fixture
def connect4_session():
    with GameSession.create("connect4", difficulty="easy", seed=1) as session:
        yield session


@pytest.fixture
def trio_session():
    with GameSession.create("trio", seed=1, digits=TRIO_ROW_DIGITS, target=TRIO_ROW_TARGET) as session:
        yield session


# =============================================================================
# Position Fixtures
# =============================================================================

@pytest.fixture
def trio_digits() -> List[List[int]]:
    return [list(row) for row in TRIO_ROW_DIGITS]


@pytest.fixture
def lgame_blocked_grid() -> List[List[int]]:
    return [list(row) for row in LGAME_BLOCKED]


@pytest.fixture
def gomoku_open_four() -> Gomoku:
    """Black holds (7,5)-(7,8) with both ends open; black to move."""
    stones = {(7, c): 1 for c in range(5, 9)}
    stones.update({(0, 0): 2, (0, 2): 2, (0, 4): 2, (14, 14): 2})
    return Gomoku.from_grid(_gomoku_grid(stones), current_player=1)


@pytest.fixture
def gomoku_white_four() -> Gomoku:
    """White holds (3,3)-(6,6) diagonally, (2,2) blocked, (7,7) open; black to move."""
    stones = {(3 + i, 3 + i): 2 for i in range(4)}
    stones.update({(2, 2): 1, (10, 1): 1, (10, 3): 1, (12, 12): 1})
    return Gomoku.from_grid(_gomoku_grid(stones), current_player=1)
