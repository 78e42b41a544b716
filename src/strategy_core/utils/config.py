"""
Configuration and game registry.
"""

from typing import Dict, NamedTuple, Optional

from strategy_core.core.types import Difficulty
from strategy_core.games import Connect4, Gomoku, LGame, TrioGame


# ---------------------------------------------------------------------------
# Game Registry
# ---------------------------------------------------------------------------

GAMES = {
    "connect4": Connect4,
    "gomoku": Gomoku,
    "lgame": LGame,
    "trio": TrioGame,
}


# ---------------------------------------------------------------------------
# Search tiers
# ---------------------------------------------------------------------------

DEFAULT_SIMULATIONS = 1000
MIN_SIMULATIONS = 200

# Gomoku nodes are capped to the most central candidates.
GOMOKU_MAX_CANDIDATES = 12


class TierSettings(NamedTuple):
    depth: int
    random_rate: float = 0.0  # chance of a random safe move instead of searching
    monte_carlo: bool = False
    shuffle: bool = False     # shuffle before ordering so equal moves vary


TIER_SETTINGS: Dict[str, Dict[Difficulty, TierSettings]] = {
    "connect4": {
        Difficulty.EASY: TierSettings(depth=2, random_rate=0.5, shuffle=True),
        Difficulty.MEDIUM: TierSettings(depth=4, random_rate=0.2, shuffle=True),
        Difficulty.HARD: TierSettings(depth=6),
        Difficulty.EXPERT: TierSettings(depth=6, monte_carlo=True),
    },
    "gomoku": {
        Difficulty.EASY: TierSettings(depth=1, random_rate=0.3, shuffle=True),
        Difficulty.MEDIUM: TierSettings(depth=2, shuffle=True),
        Difficulty.HARD: TierSettings(depth=2),
        Difficulty.EXPERT: TierSettings(depth=3),
    },
    "lgame": {
        Difficulty.EASY: TierSettings(depth=1, random_rate=0.4, shuffle=True),
        Difficulty.MEDIUM: TierSettings(depth=1, shuffle=True),
        Difficulty.HARD: TierSettings(depth=2),
        Difficulty.EXPERT: TierSettings(depth=2),
    },
}

SEARCH_DEPTHS: Dict[str, Dict[Difficulty, int]] = {
    game: {difficulty: tier.depth for difficulty, tier in tiers.items()}
    for game, tiers in TIER_SETTINGS.items()
}


def tier_settings(game_name: str, difficulty: Difficulty) -> Optional[TierSettings]:
    """Search settings, or None for games that are not searched (Trio)."""
    tiers = TIER_SETTINGS.get(game_name)
    if tiers is None:
        return None
    return tiers[Difficulty.parse(difficulty)]


# ---------------------------------------------------------------------------
# Default Settings
# ---------------------------------------------------------------------------

class Config:
    """Session configuration with sensible defaults."""

    def __init__(
        self,
        game_name: str = "connect4",
        difficulty: Difficulty = Difficulty.MEDIUM,
        simulations: int = DEFAULT_SIMULATIONS,
        seed: Optional[int] = None,
    ):
        if game_name not in GAMES:
            available = ", ".join(GAMES.keys())
            raise ValueError(f"Unknown game: {game_name}. Available: {available}")

        self.game_name = game_name
        self.difficulty = Difficulty.parse(difficulty)
        self.simulations = max(MIN_SIMULATIONS, simulations)
        self.seed = seed

        # Derive dependent values
        self.tier = tier_settings(game_name, self.difficulty)
        self.search_depth = self.tier.depth if self.tier else 0


# Default configuration
DEFAULT_CONFIG = Config()
