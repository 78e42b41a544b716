"""
Tests for strategy_core.utils.config

Tests configuration, the game registry and search tiers.
"""

import pytest

from strategy_core.core.types import Difficulty
from strategy_core.utils.config import (
    DEFAULT_CONFIG,
    GAMES,
    MIN_SIMULATIONS,
    SEARCH_DEPTHS,
    TIER_SETTINGS,
    Config,
    tier_settings,
)


class TestGameRegistry:
    """GAMES registry tests."""

    def test_all_games_registered(self):
        """Every playable game has an entry."""
        assert set(GAMES) == {"connect4", "gomoku", "lgame", "trio"}

    def test_game_ids_match_keys(self):
        """Registered classes report their registry name."""
        for name, game_class in GAMES.items():
            if name == "trio":
                continue  # generating a puzzle is covered elsewhere
            assert game_class().game_id() == name


class TestTiers:
    """Search tier tables."""

    def test_every_tier_defined(self):
        """Searched games define all four tiers."""
        for tiers in TIER_SETTINGS.values():
            assert set(tiers) == set(Difficulty)

    def test_depths_follow_tiers(self):
        """SEARCH_DEPTHS mirrors the tier table."""
        assert SEARCH_DEPTHS["connect4"][Difficulty.HARD] == TIER_SETTINGS["connect4"][Difficulty.HARD].depth

    def test_expert_connect4_uses_monte_carlo(self):
        """Only expert Connect4 runs rollouts."""
        assert tier_settings("connect4", Difficulty.EXPERT).monte_carlo
        assert not tier_settings("connect4", Difficulty.HARD).monte_carlo

    def test_depth_never_decreases(self):
        """Harder tiers search at least as deep."""
        order = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD, Difficulty.EXPERT]
        for tiers in TIER_SETTINGS.values():
            depths = [tiers[d].depth for d in order]
            assert depths == sorted(depths)

    def test_trio_has_no_tier(self):
        """Trio is solved, not searched."""
        assert tier_settings("trio", Difficulty.HARD) is None

    def test_string_difficulty(self):
        """Tiers accept difficulty names."""
        assert tier_settings("gomoku", "hard") == TIER_SETTINGS["gomoku"][Difficulty.HARD]


class TestConfig:
    """Config class tests."""

    def test_defaults(self):
        """Default configuration plays medium Connect4."""
        assert DEFAULT_CONFIG.game_name == "connect4"
        assert DEFAULT_CONFIG.difficulty is Difficulty.MEDIUM
        assert DEFAULT_CONFIG.search_depth == 4

    def test_invalid_game_raises(self):
        """Invalid game name raises ValueError."""
        with pytest.raises(ValueError, match="Unknown game"):
            Config(game_name="chess")

    def test_invalid_difficulty_raises(self):
        """Invalid difficulty raises ValueError."""
        with pytest.raises(ValueError, match="Unknown difficulty"):
            Config(difficulty="impossible")

    def test_simulation_floor(self):
        """Small budgets are raised to MIN_SIMULATIONS."""
        assert Config(simulations=10).simulations == MIN_SIMULATIONS
        assert Config(simulations=5000).simulations == 5000

    def test_trio_has_no_depth(self):
        """Trio configs carry no search depth."""
        config = Config(game_name="trio", difficulty="easy")
        assert config.tier is None
        assert config.search_depth == 0
