"""
Blockade tactics for the L-Game.

The L-Game has no lines; the only tactic is mobility. A move "wins" when the
opponent is left without a legal L placement, and "threatens" when the
opponent is left with at most NEAR_BLOCKADE placements.

All functions accept a player who is not to move and answer for a
hypothetical copy where they are.

Usage:
    winning_moves(lgame, Player.ONE)     # [LMove(1, 1, 7, None, None), ...]
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from strategy_core.core.types import Player

if TYPE_CHECKING:
    from strategy_core.games.lgame import LGame, LMove

# Opponent placements at or below this count as a blockade threat.
NEAR_BLOCKADE = 2


def _as_mover(game: "LGame", player: Player) -> "LGame":
    if game.current_player() == player:
        return game
    return game.with_current_player(player)


def winning_moves(game: "LGame", player: int) -> List["LMove"]:
    """Full turns after which the opponent cannot move their L."""
    if game.is_terminal():
        return []
    player = Player.coerce(player)
    mover = _as_mover(game, player)
    wins = []
    for move in mover.legal_moves():
        child = mover.simulate(move)
        if child.winner() == player:
            wins.append(move)
    return wins


def blocking_moves(game: "LGame", player: int) -> List["LMove"]:
    """
    Turns for player that leave the opponent without an immediate
    blockade. Empty when the opponent has no blockade to stop.
    """
    if game.is_terminal():
        return []
    player = Player.coerce(player)
    if not winning_moves(game, player.opponent):
        return []
    mover = _as_mover(game, player)
    blocks = []
    for move in mover.legal_moves():
        child = mover.simulate(move)
        if child.is_terminal():
            if child.winner() == player:
                blocks.append(move)
            continue
        if not winning_moves(child, player.opponent):
            blocks.append(move)
    return blocks


def threatening_moves(game: "LGame", player: int) -> List["LMove"]:
    """Turns that win or leave the opponent at most NEAR_BLOCKADE placements."""
    if game.is_terminal():
        return []
    player = Player.coerce(player)
    mover = _as_mover(game, player)
    threats = []
    for move in mover.legal_moves():
        child = mover.simulate(move)
        if child.winner() == player or child.mobility(player.opponent) <= NEAR_BLOCKADE:
            threats.append(move)
    return threats
