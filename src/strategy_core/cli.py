"""
Command-line interface for playing against the engine.
"""

import argparse
import logging
from typing import List, Optional

from strategy_core.api import GameSession, play_match
from strategy_core.core.types import Difficulty
from strategy_core.solver.trio_solver import TRIO_LEVELS, level_name
from strategy_core.utils.config import DEFAULT_SIMULATIONS, GAMES


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Play Connect4, Gomoku, the L-Game or Trio against a search AI"
    )
    parser.add_argument(
        "--game", "-g",
        choices=list(GAMES.keys()),
        default="connect4",
        help="Game to play (default: connect4)",
    )
    parser.add_argument(
        "--difficulty", "-d",
        choices=[d.value for d in Difficulty],
        default=Difficulty.MEDIUM.value,
        help="AI difficulty (default: medium)",
    )
    parser.add_argument(
        "--self-play",
        action="store_true",
        help="AI plays for all players (no human players)",
    )
    parser.add_argument(
        "--players", "-p",
        type=str,
        default=None,
        help="Comma-separated list of human player numbers (e.g., '1,2'). Overrides --self-play.",
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Seed for AI randomness and Trio puzzle generation",
    )
    parser.add_argument(
        "--simulations",
        type=int,
        default=DEFAULT_SIMULATIONS,
        help=f"Monte Carlo playouts per decision (default: {DEFAULT_SIMULATIONS})",
    )
    parser.add_argument(
        "--trio-level",
        type=int,
        choices=sorted(TRIO_LEVELS),
        default=1,
        help="Trio puzzle level 1-4 (default: 1)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Log engine decisions (-v info, -vv debug)",
    )
    return parser.parse_args(argv)


def parse_human_players(players: Optional[str], game, self_play: bool) -> List[int]:
    """
    Human seats from --players.

    Without --players, player 1 is human unless --self-play is set.
    Raises ValueError for malformed lists or seats the game does not have.
    """
    if players is None:
        return [] if self_play else [1]

    try:
        seats = {int(p) for p in players.replace(" ", "").split(",") if p}
    except ValueError as e:
        raise ValueError(f"Invalid --players value {players!r}, expected e.g. '1,2'") from e

    num_players = game.num_players()
    invalid = sorted(p for p in seats if not 1 <= p <= num_players)
    if invalid:
        raise ValueError(f"Invalid player number(s) {invalid}: {game.game_id()} has players 1-{num_players}")
    return sorted(seats)


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging(args.verbose)

    options = {"level": args.trio_level} if args.game == "trio" else {}
    session = GameSession.create(
        args.game,
        difficulty=args.difficulty,
        seed=args.seed,
        simulations=args.simulations,
        **options,
    )

    with session:
        game = session.game
        human_players = parse_human_players(args.players, game, args.self_play)
        if args.game == "trio":
            print(f"Trio level {args.trio_level} ({level_name(args.trio_level)}); type 'hint' for help")

        try:
            play_match(session, human_players)
        except KeyboardInterrupt:
            print("\nInterrupted")


if __name__ == "__main__":
    main()
