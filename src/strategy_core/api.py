"""
Public API: one GameSession per game being played.

A session owns exactly one game and one search engine. Rule violations
never escape make_move as exceptions; they come back as MoveResult error
kinds with the game untouched.

Usage:
    from strategy_core import GameSession

    with GameSession.create("connect4", difficulty="hard", seed=1) as session:
        result = session.make_move(3)
        if not result.ok:
            print(result.error, result.message)
        session.play_ai_move()
        print(session.analyze_position())
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, TYPE_CHECKING

from strategy_core.analysis import blockade
from strategy_core.analysis.threats import ThreatAnalyzer
from strategy_core.core.errors import ERRORS_BY_KIND, ErrorKind, GameError, InvalidMove
from strategy_core.core.types import Difficulty, GameKind, MoveOutcome, Player, PositionAnalysis
from strategy_core.utils.config import DEFAULT_SIMULATIONS, Config
from strategy_core.utils.factory import create_engine, create_game

if TYPE_CHECKING:
    from strategy_core.games.game_base import GameBase
    from strategy_core.search.engine import SearchEngine
    from strategy_core.solver.trio_solver import Solution, SolveReport

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class MoveResult(NamedTuple):
    """
    Outcome of a facade move call.

    ok results carry a snapshot {board, current_player, move_count,
    is_game_over, winner}; failed ones carry the ErrorKind and message.
    """

    ok: bool
    snapshot: Optional[Dict[str, Any]] = None
    error: Optional[ErrorKind] = None
    message: str = ""
    outcome: Optional[MoveOutcome] = None

    @classmethod
    def failure(cls, error: GameError) -> "MoveResult":
        return cls(ok=False, error=error.kind, message=str(error))

    def unwrap(self) -> Dict[str, Any]:
        """Snapshot of a successful move; re-raises the GameError otherwise."""
        if not self.ok:
            raise ERRORS_BY_KIND[self.error](self.message)
        return self.snapshot


# ---------------------------------------------------------------------------
# Per-kind analysis
# ---------------------------------------------------------------------------

def _analyze_line(game: "GameBase", engine: "SearchEngine") -> PositionAnalysis:
    analyzer = ThreatAnalyzer.for_game(game)
    player = game.current_player()
    return PositionAnalysis(
        current_player_threats=analyzer.count_threats(game, player),
        opponent_threats=analyzer.count_threats(game, player.opponent),
        total_pieces=game.piece_count(),
        connectivity_score=analyzer.connectivity(game, player),
        phase=game.phase(),
        evaluation_score=engine.evaluate_position_for(game, player),
    )


def _analyze_lgame(game: "GameBase", engine: "SearchEngine") -> PositionAnalysis:
    player = game.current_player()
    return PositionAnalysis(
        current_player_threats=len(blockade.winning_moves(game, player)),
        opponent_threats=len(blockade.winning_moves(game, player.opponent)),
        total_pieces=game.piece_count(),
        connectivity_score=game.mobility(player) - game.mobility(player.opponent),
        phase=game.phase(),
        evaluation_score=engine.evaluate_position_for(game, player),
    )


def _analyze_trio(game: "GameBase", engine: "SearchEngine") -> PositionAnalysis:
    return PositionAnalysis(
        current_player_threats=len(game.remaining_solutions()),
        opponent_threats=0,
        total_pieces=game.piece_count(),
        connectivity_score=len(game.solutions),
        phase=game.phase(),
        evaluation_score=engine.evaluate_position_for(game, Player.ONE),
    )


ANALYZERS: Dict[GameKind, Callable[["GameBase", "SearchEngine"], PositionAnalysis]] = {
    GameKind.CONNECT4: _analyze_line,
    GameKind.GOMOKU: _analyze_line,
    GameKind.LGAME: _analyze_lgame,
    GameKind.TRIO: _analyze_trio,
}


def _line_moves(name: str) -> Callable[["GameBase", int], List[Any]]:
    def find(game: "GameBase", player: int) -> List[Any]:
        return getattr(ThreatAnalyzer.for_game(game), name)(game, player)
    return find


def _trio_winning(game: "GameBase", player: int) -> List[Any]:
    Player.coerce(player)
    return [s.cells for s in game.remaining_solutions()]


def _none(game: "GameBase", player: int) -> List[Any]:
    Player.coerce(player)
    return []


MOVE_FINDERS: Dict[GameKind, Dict[str, Callable[["GameBase", int], List[Any]]]] = {
    GameKind.CONNECT4: {
        "winning": _line_moves("winning_moves"),
        "blocking": _line_moves("blocking_moves"),
        "threatening": _line_moves("threatening_moves"),
    },
    GameKind.LGAME: {
        "winning": blockade.winning_moves,
        "blocking": blockade.blocking_moves,
        "threatening": blockade.threatening_moves,
    },
    GameKind.TRIO: {
        "winning": _trio_winning,
        "blocking": _none,
        "threatening": _none,
    },
}
MOVE_FINDERS[GameKind.GOMOKU] = MOVE_FINDERS[GameKind.CONNECT4]


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class GameSession:
    """
    Explicitly owned game + engine pair.

    Create through GameSession.create() or create_session(). close() drops
    the game and engine; later calls raise RuntimeError.
    """

    def __init__(self, game: "GameBase", engine: "SearchEngine"):
        self.kind = GameKind(game.game_id())
        self._game: Optional["GameBase"] = game
        self._engine: Optional["SearchEngine"] = engine

    @classmethod
    def create(
        cls,
        kind: Any = GameKind.CONNECT4,
        difficulty: Any = Difficulty.MEDIUM,
        seed: Optional[int] = None,
        simulations: int = DEFAULT_SIMULATIONS,
        **game_options,
    ) -> "GameSession":
        """
        Build a session for a game kind ("connect4", GameKind.TRIO, ...).

        Raises ValueError for an unknown kind or difficulty.
        """
        name = kind.value if isinstance(kind, GameKind) else str(kind)
        config = Config(game_name=name, difficulty=difficulty, simulations=simulations, seed=seed)
        if name == GameKind.TRIO.value:
            game_options.setdefault("seed", seed)
        game = create_game(config.game_name, **game_options)
        engine = create_engine(game, config.difficulty, seed=config.seed, simulations=config.simulations)
        logger.info("Session created: %s (%s, seed=%s)", name, config.difficulty.value, seed)
        return cls(game, engine)

    # ---------------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------------

    @property
    def game(self) -> "GameBase":
        if self._game is None:
            raise RuntimeError("Session is closed")
        return self._game

    @property
    def engine(self) -> "SearchEngine":
        if self._engine is None:
            raise RuntimeError("Session is closed")
        return self._engine

    @property
    def closed(self) -> bool:
        return self._game is None

    def close(self) -> None:
        if self._game is not None:
            logger.info("Session closed: %s", self.kind.value)
        self._game = None
        self._engine = None

    def __enter__(self) -> "GameSession":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def reset(self) -> None:
        """Restart the game (Trio restarts the same puzzle round)."""
        self.game.reset()
        logger.info("Session reset: %s", self.kind.value)

    def new_series_game(self, loser_starts: bool = True) -> int:
        """Start the next game of a series. Returns the starting player."""
        starter = self.game.start_new_series(loser_starts)
        logger.info("Next %s game of the series, player %d starts", self.kind.value, starter)
        return int(starter)

    # ---------------------------------------------------------------------------
    # Moves
    # ---------------------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        game = self.game
        winner = game.winner()
        return {
            "board": game.get_board(),
            "current_player": int(game.current_player()),
            "move_count": game.move_count(),
            "is_game_over": game.is_terminal(),
            "winner": int(winner) if winner is not None else None,
        }

    def _attempt(self, action: Callable[..., MoveOutcome], *args) -> MoveResult:
        try:
            outcome = action(*args)
        except GameError as e:
            logger.debug("Rejected %s%r: %s", action.__name__, args, e)
            return MoveResult.failure(e)
        return MoveResult(ok=True, snapshot=self.snapshot(), outcome=outcome)

    def make_move(self, move: Any) -> MoveResult:
        return self._attempt(self.game.make_move, move)

    def undo_move(self) -> bool:
        return self.game.undo()

    def legal_moves(self) -> List[Any]:
        return self.game.legal_moves()

    def get_board(self) -> List[int]:
        return self.game.get_board()

    # L-Game two-step turns

    def _require(self, kind: GameKind) -> "GameBase":
        if self.kind is not kind:
            raise InvalidMove(f"Only available for {kind.value}, this session plays {self.kind.value}")
        return self.game

    def place_l_piece(self, row: int, col: int, orientation: int) -> MoveResult:
        return self._attempt(self._require(GameKind.LGAME).place_l_piece, row, col, orientation)

    def move_neutral(self, src, dst) -> MoveResult:
        return self._attempt(self._require(GameKind.LGAME).move_neutral, src, dst)

    def skip_neutral(self) -> MoveResult:
        return self._attempt(self._require(GameKind.LGAME).skip_neutral)

    # ---------------------------------------------------------------------------
    # AI
    # ---------------------------------------------------------------------------

    def get_ai_move(self) -> Optional[Any]:
        return self.engine.get_best_move(self.game)

    def get_ai_move_for_player(self, player: int) -> Optional[Any]:
        """Best move for player (1 or 2) even when it is not their turn."""
        return self.engine.get_best_move_for_player(self.game, Player.coerce(player))

    def play_ai_move(self) -> Optional[MoveResult]:
        """Compute and apply the AI move. None if there is nothing to play."""
        move = self.get_ai_move()
        if move is None:
            return None
        return self.make_move(move)

    # ---------------------------------------------------------------------------
    # Analysis
    # ---------------------------------------------------------------------------

    def analyze_position(self) -> PositionAnalysis:
        return ANALYZERS[self.kind](self.game, self.engine)

    def _find(self, which: str, player: Optional[int]) -> List[Any]:
        game = self.game
        player = game.current_player() if player is None else Player.coerce(player)
        return MOVE_FINDERS[self.kind][which](game, player)

    def get_winning_moves(self, player: Optional[int] = None) -> List[Any]:
        return self._find("winning", player)

    def get_blocking_moves(self, player: Optional[int] = None) -> List[Any]:
        return self._find("blocking", player)

    def get_threatening_moves(self, player: Optional[int] = None) -> List[Any]:
        return self._find("threatening", player)

    def get_threat_level(self, row: int, col: int, player: Optional[int] = None) -> int:
        """0-5 strength of a stone at (row, col). Line games only."""
        if self.kind not in (GameKind.CONNECT4, GameKind.GOMOKU):
            raise InvalidMove(f"Threat levels need a line game, this session plays {self.kind.value}")
        game = self.game
        player = game.current_player() if player is None else Player.coerce(player)
        return ThreatAnalyzer.for_game(game).threat_level(game, (row, col), player)

    def memory_usage(self) -> int:
        return self.game.memory_usage()

    # Trio

    def solve(self) -> "SolveReport":
        return self._require(GameKind.TRIO).report()

    def hint(self, difficulty: Any = None) -> Optional["Solution"]:
        game = self._require(GameKind.TRIO)
        return game.hint(self.engine.difficulty if difficulty is None else difficulty)

    def state_string(self) -> str:
        return self.game.state_string()


def create_session(
    kind: Any = GameKind.CONNECT4,
    difficulty: Any = Difficulty.MEDIUM,
    seed: Optional[int] = None,
    **options,
) -> GameSession:
    return GameSession.create(kind, difficulty=difficulty, seed=seed, **options)


# ---------------------------------------------------------------------------
# Terminal play
# ---------------------------------------------------------------------------

def format_move(move: Any) -> str:
    if isinstance(move, (tuple, list)):
        return ",".join(format_move(m) for m in move if m is not None)
    return str(move)


def parse_move(kind: GameKind, raw: str) -> Any:
    """
    Parse typed input into a move.

    connect4: "3"            gomoku: "7,7"
    lgame:    "1,1,7" or "1,1,7,0,3,3,3" (with neutral from/to)
    trio:     "0,1,0,2,0,3"
    """
    values = [int(x.strip()) for x in raw.replace(" ", ",").split(",") if x.strip()]
    if kind is GameKind.CONNECT4:
        if len(values) != 1:
            raise ValueError("Enter one column number")
        return values[0]
    if kind is GameKind.GOMOKU:
        if len(values) != 2:
            raise ValueError("Enter row,col")
        return tuple(values)
    if kind is GameKind.LGAME:
        from strategy_core.games.lgame import LMove

        if len(values) == 3:
            return LMove(*values)
        if len(values) == 7:
            return LMove(*values[:3], tuple(values[3:5]), tuple(values[5:7]))
        raise ValueError("Enter row,col,orientation[,from_row,from_col,to_row,to_col]")
    if len(values) != 6:
        raise ValueError("Enter three cells as r1,c1,r2,c2,r3,c3")
    return tuple(zip(values[0::2], values[1::2]))


def _human_turn(
    session: GameSession,
    input_fn: Callable[[str], str],
    output_fn: Callable[[str], None],
) -> Optional[MoveResult]:
    """Prompt until a legal move is played. None if the player quits."""
    output_fn(f"\nYour turn (Player {int(session.game.current_player())})")
    while True:
        raw = input_fn("Move: ").strip()
        if raw.lower() in ("q", "quit"):
            return None
        if raw.lower() == "hint" and session.kind is GameKind.TRIO:
            hint = session.hint()
            output_fn(f"Hint: {hint.expression}" if hint else "No solutions left")
            continue
        if raw.lower() == "undo":
            output_fn("Undone" if session.undo_move() else "Nothing to undo")
            output_fn(session.state_string())
            continue
        try:
            move = parse_move(session.kind, raw)
        except ValueError as e:
            output_fn(f"Invalid input: {e}")
            continue
        result = session.make_move(move)
        if result.ok:
            return result
        output_fn(f"Illegal move ({result.error.value}): {result.message}")


def _ai_turn(session: GameSession, output_fn: Callable[[str], None]) -> Optional[MoveResult]:
    player = int(session.game.current_player())
    result = session.play_ai_move()
    if result is not None:
        output_fn(f"\nAI (Player {player}) played: {format_move(result.outcome.move)}")
    return result


def play_match(
    session: GameSession,
    human_players: Iterable[int] = (),
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
    max_turns: Optional[int] = None,
) -> Optional[int]:
    """
    Play a terminal match through the session. Returns the winner or None.

    Trio is played by the human if player 1 is human, otherwise the AI
    claims hints until the puzzle is solved.
    """
    human_set = set(human_players)
    output_fn(f"Starting {session.kind.value} ({session.engine.difficulty.value})")
    output_fn(session.state_string())

    turns = 0
    try:
        while not session.game.is_terminal():
            if max_turns is not None and turns >= max_turns:
                break
            if int(session.game.current_player()) in human_set:
                result = _human_turn(session, input_fn, output_fn)
            else:
                result = _ai_turn(session, output_fn)
            if result is None:
                break
            if session.kind is GameKind.TRIO:
                solution = result.outcome.solution
                output_fn(f"Found: {solution.expression}" if solution else "No match")
            turns += 1
            output_fn(session.state_string())
    except Exception:
        logger.exception("Fatal error in match loop")
        raise

    winner = session.game.winner()
    output_fn("\n" + "=" * 40)
    output_fn("GAME OVER" if session.game.is_terminal() else "STOPPED")
    if session.game.is_terminal():
        output_fn(f"Winner: Player {int(winner)}" if winner is not None else "Draw")
    output_fn("=" * 40)
    return int(winner) if winner is not None else None


__all__ = [
    "GameSession",
    "MoveResult",
    "create_session",
    "play_match",
    "parse_move",
    "format_move",
]
