"""
Tests for strategy_core.api

Session lifecycle, error reporting, analysis and terminal play.
"""

import pytest

from strategy_core.api import GameSession, MoveResult, create_session, format_move, parse_move, play_match
from strategy_core.core.errors import ErrorKind, InvalidMove, OutOfBounds
from strategy_core.core.types import GameKind, PositionAnalysis
from strategy_core.games.lgame import LMove

PLUS = ((0, 1), (0, 2), (0, 3))


def scripted(lines):
    """input() replacement feeding fixed lines."""
    feed = iter(lines)
    return lambda prompt="": next(feed)


# =============================================================================
# Creation and lifecycle
# =============================================================================

class TestCreation:
    """Building sessions."""

    @pytest.mark.parametrize("kind", ["connect4", "gomoku", "lgame", GameKind.CONNECT4])
    def test_create(self, kind):
        """Sessions accept names or GameKind members."""
        with GameSession.create(kind, seed=0) as session:
            assert session.kind is GameKind(session.game.game_id())
            assert session.game.move_count() == 0

    def test_create_session_helper(self):
        """create_session forwards to GameSession.create."""
        with create_session("lgame", difficulty="hard", seed=2) as session:
            assert session.kind is GameKind.LGAME
            assert session.engine.difficulty.value == "hard"

    def test_unknown_kind(self):
        """Unknown games are rejected."""
        with pytest.raises(ValueError, match="Unknown game"):
            GameSession.create("chess")

    def test_seeded_trio_repeats(self):
        """The session seed also seeds Trio generation."""
        with GameSession.create("trio", seed=9) as a, GameSession.create("trio", seed=9) as b:
            assert a.get_board() == b.get_board()
            assert a.game.target == b.game.target

    def test_close(self):
        """Closed sessions refuse further use."""
        session = GameSession.create("connect4", seed=0)
        session.close()
        assert session.closed
        with pytest.raises(RuntimeError, match="closed"):
            session.make_move(3)
        with pytest.raises(RuntimeError):
            session.get_ai_move()
        session.close()


# =============================================================================
# Moves and errors
# =============================================================================

class TestMoves:
    """make_move results."""

    def test_ok_snapshot(self, connect4_session):
        """A legal move returns a snapshot."""
        result = connect4_session.make_move(3)
        assert result.ok
        assert result.snapshot["current_player"] == 2
        assert result.snapshot["move_count"] == 1
        assert result.snapshot["board"][5 * 7 + 3] == 1
        assert not result.snapshot["is_game_over"]
        assert result.outcome.cells == ((5, 3),)

    @pytest.mark.parametrize("move,kind", [
        (9, ErrorKind.OUT_OF_BOUNDS),
        ("x", ErrorKind.INVALID_MOVE),
    ])
    def test_error_kinds(self, connect4_session, move, kind):
        """Rule violations come back as error kinds, not exceptions."""
        result = connect4_session.make_move(move)
        assert not result.ok
        assert result.error is kind
        assert result.message
        assert connect4_session.game.move_count() == 0

    def test_full_column(self, connect4_session):
        """A full column reports position_occupied."""
        for _ in range(6):
            assert connect4_session.make_move(0).ok
        assert connect4_session.make_move(0).error is ErrorKind.POSITION_OCCUPIED

    def test_game_over(self, connect4_session):
        """Moves after the end report game_already_over."""
        for col in (0, 1, 0, 1, 0, 1, 0):
            result = connect4_session.make_move(col)
        assert result.snapshot["winner"] == 1
        assert connect4_session.make_move(3).error is ErrorKind.GAME_ALREADY_OVER

    def test_unwrap(self, connect4_session):
        """unwrap returns the snapshot or re-raises the typed error."""
        assert connect4_session.make_move(3).unwrap()["move_count"] == 1
        with pytest.raises(OutOfBounds):
            connect4_session.make_move(-1).unwrap()

    def test_failure_from_error(self):
        """Failures carry the error's kind and text."""
        result = MoveResult.failure(InvalidMove("nope"))
        assert (result.ok, result.error, result.message) == (False, ErrorKind.INVALID_MOVE, "nope")

    def test_undo_and_reset(self, connect4_session):
        """Undo steps back, reset clears the board."""
        connect4_session.make_move(3)
        connect4_session.make_move(4)
        assert connect4_session.undo_move()
        assert connect4_session.game.move_count() == 1
        connect4_session.reset()
        assert connect4_session.game.move_count() == 0
        assert not connect4_session.undo_move()

    def test_new_series_game(self, connect4_session):
        """The loser of the last game opens the next one."""
        for col in (0, 1, 0, 1, 0, 1, 0):
            connect4_session.make_move(col)
        assert connect4_session.new_series_game() == 2
        snapshot = connect4_session.snapshot()
        assert snapshot["current_player"] == 2
        assert snapshot["move_count"] == 0
        assert not snapshot["is_game_over"]

    def test_lgame_steps(self):
        """Two-step L-Game turns go through the session."""
        with GameSession.create("lgame", seed=0) as session:
            assert session.place_l_piece(0, 0, 1).ok
            result = session.move_neutral((0, 3), (3, 1))
            assert result.ok
            assert result.snapshot["current_player"] == 2
            assert not session.skip_neutral().ok

    def test_lgame_steps_wrong_game(self, connect4_session):
        """L-Game steps on another game raise InvalidMove."""
        with pytest.raises(InvalidMove):
            connect4_session.place_l_piece(0, 0, 1)


# =============================================================================
# AI and analysis
# =============================================================================

class TestAIAndAnalysis:
    """Engine access through the session."""

    def test_ai_takes_win(self, connect4_session):
        """The AI completes an open line."""
        for col in (1, 4, 2, 4, 3, 6):
            connect4_session.make_move(col)
        assert connect4_session.get_ai_move() == 0
        result = connect4_session.play_ai_move()
        assert result.snapshot["winner"] == 1

    def test_ai_for_other_player(self, connect4_session):
        """The AI can plan for the side not to move."""
        for col in (1, 4, 2, 4, 3, 6):
            connect4_session.make_move(col)
        assert connect4_session.get_ai_move_for_player(2) == 0
        assert connect4_session.game.current_player() == 1

    def test_play_ai_move_when_over(self, connect4_session):
        """Nothing to play on a finished board."""
        for col in (0, 1, 0, 1, 0, 1, 0):
            connect4_session.make_move(col)
        assert connect4_session.play_ai_move() is None

    def test_threat_queries(self, connect4_session):
        """Winning, blocking and threatening moves default to the side to move."""
        for col in (1, 4, 2, 4, 3, 6):
            connect4_session.make_move(col)
        assert connect4_session.get_winning_moves() == [(5, 0)]
        assert connect4_session.get_blocking_moves(2) == [(5, 0)]
        assert (5, 0) in connect4_session.get_threatening_moves(1)

    def test_threat_level(self, connect4_session):
        """Threat levels are read for the side to move by default."""
        for col in (1, 4, 2, 4, 3, 6):
            connect4_session.make_move(col)
        assert connect4_session.get_threat_level(5, 0) == 5
        assert connect4_session.get_threat_level(3, 4, 2) == 3

    def test_threat_level_wrong_game(self, trio_session):
        """Trio has no threat levels."""
        with pytest.raises(InvalidMove):
            trio_session.get_threat_level(0, 0)

    def test_analyze_connect4(self, connect4_session):
        """Analysis counts threats for both sides."""
        for col in (1, 4, 2, 4, 3, 6):
            connect4_session.make_move(col)
        analysis = connect4_session.analyze_position()
        assert isinstance(analysis, PositionAnalysis)
        assert analysis.current_player_threats == 1
        assert analysis.opponent_threats == 0
        assert analysis.total_pieces == 6

    def test_analyze_lgame(self):
        """The opening L-Game position is balanced."""
        with GameSession.create("lgame", seed=0) as session:
            analysis = session.analyze_position()
            assert analysis.connectivity_score == 0
            assert analysis.evaluation_score == 0
            assert analysis.total_pieces == 10

    def test_memory_usage(self, connect4_session):
        """Memory use is reported in bytes."""
        assert connect4_session.memory_usage() > 0


# =============================================================================
# Trio
# =============================================================================

class TestTrioSession:
    """Trio through the session."""

    def test_claims(self, trio_session):
        """Claims report the found solution or no match."""
        result = trio_session.make_move(PLUS)
        assert result.ok
        assert result.outcome.solution.expression == "2×3+4=10"
        miss = trio_session.make_move(((0, 0), (0, 1), (0, 2)))
        assert miss.ok and miss.outcome.solution is None

    def test_solve_and_hint(self, trio_session):
        """solve lists every solution; hints shrink as they are found."""
        assert trio_session.solve().count == 2
        assert trio_session.hint("hard").cells == PLUS
        trio_session.make_move(PLUS)
        assert trio_session.get_winning_moves() == [((0, 3), (0, 2), (0, 1))]
        assert trio_session.get_blocking_moves() == []

    def test_analyze(self, trio_session):
        """Trio analysis reports remaining solutions and progress."""
        trio_session.make_move(PLUS)
        analysis = trio_session.analyze_position()
        assert analysis.current_player_threats == 1
        assert analysis.connectivity_score == 2
        assert analysis.evaluation_score == 50

    def test_solve_wrong_game(self, connect4_session):
        """Only Trio sessions can be solved."""
        with pytest.raises(InvalidMove):
            connect4_session.solve()


# =============================================================================
# Terminal play
# =============================================================================

class TestParsing:
    """Typed move input."""

    @pytest.mark.parametrize("kind,raw,move", [
        (GameKind.CONNECT4, "3", 3),
        (GameKind.GOMOKU, "7, 8", (7, 8)),
        (GameKind.LGAME, "1,1,7", LMove(1, 1, 7)),
        (GameKind.LGAME, "0,0,1,0,3,3,1", LMove(0, 0, 1, (0, 3), (3, 1))),
        (GameKind.TRIO, "0,1,0,2,0,3", PLUS),
    ])
    def test_parse_move(self, kind, raw, move):
        """Each game has its own input format."""
        assert parse_move(kind, raw) == move

    @pytest.mark.parametrize("kind,raw", [
        (GameKind.CONNECT4, "1,2"),
        (GameKind.GOMOKU, "7"),
        (GameKind.LGAME, "1,1"),
        (GameKind.TRIO, "0,1"),
        (GameKind.CONNECT4, "abc"),
    ])
    def test_parse_errors(self, kind, raw):
        """Malformed input raises ValueError."""
        with pytest.raises(ValueError):
            parse_move(kind, raw)

    def test_format_move(self):
        """Moves print as comma-separated numbers."""
        assert format_move(3) == "3"
        assert format_move(LMove(1, 1, 7)) == "1,1,7"
        assert format_move(PLUS) == "0,1,0,2,0,3"


class TestPlayMatch:
    """Scripted terminal matches."""

    def test_humans_play_to_a_win(self, connect4_session):
        """Bad input is reported and the match continues."""
        out = []
        moves = ["abc", "9", "0", "1", "undo", "1", "0", "1", "0", "1", "0"]
        winner = play_match(connect4_session, [1, 2], scripted(moves), out.append)
        assert winner == 1
        text = "\n".join(out)
        assert "Invalid input" in text
        assert "Illegal move (out_of_bounds)" in text
        assert "Undone" in text
        assert "Winner: Player 1" in text

    def test_quit(self, connect4_session):
        """Quitting stops the match without a winner."""
        out = []
        assert play_match(connect4_session, [1], scripted(["q"]), out.append) is None
        assert "STOPPED" in out

    def test_ai_self_play_turn_limit(self, connect4_session):
        """max_turns bounds an AI-only match."""
        out = []
        assert play_match(connect4_session, [], output_fn=out.append, max_turns=2) is None
        assert connect4_session.game.move_count() == 2
        assert any("AI (Player 1) played" in line for line in out)

    def test_trio_ai_solves(self, trio_session):
        """The AI claims hints until the puzzle is done."""
        out = []
        assert play_match(trio_session, [], output_fn=out.append) == 1
        assert "Found: 2×3+4=10" in out
        assert "GAME OVER" in out

    def test_trio_human_hint(self, trio_session):
        """Human Trio players can ask for hints."""
        out = []
        moves = ["hint", "0,1,0,2,0,3", "0,3,0,2,0,1"]
        assert play_match(trio_session, [1], scripted(moves), out.append) == 1
        assert any(line.startswith("Hint: ") for line in out)
