"""
GameBase - abstract base class for all board games.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from strategy_core.core.types import GamePhase, MoveOutcome, Outcome, Player
from strategy_core.games.game_state import GameState


class GameBase(ABC):
    """
    Abstract base class for all board games.

    IMPORTANT ARCHITECTURE NOTE:
    -----------------------------
    - Every variant exposes the same capability surface:
      make_move / legal_moves / is_terminal / winner / simulate / undo.
    - make_move validates fully before mutating. A raised GameError means
      the state is untouched.
    - Search never mutates a live game: it works on simulate() / clone()
      copies, which drop the undo history.

    Subclasses own a single `state` attribute (GameState) plus whatever
    caches they can rebuild from it in set_state().
    """

    __slots__ = ()

    ROWS: int = 0
    COLS: int = 0
    BITS_PER_CELL: int = 2

    @abstractmethod
    def game_id(self) -> str:
        """Return a stable identifier (e.g. 'connect4')."""
        pass

    @abstractmethod
    def num_players(self) -> int:
        """Return number of players in the game."""
        pass

    @abstractmethod
    def clone(self, keep_history: bool = True) -> "GameBase":
        """
        Independent copy of game + state.
        Used heavily for simulation; search passes keep_history=False.
        """
        pass

    @abstractmethod
    def legal_moves(self) -> List[Any]:
        """
        Return all legal moves from the current state.
        Example (Connect4): [0, 1, 2, ...]
        """
        pass

    @abstractmethod
    def make_move(self, move: Any) -> MoveOutcome:
        """
        Apply a move for the current player. Mutates internal state.

        Raises:
            GameError: subclass naming the violated rule. State unchanged.
        """
        pass

    @abstractmethod
    def undo(self) -> bool:
        """Revert the newest history entry. False if there is none."""
        pass

    @abstractmethod
    def reset(self, starting_player: int = Player.ONE) -> None:
        """Back to the initial position with `starting_player` to move."""
        pass

    @abstractmethod
    def get_cell_strings(self) -> dict[int, str]:
        """
        Return a dictionary of [int -> str] where each cell value maps to its display string
            (e.g. {0: " ", 1: "X", 2: "O"} for connect4)
        """
        pass

    # ---------------------------------------------------------------------------
    # Shared behaviour
    # ---------------------------------------------------------------------------

    def get_state(self) -> GameState:
        return self.state

    def set_state(self, game_state: GameState) -> None:
        """Replace the current game state."""
        self.state = game_state

    def current_player(self) -> Player:
        return self.state.current_player

    def move_count(self) -> int:
        return self.state.move_count

    def is_terminal(self) -> bool:
        return self.state.is_over

    def winner(self) -> Optional[Player]:
        return self.state.winner

    def get_result(self, player: int) -> Outcome:
        """
        Return the result for the player:
            WIN / TIE / NEUTRAL / LOSS
        """
        if not self.state.is_over:
            return Outcome.NEUTRAL
        if self.state.winner is None:
            return Outcome.TIE
        return Outcome.WIN if self.state.winner == player else Outcome.LOSS

    def simulate(self, move: Any, keep_history: bool = False) -> "GameBase":
        """Return a copy with move applied. The receiver is never touched."""
        child = self.clone(keep_history=keep_history)
        child.make_move(move)
        return child

    def next_series_starter(self) -> Player:
        """In a series the loser starts; after a draw the other side starts."""
        if self.num_players() < 2:
            return Player.ONE
        if self.state.winner is not None:
            return self.state.winner.opponent
        first = next(iter(self.state.history), None)
        if first is None:
            return self.state.current_player.opponent
        return first.player.opponent

    def start_new_series(self, loser_starts: bool = True) -> Player:
        """Reset for the next game of a series and return who starts it."""
        starter = self.next_series_starter() if loser_starts else Player.ONE
        self.reset(starter)
        return starter

    def with_current_player(self, player: int) -> "GameBase":
        """Hypothetical copy where `player` is to move."""
        g = self.clone(keep_history=False)
        g.state.current_player = Player.coerce(player)
        return g

    def piece_count(self) -> int:
        return self.state.board.occupied_count()

    def phase(self) -> GamePhase:
        return GamePhase.for_progress(self.piece_count(), self.state.board.total_cells)

    def get_board(self) -> List[int]:
        """Flat row-major copy of the board."""
        return self.state.board.to_list()

    def memory_usage(self) -> int:
        return self.state.board.memory_usage() + self.state.history.memory_usage()

    def state_string(self) -> str:
        """Pretty string representation of the state."""
        grid = self.state.board.to_array()
        strings = self.get_cell_strings()
        rows, cols = grid.shape
        lines = ["    " + " ".join(f"{c:>3}" for c in range(cols))]
        lines.append("   ╭" + "───┬" * (cols - 1) + "───╮")
        for r in range(rows):
            lines.append(f"{r:>2} │ " + " │ ".join(strings.get(int(v), "?") for v in grid[r]) + " │")
            if r < rows - 1:
                lines.append("   ├" + "───┼" * (cols - 1) + "───┤")
        lines.append("   ╰" + "───┴" * (cols - 1) + "───╯")
        return "\n".join(lines)
