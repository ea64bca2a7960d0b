"""
arbiter.py - Applies human moves and answers them with a random server move

The MoveArbiter is the only code that mutates a GameSession. Each call to
``apply_human_move`` runs as one unit: the human drop, the win/draw checks,
the server's reply and its checks. A win ends the request immediately.
"""

import datetime
import random
from dataclasses import dataclass
from typing import Callable, Optional

from connect4_remote.debug import debug
from connect4_remote.errors import InvalidColumnError
from connect4_remote.game.board import Board
from connect4_remote.game.rules import has_connect_four, is_draw
from connect4_remote.game.session import GameSession, utc_now
from connect4_remote.utils import Actor, GameStatus, is_valid_column


@dataclass(frozen=True)
class MoveOutcome:
    """Result handed back to the caller: the full board and the status, nothing else."""
    board: Board
    status: GameStatus


class MoveArbiter:
    """
    Adjudicates moves for game sessions.

    The server's reply is drawn uniformly from the legal columns using the
    injected random source, so a seeded ``random.Random`` makes games
    reproducible.
    """

    def __init__(self, rng: Optional[random.Random] = None,
                 clock: Callable[[], datetime.datetime] = utc_now):
        """
        Initialize the arbiter.

        Args:
            rng: Random source used for the server's column choice
            clock: Returns the current UTC time, used to fix game durations
        """
        self.rng = rng if rng is not None else random.Random()
        self.clock = clock

    def choose_server_column(self, board: Board) -> Optional[int]:
        """Pick a legal column uniformly at random, or None if the board is full."""
        legal = sorted(board.legal_columns())
        if not legal:
            return None
        return self.rng.choice(legal)

    def apply_human_move(self, session: GameSession, column: int) -> MoveOutcome:
        """
        Apply the human's drop and, if the game goes on, the server's reply.

        Args:
            session: The game session to mutate
            column: Column chosen by the human

        Returns:
            MoveOutcome with a copy of the resulting board and the status

        Raises:
            InvalidColumnError: if the column is out of range
            GameAlreadyOverError: if the session is already terminal
            ColumnFullError: if the human's column is full (session unchanged)
        """
        if not is_valid_column(column):
            raise InvalidColumnError(column)
        session.ensure_ongoing()

        with debug.timed(f"move_{session.game_id}", "arbiter"):
            return self._apply(session, int(column))

    def _apply(self, session: GameSession, column: int) -> MoveOutcome:
        row = session.board.drop(column, Actor.HUMAN)
        session.record_move(column, Actor.HUMAN)
        debug.debug(f"Game {session.game_id}: human dropped into column {column} (row {row})", "arbiter")

        if has_connect_four(session.board, Actor.HUMAN, row, column):
            return self._finish(session, GameStatus.HUMAN_WIN)

        if is_draw(session.board):
            return self._finish(session, GameStatus.DRAW)

        server_column = self.choose_server_column(session.board)
        if server_column is None:
            return self._finish(session, GameStatus.DRAW)

        server_row = session.board.drop(server_column, Actor.SERVER)
        session.record_move(server_column, Actor.SERVER)
        debug.debug(f"Game {session.game_id}: server dropped into column {server_column} (row {server_row})",
                    "arbiter")

        if has_connect_four(session.board, Actor.SERVER, server_row, server_column):
            return self._finish(session, GameStatus.SERVER_WIN)

        if is_draw(session.board):
            return self._finish(session, GameStatus.DRAW)

        return MoveOutcome(board=session.board.copy(), status=session.status)

    def _finish(self, session: GameSession, status: GameStatus) -> MoveOutcome:
        session.finalize(status, now=self.clock())
        return MoveOutcome(board=session.board.copy(), status=status)
