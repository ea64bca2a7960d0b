"""
session.py - Game session state machine

A GameSession wraps exactly one Board plus its metadata and move log.
It starts ONGOING and moves to exactly one terminal status; once terminal
nothing about it changes again.
"""

import datetime
from dataclasses import dataclass
from typing import List, Optional

from connect4_remote.debug import debug
from connect4_remote.errors import GameAlreadyOverError
from connect4_remote.game.board import Board
from connect4_remote.utils import Actor, GameStatus


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass(frozen=True)
class MoveLogEntry:
    """One accepted move; sequence numbers start at 1 and have no gaps."""
    sequence: int
    column: int
    actor: Actor

    def to_dict(self) -> dict:
        return {"sequence": self.sequence, "column": self.column, "actor": self.actor.value}

    @classmethod
    def from_dict(cls, data: dict) -> 'MoveLogEntry':
        return cls(sequence=int(data["sequence"]), column=int(data["column"]), actor=Actor(int(data["actor"])))


class GameSession:
    """
    Server-side state of one game.

    Attributes:
        game_id: Server game id
        player_id: External id of the human player
        board: The authoritative board, owned by this session
        status: Current GameStatus
        started_at: UTC start time
        duration: Set once when the game ends
        moves: Append-only move log
    """

    def __init__(self, game_id: int, player_id: int,
                 started_at: Optional[datetime.datetime] = None,
                 board: Optional[Board] = None):
        self.game_id = game_id
        self.player_id = player_id
        self.board = board if board is not None else Board()
        self.status = GameStatus.ONGOING
        self.started_at = started_at or utc_now()
        self.duration: Optional[datetime.timedelta] = None
        self.moves: List[MoveLogEntry] = []

    @property
    def version(self) -> int:
        """Number of accepted moves; used as the optimistic concurrency token."""
        return len(self.moves)

    def is_over(self) -> bool:
        return self.status.is_game_over()

    def ensure_ongoing(self):
        if self.is_over():
            raise GameAlreadyOverError(self.game_id, self.status)

    def record_move(self, column: int, actor: Actor) -> MoveLogEntry:
        """Append a move log entry with the next sequence number."""
        self.ensure_ongoing()
        entry = MoveLogEntry(sequence=len(self.moves) + 1, column=column, actor=actor)
        self.moves.append(entry)
        debug.trace(f"Game {self.game_id}: move #{entry.sequence} {actor.name} -> column {column}", "session")
        return entry

    def finalize(self, status: GameStatus, now: Optional[datetime.datetime] = None):
        """
        Move the session to a terminal status and fix its duration.

        Raises:
            GameAlreadyOverError: if the session is already terminal
            ValueError: if ``status`` is ONGOING
        """
        if not status.is_game_over():
            raise ValueError("finalize() requires a terminal status")
        self.ensure_ongoing()

        self.status = status
        self.duration = (now or utc_now()) - self.started_at
        debug.info(f"Game {self.game_id} finished: {status.to_wire()} after {len(self.moves)} moves", "session")

    def current_player(self) -> int:
        """Wire value of ``currentPlayer``: 1 ongoing or human win, 2 server win, 0 draw."""
        if self.status == GameStatus.SERVER_WIN:
            return Actor.SERVER.value
        if self.status == GameStatus.DRAW:
            return Actor.EMPTY.value
        return Actor.HUMAN.value

    def duration_seconds(self) -> Optional[float]:
        return None if self.duration is None else self.duration.total_seconds()

    def copy(self) -> 'GameSession':
        """Independent copy with its own board and move log."""
        clone = GameSession(self.game_id, self.player_id, started_at=self.started_at, board=self.board.copy())
        clone.status = self.status
        clone.duration = self.duration
        clone.moves = list(self.moves)
        return clone

    def to_dict(self) -> dict:
        """Persistent representation of the whole session."""
        return {
            "game_id": self.game_id,
            "player_id": self.player_id,
            "board": self.board.snapshot(),
            "status": self.status.to_wire(),
            "started_at": self.started_at.isoformat(),
            "duration_seconds": self.duration_seconds(),
            "moves": [entry.to_dict() for entry in self.moves],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'GameSession':
        session = cls(
            game_id=int(data["game_id"]),
            player_id=int(data["player_id"]),
            started_at=datetime.datetime.fromisoformat(data["started_at"]),
            board=Board.from_matrix(data["board"]),
        )
        session.status = GameStatus.from_wire(data["status"])
        if data.get("duration_seconds") is not None:
            session.duration = datetime.timedelta(seconds=float(data["duration_seconds"]))
        session.moves = [MoveLogEntry.from_dict(m) for m in data.get("moves", [])]
        return session
