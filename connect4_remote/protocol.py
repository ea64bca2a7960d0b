"""
protocol.py - JSON payload contracts shared by server and client

Boards travel as row-major 6x7 matrices of 0/1/2 with row 0 on top; game
status travels as "ongoing" / "player_won" / "server_won" / "draw". Nothing
else about a move is ever put on the wire.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from connect4_remote.errors import BadRequestError
from connect4_remote.game.board import Board
from connect4_remote.game.session import GameSession
from connect4_remote.utils import GameStatus


def board_to_json(board: Board) -> List[List[int]]:
    return board.snapshot()


def board_from_json(matrix: Any) -> Board:
    """Decode and validate a wire board (raises ValueError on a malformed matrix)."""
    if not isinstance(matrix, list):
        raise ValueError("board must be a list of rows")
    return Board.from_matrix(matrix)


def session_to_json(session: GameSession) -> Dict[str, Any]:
    """Snapshot payload returned by StartGame, MakeMove and GetGame."""
    return {
        "gameId": session.game_id,
        "board": board_to_json(session.board),
        "currentPlayer": session.current_player(),
        "status": session.status.to_wire(),
        "version": session.version,
    }


def require_int(body: Dict[str, Any], key: str) -> int:
    """Read an integer field from a request body, rejecting bools, floats and strings."""
    value = body.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise BadRequestError(f"'{key}' must be an integer")
    return value


def optional_int(body: Dict[str, Any], key: str) -> Optional[int]:
    if body.get(key) is None:
        return None
    return require_int(body, key)


@dataclass(frozen=True)
class GameSnapshot:
    """Client-side view of one snapshot payload."""
    game_id: int
    board: Board
    current_player: int
    status: GameStatus
    version: Optional[int] = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> 'GameSnapshot':
        """
        Parse a snapshot payload.

        Raises:
            ValueError: if the payload is missing fields or carries a malformed board
        """
        try:
            return cls(
                game_id=int(payload["gameId"]),
                board=board_from_json(payload["board"]),
                current_player=int(payload.get("currentPlayer", 0)),
                status=GameStatus.from_wire(payload["status"]),
                version=None if payload.get("version") is None else int(payload["version"]),
            )
        except KeyError as e:
            raise ValueError(f"Snapshot payload is missing {e}") from None
        except TypeError as e:
            raise ValueError(f"Snapshot payload has a malformed field: {e}") from None
