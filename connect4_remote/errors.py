"""
errors.py - Error taxonomy for remote Connect Four

Input and state errors are recoverable rejections that leave the game
untouched. Consistency errors mean the client and server disagree and the
current reconciliation must be aborted. Transport errors are local to the
client and retryable.
"""

from typing import Optional


class Connect4Error(Exception):
    """Base class for every error raised by this package."""

    code = "error"
    http_status = 500


# --- Input errors ---

class InvalidMoveError(Connect4Error):
    code = "invalid_move"
    http_status = 400


class InvalidColumnError(InvalidMoveError):
    code = "invalid_column"

    def __init__(self, column):
        super().__init__(f"Column {column!r} is out of range")
        self.column = column


class ColumnFullError(InvalidMoveError):
    code = "column_full"

    def __init__(self, column: int):
        super().__init__(f"Column {column} is full")
        self.column = column


class GameNotFoundError(Connect4Error):
    code = "game_not_found"
    http_status = 404

    def __init__(self, game_id):
        super().__init__(f"Game {game_id} not found")
        self.game_id = game_id


class PlayerNotFoundError(Connect4Error):
    code = "player_not_found"
    http_status = 404

    def __init__(self, player_id):
        super().__init__(f"Player {player_id} not found")
        self.player_id = player_id


class InvalidPlayerError(Connect4Error):
    code = "invalid_player"
    http_status = 400


class BadRequestError(Connect4Error):
    code = "bad_request"
    http_status = 400


# --- State errors ---

class GameAlreadyOverError(Connect4Error):
    code = "game_already_over"
    http_status = 409

    def __init__(self, game_id, status=None):
        detail = f" ({status.to_wire()})" if status is not None else ""
        super().__init__(f"Game {game_id} is already over{detail}")
        self.game_id = game_id
        self.status = status


class VersionConflictError(Connect4Error):
    code = "version_conflict"
    http_status = 409

    def __init__(self, game_id, expected: int, actual: int):
        super().__init__(f"Game {game_id} is at version {actual}, request expected {expected}")
        self.game_id = game_id
        self.expected = expected
        self.actual = actual


class ClientBusyError(Connect4Error):
    code = "client_busy"


# --- Consistency errors ---

class ConsistencyError(Connect4Error):
    code = "consistency_error"


class ReconciliationError(ConsistencyError):
    pass


class RecordingConsistencyError(ConsistencyError):
    pass


class ReplayError(ConsistencyError):
    pass


# --- Transport and storage ---

class TransportError(Connect4Error):
    code = "transport_error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class StorageError(Connect4Error):
    code = "storage_error"


class RemoteError(Connect4Error):
    """An error reported by the server, rebuilt on the client from its wire code."""

    def __init__(self, code: str, message: str, http_status: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.http_status = http_status
