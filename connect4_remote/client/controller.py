"""
controller.py - Client-side game controller

ClientGame mirrors one server game. It sends the human's column, keeps the
board it held before the request, diffs it against the board that comes
back, records the inferred drops, and animates them into its own view
grid. While a request is awaited or a disc is still falling, new input is
refused.
"""

import datetime
from typing import Callable, List, Optional

from connect4_remote.client.animation import AnimationQueue, DropAnimation
from connect4_remote.client.api_client import GameApiClient
from connect4_remote.client.reconciler import InferredDrop, diff_snapshots
from connect4_remote.data.recorder import RecordingStore
from connect4_remote.debug import debug
from connect4_remote.errors import (ClientBusyError, ColumnFullError, GameAlreadyOverError,
                                    InvalidColumnError, ReconciliationError, RemoteError,
                                    VersionConflictError)
from connect4_remote.game.board import Board
from connect4_remote.game.session import utc_now
from connect4_remote.protocol import GameSnapshot
from connect4_remote.utils import Actor, GameStatus, empty_grid, is_valid_column, render_board_ascii


class ClientGame:
    """
    One game as seen by the client.

    Args:
        api: Client for the game server
        recorder: Local recording store
        player_id: External id of the human player
        player_name: Display name stored with the recording
        clock: Returns the current UTC time
    """

    def __init__(self, api: GameApiClient, recorder: RecordingStore, player_id: int,
                 player_name: Optional[str] = None,
                 clock: Callable[[], datetime.datetime] = utc_now):
        self.api = api
        self.recorder = recorder
        self.player_id = player_id
        self.player_name = player_name
        self.clock = clock

        self.game_id: Optional[int] = None
        self.local_id: Optional[int] = None
        self.board = Board()  # last authoritative snapshot
        self.view = empty_grid()  # what is on screen, animations draw here
        self.animations = AnimationQueue(self.view)
        self.status = GameStatus.ONGOING
        self.version: Optional[int] = None
        self.started_at: Optional[datetime.datetime] = None
        self.next_turn = 0
        self.awaiting_response = False

    @property
    def busy(self) -> bool:
        """True while a request is in flight or a disc is still falling."""
        return self.awaiting_response or self.animations.busy

    def start(self) -> GameSnapshot:
        """Start a new game on the server and open its local recording."""
        self._ensure_idle()
        if self.player_name is None:
            self.player_name = self._await(lambda: self.api.get_player(self.player_id)).get("firstName")

        snapshot = self._await(lambda: self.api.start_game(self.player_id))
        self.started_at = self.clock()
        self._adopt(snapshot)
        self.next_turn = 0
        debug.info(f"Started game {self.game_id} (local {self.local_id})", "client")
        return snapshot

    def resume(self, game_id: int) -> GameSnapshot:
        """
        Pick up an existing game, e.g. after the client was restarted.

        The recording keeps whatever turns were already stored; the board is
        taken from the server as-is.
        """
        self._ensure_idle()
        snapshot = self._await(lambda: self.api.get_game(game_id))
        self.started_at = self.clock()
        self._adopt(snapshot)
        self.next_turn = self.recorder.next_turn_index(self.local_id)
        recorded = self.recorder.load_moves(self.local_id)
        if len(recorded) != snapshot.board.disc_count():
            debug.warning(f"Local game {self.local_id} has {len(recorded)} recorded moves but the board "
                          f"holds {snapshot.board.disc_count()} discs; replay will be incomplete", "client")
        if self.status.is_game_over() and not self.recorder.get_recording(self.local_id).result.is_game_over():
            self._finish_recording()
        return snapshot

    def submit_move(self, column: int) -> List[InferredDrop]:
        """
        Send the human's column and reconcile the board that comes back.

        If the server says our version is stale or the game is already over,
        an earlier response was lost after the server applied it; the game
        is re-read and whatever happened since our snapshot is accepted.

        Returns:
            The inferred drops, human first

        Raises:
            ClientBusyError: a request or an animation is still in flight
            GameAlreadyOverError: the game has ended
            InvalidColumnError / ColumnFullError: rejected locally, nothing sent
            TransportError / RemoteError: the request failed; nothing changed
            ReconciliationError: the returned board cannot follow from ours
        """
        self._ensure_idle()
        if self.game_id is None:
            raise RuntimeError("No game in progress; call start() or resume() first")
        if self.status.is_game_over():
            raise GameAlreadyOverError(self.game_id, self.status)
        if not is_valid_column(column):
            raise InvalidColumnError(column)
        if column not in self.board.legal_columns():
            raise ColumnFullError(column)

        before = self.board.copy()
        try:
            snapshot = self._await(lambda: self.api.make_move(self.game_id, column, expected_version=self.version))
        except RemoteError as e:
            if e.code not in (VersionConflictError.code, GameAlreadyOverError.code):
                raise
            debug.warning(f"Game {self.game_id}: {e.code} at version {self.version}, re-reading the game", "client")
            return self.resync()

        drops = diff_snapshots(before, snapshot.board)
        if not drops or drops[0].actor != Actor.HUMAN or drops[0].column != column:
            raise ReconciliationError(f"Server board does not contain the human drop into column {column}")

        self._accept(snapshot, drops)
        return drops

    def resync(self) -> List[InferredDrop]:
        """
        Re-read the game after a lost response.

        Whatever the server applied since our last snapshot is inferred and
        recorded exactly like a normal move response.
        """
        self._ensure_idle()
        snapshot = self._await(lambda: self.api.get_game(self.game_id))
        drops = diff_snapshots(self.board, snapshot.board)
        self._accept(snapshot, drops)
        return drops

    def tick(self) -> bool:
        """Advance animations by one step; True while any are still running."""
        return self.animations.tick()

    def render(self) -> str:
        return render_board_ascii(self.view)

    def _ensure_idle(self):
        if self.busy:
            raise ClientBusyError("Wait for the current move to finish")

    def _await(self, call):
        self.awaiting_response = True
        try:
            return call()
        finally:
            self.awaiting_response = False

    def _adopt(self, snapshot: GameSnapshot):
        """Take a snapshot as-is (start/resume), without animating."""
        self.game_id = snapshot.game_id
        self.board = snapshot.board.copy()
        self.view[:] = self.board.grid
        self.status = snapshot.status
        self.version = snapshot.version
        self.local_id = self.recorder.ensure_recording(
            snapshot.game_id, self.player_id, self.player_name, self.started_at or self.clock())

    def _accept(self, snapshot: GameSnapshot, drops: List[InferredDrop]):
        for drop in drops:
            self.recorder.append_move(self.local_id, self.next_turn, drop.column, drop.actor)
            self.next_turn += 1
            self.animations.enqueue(DropAnimation(actor=drop.actor, column=drop.column, target_row=drop.row))

        self.board = snapshot.board.copy()
        self.status = snapshot.status
        self.version = snapshot.version
        self.animations.when_idle(self._snap_view)

        debug.debug(f"Game {self.game_id}: inferred {[(d.actor.name, d.column) for d in drops]}, "
                    f"status {self.status.to_wire()}", "client")
        if self.status.is_game_over():
            self._finish_recording()

    def _snap_view(self):
        self.view[:] = self.board.grid

    def _finish_recording(self):
        started = self.started_at or self.clock()
        duration = max(0, int((self.clock() - started).total_seconds()))
        self.recorder.finish(self.local_id, self.status, duration)
