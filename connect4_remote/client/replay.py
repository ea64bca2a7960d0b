"""
replay.py - Offline replay of a recorded game

Feeds the recorded columns, in turn order, into a fresh board and through
the same drop animations used during live play. A pause of a fixed number
of ticks separates one move from the next. Nothing here touches the network.
"""

from typing import List, Optional

from connect4_remote.client.animation import AnimationQueue, DropAnimation
from connect4_remote.data.recorder import RecordedGame, RecordedMove, RecordingStore
from connect4_remote.debug import debug
from connect4_remote.errors import ColumnFullError, InvalidColumnError, ReplayError
from connect4_remote.game.board import Board
from connect4_remote.utils import empty_grid, render_board_ascii


class ReplayPlayer:
    """
    Plays back one recorded game.

    Args:
        recorder: Store the game was recorded into
        local_id: Local id of the recording
        interval_ticks: Ticks to wait between two moves
    """

    def __init__(self, recorder: RecordingStore, local_id: int, interval_ticks: int = 10):
        if interval_ticks < 0:
            raise ValueError("interval_ticks must be >= 0")

        self.game: RecordedGame = recorder.get_recording(local_id)
        self.moves: List[RecordedMove] = recorder.load_moves(local_id)
        self.interval_ticks = interval_ticks

        self.board = Board()
        self.view = empty_grid()
        self.animations = AnimationQueue(self.view)
        self.position = 0
        self._wait = 0

        debug.info(f"Replaying local game {local_id} (server game {self.game.server_game_id}, "
                   f"{len(self.moves)} moves)", "replay")

    @classmethod
    def for_server_game(cls, recorder: RecordingStore, server_game_id: int,
                        interval_ticks: int = 10) -> 'ReplayPlayer':
        """Look up the recording of a server game id and replay it."""
        local_id = recorder.find_by_server_game_id(server_game_id)
        if local_id is None:
            raise ReplayError(f"No recording for server game {server_game_id}")
        return cls(recorder, local_id, interval_ticks=interval_ticks)

    @property
    def finished(self) -> bool:
        return self.position >= len(self.moves) and not self.animations.busy

    def tick(self) -> bool:
        """
        Advance the replay by one tick.

        Returns:
            True while the replay still has work to do

        Raises:
            ReplayError: a recorded move cannot be played on the replay board
        """
        if self.animations.busy:
            self.animations.tick()
            return not self.finished

        if self.position >= len(self.moves):
            return False

        if self._wait > 0:
            self._wait -= 1
            return True

        self._play(self.moves[self.position])
        self.position += 1
        self._wait = self.interval_ticks
        return not self.finished

    def run_to_completion(self, max_ticks: Optional[int] = None) -> Board:
        """Tick until the whole game has been played back; returns the final board."""
        ticks = 0
        while self.tick():
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
        return self.board

    def render(self) -> str:
        return render_board_ascii(self.view)

    def _play(self, move: RecordedMove):
        try:
            row = self.board.drop(move.column, move.actor)
        except (ColumnFullError, InvalidColumnError) as e:
            raise ReplayError(f"Turn {move.turn_index}: cannot drop into column {move.column}: {e}") from e

        debug.trace(f"Turn {move.turn_index}: {move.actor.name} -> ({row}, {move.column})", "replay")
        self.animations.enqueue(DropAnimation(actor=move.actor, column=move.column, target_row=row))
