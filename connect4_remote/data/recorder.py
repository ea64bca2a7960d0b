"""
recorder.py - Client-side recording store for offline replay

The client keeps its own record of every game it has observed: one entry
per server game id in ``recorded_games.json`` and one move file per game
(``game_<local_id>_moves.json``). Moves are whatever the client inferred by
diffing snapshots, not anything the server sent.
"""

import datetime
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from connect4_remote.data.json_store import ensure_directory, safe_read_json, update_json
from connect4_remote.debug import debug
from connect4_remote.errors import RecordingConsistencyError
from connect4_remote.utils import COLS, Actor, GameStatus

GAMES_FILE_NAME = 'recorded_games.json'


@dataclass(frozen=True)
class RecordedGame:
    """Metadata of one locally recorded game."""
    local_id: int
    server_game_id: int
    player_id: int
    player_name: Optional[str]
    started_at: str
    duration_seconds: Optional[int]
    result: GameStatus

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RecordedGame':
        return cls(
            local_id=int(data['local_id']),
            server_game_id=int(data['server_game_id']),
            player_id=int(data['player_id']),
            player_name=data.get('player_name'),
            started_at=data['started_at'],
            duration_seconds=data.get('duration_seconds'),
            result=GameStatus.from_wire(data.get('result', GameStatus.ONGOING.to_wire())),
        )


@dataclass(frozen=True)
class RecordedMove:
    turn_index: int
    column: int
    actor: Actor

    def to_dict(self) -> Dict[str, int]:
        return {'turn_index': self.turn_index, 'column': self.column, 'actor': self.actor.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RecordedMove':
        return cls(turn_index=int(data['turn_index']), column=int(data['column']), actor=Actor(int(data['actor'])))


class RecordingStore:
    """
    Append-only per-game move log keyed by server game id.

    Args:
        data_dir: Directory holding the recording files
    """

    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        self.games_file = os.path.join(data_dir, GAMES_FILE_NAME)
        ensure_directory(data_dir)

    def _moves_file(self, local_id: int) -> str:
        return os.path.join(self.data_dir, f"game_{local_id}_moves.json")

    def _games(self) -> List[Dict[str, Any]]:
        return safe_read_json(self.games_file, default=[])

    def ensure_recording(self, server_game_id: int, player_id: int,
                         player_name: Optional[str], started_at: datetime.datetime) -> int:
        """
        Return the local id recorded for ``server_game_id``, creating it if needed.

        Calling this again for the same server game id returns the same
        local id and creates nothing.
        """
        def mutate(games: List[Dict[str, Any]]) -> int:
            for game in games:
                if game['server_game_id'] == server_game_id:
                    return game['local_id']

            local_id = max((game['local_id'] for game in games), default=0) + 1
            games.append({
                'local_id': local_id,
                'server_game_id': server_game_id,
                'player_id': player_id,
                'player_name': player_name,
                'started_at': started_at.isoformat(),
                'duration_seconds': None,
                'result': GameStatus.ONGOING.to_wire(),
            })
            debug.info(f"Recording server game {server_game_id} as local game {local_id}", "recorder")
            return local_id

        return update_json(self.games_file, [], mutate)

    def append_move(self, local_id: int, turn_index: int, column: int, actor: Actor):
        """
        Append one move to a recorded game.

        Raises:
            RecordingConsistencyError: on an unknown game, a duplicate turn
                index, or an out-of-range column or actor
        """
        self.get_recording(local_id)
        if turn_index < 0:
            raise RecordingConsistencyError(f"Turn index must be >= 0, got {turn_index}")
        if not 0 <= column < COLS:
            raise RecordingConsistencyError(f"Recorded column {column} is out of range")
        if actor == Actor.EMPTY:
            raise RecordingConsistencyError("Recorded moves need a HUMAN or SERVER actor")

        move = RecordedMove(turn_index=turn_index, column=column, actor=actor)

        def mutate(moves: List[Dict[str, Any]]):
            if any(m['turn_index'] == turn_index for m in moves):
                raise RecordingConsistencyError(
                    f"Local game {local_id} already has a move at turn {turn_index}")
            moves.append(move.to_dict())

        update_json(self._moves_file(local_id), [], mutate)
        debug.trace(f"Local game {local_id}: turn {turn_index} {actor.name} -> column {column}", "recorder")

    def finish(self, local_id: int, result: GameStatus, duration_seconds: int):
        """
        Store the final result and duration of a recorded game.

        The first call wins. Repeating it with the same values is a no-op;
        repeating it with different values raises.

        Raises:
            RecordingConsistencyError: unknown game, non-terminal result, or
                a second call that disagrees with the first
        """
        if not result.is_game_over():
            raise RecordingConsistencyError("finish() requires a terminal result")
        duration_seconds = int(duration_seconds)

        def mutate(games: List[Dict[str, Any]]):
            for game in games:
                if game['local_id'] != local_id:
                    continue
                previous = GameStatus.from_wire(game['result'])
                if previous.is_game_over():
                    if previous == result and game['duration_seconds'] == duration_seconds:
                        debug.debug(f"Local game {local_id} already finished, ignoring repeat", "recorder")
                        return
                    raise RecordingConsistencyError(
                        f"Local game {local_id} already finished as {previous.to_wire()} "
                        f"({game['duration_seconds']}s), refusing {result.to_wire()} ({duration_seconds}s)")
                game['result'] = result.to_wire()
                game['duration_seconds'] = duration_seconds
                debug.info(f"Local game {local_id} finished: {result.to_wire()}", "recorder")
                return
            raise RecordingConsistencyError(f"Unknown local game {local_id}")

        update_json(self.games_file, [], mutate)

    def load_moves(self, local_id: int) -> List[RecordedMove]:
        """All recorded moves of a game, ordered by turn index."""
        moves = [RecordedMove.from_dict(m) for m in safe_read_json(self._moves_file(local_id), default=[])]
        return sorted(moves, key=lambda m: m.turn_index)

    def next_turn_index(self, local_id: int) -> int:
        moves = self.load_moves(local_id)
        return moves[-1].turn_index + 1 if moves else 0

    def find_by_server_game_id(self, server_game_id: int) -> Optional[int]:
        for game in self._games():
            if game['server_game_id'] == server_game_id:
                return game['local_id']
        return None

    def get_recording(self, local_id: int) -> RecordedGame:
        for game in self._games():
            if game['local_id'] == local_id:
                return RecordedGame.from_dict(game)
        raise RecordingConsistencyError(f"Unknown local game {local_id}")

    def list_recordings(self, player_id: Optional[int] = None) -> List[RecordedGame]:
        """
        List recorded games, most recent first.

        Args:
            player_id: Only return games of this external player id
        """
        games = [RecordedGame.from_dict(g) for g in self._games()
                 if player_id is None or g['player_id'] == player_id]
        return sorted(games, key=lambda g: (g.started_at, g.local_id), reverse=True)
