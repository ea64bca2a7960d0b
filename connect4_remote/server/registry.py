"""
registry.py - Player directory and game repository for the server

Players are registered, edited and removed by their external id (1..1000).
Games live in memory, one GameSession per game id; when a directory is
given every game is also written to its own JSON file after each change
and reloaded on start-up.
"""

import itertools
import os
import re
import threading
from dataclasses import asdict, dataclass
from typing import Dict, Iterator, List, Optional

from connect4_remote.data.json_store import (ensure_directory, remove_json, safe_read_json,
                                            safe_write_json, update_json)
from connect4_remote.debug import debug
from connect4_remote.errors import GameNotFoundError, InvalidPlayerError, PlayerNotFoundError
from connect4_remote.game.session import GameSession

MIN_PLAYER_ID = 1
MAX_PLAYER_ID = 1000
PHONE_PATTERN = re.compile(r'^\d{9,11}$')
GAME_FILE_PATTERN = re.compile(r'^game_(\d+)\.json$')


@dataclass(frozen=True)
class Player:
    player_id: int
    first_name: str
    phone: str
    country: str

    def validate(self):
        """
        Check the registration rules.

        Raises:
            InvalidPlayerError: describing every rule that is broken
        """
        problems = []
        if isinstance(self.player_id, bool) or not isinstance(self.player_id, int) \
                or not MIN_PLAYER_ID <= self.player_id <= MAX_PLAYER_ID:
            problems.append(f"ID must be an integer between {MIN_PLAYER_ID} and {MAX_PLAYER_ID}")
        name = (self.first_name or "").strip()
        if len(name) < 2:
            problems.append("First name must be at least 2 letters")
        elif len(name) > 50:
            problems.append("First name is too long")
        if not PHONE_PATTERN.match(self.phone or ""):
            problems.append("Phone must contain 9-11 digits")
        if not (self.country or "").strip():
            problems.append("Country is required")
        if problems:
            raise InvalidPlayerError("; ".join(problems))

    def to_json(self) -> dict:
        return {"playerId": self.player_id, "firstName": self.first_name,
                "phone": self.phone, "country": self.country}


class PlayerDirectory:
    """Registered players, stored in ``players.json``."""

    def __init__(self, data_dir: str):
        ensure_directory(data_dir)
        self.players_file = os.path.join(data_dir, 'players.json')

    def register(self, player: Player) -> Player:
        """
        Register a new player.

        Raises:
            InvalidPlayerError: if validation fails or the id is taken
        """
        player.validate()

        def mutate(players: List[dict]):
            if any(p['player_id'] == player.player_id for p in players):
                raise InvalidPlayerError(f"Player ID {player.player_id} already exists")
            players.append(asdict(player))

        update_json(self.players_file, [], mutate)
        debug.info(f"Registered player {player.player_id} ({player.first_name})", "registry")
        return player

    def update(self, player_id: int, player: Player) -> Player:
        """
        Replace the record of ``player_id`` with ``player``, which may carry a new id.

        Raises:
            PlayerNotFoundError: if ``player_id`` is not registered
            InvalidPlayerError: if validation fails or the new id is taken
        """
        player.validate()

        def mutate(players: List[dict]):
            index = next((i for i, p in enumerate(players) if p['player_id'] == player_id), None)
            if index is None:
                raise PlayerNotFoundError(player_id)
            if player.player_id != player_id and any(p['player_id'] == player.player_id for p in players):
                raise InvalidPlayerError(f"Player ID {player.player_id} already exists")
            players[index] = asdict(player)

        update_json(self.players_file, [], mutate)
        debug.info(f"Updated player {player_id}", "registry")
        return player

    def delete(self, player_id: int):
        """
        Raises:
            PlayerNotFoundError: if ``player_id`` is not registered
        """
        def mutate(players: List[dict]):
            remaining = [p for p in players if p['player_id'] != player_id]
            if len(remaining) == len(players):
                raise PlayerNotFoundError(player_id)
            players[:] = remaining

        update_json(self.players_file, [], mutate)
        debug.info(f"Deleted player {player_id}", "registry")

    def get(self, player_id: int) -> Player:
        for data in safe_read_json(self.players_file, default=[]):
            if data['player_id'] == player_id:
                return Player(**data)
        raise PlayerNotFoundError(player_id)

    def all(self) -> List[Player]:
        return [Player(**data) for data in safe_read_json(self.players_file, default=[])]


class GameRepository:
    """
    Owns every GameSession, one per game id.

    Each session has its own lock; callers hold it for the whole of a
    move so that two requests for the same game never interleave. Given a
    data directory, each game is stored in its own ``games/game_<id>.json``
    and only the holder of that game's lock writes it.
    """

    def __init__(self, data_dir: Optional[str] = None):
        self._sessions: Dict[int, GameSession] = {}
        self._locks: Dict[int, threading.Lock] = {}
        self._guard = threading.Lock()
        self.games_dir = os.path.join(data_dir, 'games') if data_dir else None
        if self.games_dir:
            ensure_directory(self.games_dir)
            self._load()
        next_id = max(self._sessions, default=0) + 1
        self._ids = itertools.count(next_id)

    def _game_file(self, game_id: int) -> str:
        return os.path.join(self.games_dir, f"game_{game_id}.json")

    def _load(self):
        for name in sorted(os.listdir(self.games_dir)):
            if not GAME_FILE_PATTERN.match(name):
                continue
            session = GameSession.from_dict(safe_read_json(os.path.join(self.games_dir, name)))
            self._sessions[session.game_id] = session
            self._locks[session.game_id] = threading.Lock()
        debug.debug(f"Loaded {len(self._sessions)} games from {self.games_dir}", "registry")

    def _write(self, session: GameSession):
        if self.games_dir:
            safe_write_json(self._game_file(session.game_id), session.to_dict())

    def create(self, player_id: int) -> GameSession:
        with self._guard:
            game_id = next(self._ids)
        session = GameSession(game_id=game_id, player_id=player_id)
        self._write(session)
        with self._guard:
            self._locks[game_id] = threading.Lock()
            self._sessions[game_id] = session
        return session

    def get(self, game_id: int) -> GameSession:
        try:
            return self._sessions[game_id]
        except KeyError:
            raise GameNotFoundError(game_id) from None

    def lock_for(self, game_id: int) -> threading.Lock:
        try:
            return self._locks[game_id]
        except KeyError:
            raise GameNotFoundError(game_id) from None

    def commit(self, session: GameSession):
        """
        Save ``session`` and then make it the live state of its game.

        The caller holds the game's lock. If saving fails the previous
        state stays live.

        Raises:
            StorageError: if the game file cannot be written
        """
        self._write(session)
        self._sessions[session.game_id] = session

    def delete(self, game_id: int):
        """
        Remove a game and its file.

        Raises:
            GameNotFoundError: if there is no such game
        """
        with self.lock_for(game_id):
            self.get(game_id)
            if self.games_dir:
                remove_json(self._game_file(game_id))
            with self._guard:
                del self._sessions[game_id]
                del self._locks[game_id]
        debug.info(f"Deleted game {game_id}", "registry")

    def for_player(self, player_id: int) -> List[GameSession]:
        return sorted((s for s in self if s.player_id == player_id),
                      key=lambda s: s.started_at, reverse=True)

    def __iter__(self) -> Iterator[GameSession]:
        with self._guard:
            return iter(list(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)
