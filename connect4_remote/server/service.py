"""
service.py - Transport-agnostic game service

Implements the three game operations (StartGame, MakeMove, GetGame) plus the
player directory operations and game deletion on top of the player directory, the game repository and the
move arbiter. Every method returns plain JSON-ready dictionaries; errors are
raised as Connect4Error subclasses for the transport to map.
"""

from typing import Any, Dict, List, Optional

from connect4_remote.debug import debug
from connect4_remote.errors import ColumnFullError, InvalidPlayerError, VersionConflictError
from connect4_remote.game.arbiter import MoveArbiter
from connect4_remote.protocol import session_to_json
from connect4_remote.server.registry import GameRepository, Player, PlayerDirectory


class GameService:
    """
    The server's side of the protocol.

    Args:
        players: Registered players
        games: Repository owning the game sessions
        arbiter: Applies human moves and picks the server replies
    """

    def __init__(self, players: PlayerDirectory, games: GameRepository, arbiter: MoveArbiter):
        self.players = players
        self.games = games
        self.arbiter = arbiter

    def start_game(self, player_id: int) -> Dict[str, Any]:
        """
        Start a new game on an empty board.

        Raises:
            PlayerNotFoundError: if ``player_id`` is not registered
        """
        self.players.get(player_id)
        session = self.games.create(player_id)
        debug.info(f"Player {player_id} started game {session.game_id}", "service")
        return session_to_json(session)

    def make_move(self, game_id: int, column: int, expected_version: Optional[int] = None) -> Dict[str, Any]:
        """
        Apply a human move and the server's reply.

        Args:
            game_id: Server game id
            column: Human's column
            expected_version: Version the client last saw; a mismatch means
                the move was already submitted or the client is stale

        Raises:
            GameNotFoundError, InvalidColumnError, ColumnFullError,
            GameAlreadyOverError, VersionConflictError
            StorageError: the move could not be saved; the game is unchanged
        """
        with self.games.lock_for(game_id):
            current = self.games.get(game_id)
            if expected_version is not None and expected_version != current.version:
                raise VersionConflictError(game_id, expected_version, current.version)
            current.ensure_ongoing()

            # Work on a copy; the live session only changes once it is on disk
            session = current.copy()
            try:
                outcome = self.arbiter.apply_human_move(session, column)
            except ColumnFullError:
                debug.info(f"Game {game_id}: rejected move into full column {column}", "service")
                raise

            self.games.commit(session)
            debug.debug(f"Game {game_id} is now {outcome.status.to_wire()} at version {session.version}",
                        "service")
            return session_to_json(session)

    def get_game(self, game_id: int) -> Dict[str, Any]:
        """Read-only snapshot of a game, terminal or not."""
        return session_to_json(self.games.get(game_id))

    def get_player(self, player_id: int) -> Dict[str, Any]:
        return self.players.get(player_id).to_json()

    def register_player(self, player: Player) -> Dict[str, Any]:
        return self.players.register(player).to_json()

    def update_player(self, player_id: int, player: Player) -> Dict[str, Any]:
        """
        Edit a player's record. The id itself may only change while the
        player has no games.

        Raises:
            PlayerNotFoundError, InvalidPlayerError
        """
        self.players.get(player_id)
        if player.player_id != player_id and self.games.for_player(player_id):
            raise InvalidPlayerError(f"Player {player_id} already has games; the ID cannot change")
        return self.players.update(player_id, player).to_json()

    def delete_player(self, player_id: int) -> Dict[str, Any]:
        """Delete a player together with every game they started."""
        self.players.get(player_id)
        game_ids = [session.game_id for session in self.games.for_player(player_id)]
        for game_id in game_ids:
            self.games.delete(game_id)
        self.players.delete(player_id)
        return {"playerId": player_id, "deletedGames": game_ids}

    def delete_game(self, game_id: int) -> Dict[str, Any]:
        self.games.delete(game_id)
        return {"gameId": game_id}

    def player_games(self, player_id: int) -> List[Dict[str, Any]]:
        """Summary of every game a player has started, most recent first."""
        self.players.get(player_id)
        return [{
            "gameId": session.game_id,
            "startedAt": session.started_at.isoformat(),
            "durationSeconds": session.duration_seconds(),
            "status": session.status.to_wire(),
            "moves": [entry.column for entry in session.moves],
        } for session in self.games.for_player(player_id)]
