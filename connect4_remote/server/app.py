"""
app.py - Flask transport for the game service

Routes (all JSON):
    POST /api/game/start          {playerId}
    POST /api/game/move           {gameId, column, expectedVersion?}
    GET  /api/game/<gameId>
    POST /api/player              {playerId, firstName, phone, country}
    GET  /api/player/<playerId>
    GET  /api/player/<playerId>/games
    PUT  /api/player/<playerId>   {playerId, firstName, phone, country}
    DELETE /api/player/<playerId>
    DELETE /api/game/<gameId>

Successful responses carry ``"ok": true``; errors carry ``"ok": false``
with a message and a machine-readable ``code``.
"""

import random
from typing import Any, Optional

from flask import Flask, jsonify, request

from connect4_remote.config import Settings
from connect4_remote.debug import debug
from connect4_remote.errors import BadRequestError, Connect4Error
from connect4_remote.game.arbiter import MoveArbiter
from connect4_remote.protocol import optional_int, require_int
from connect4_remote.server.registry import GameRepository, Player, PlayerDirectory
from connect4_remote.server.service import GameService


def build_service(settings: Settings) -> GameService:
    """Wire a GameService from settings, persisting under ``settings.server_dir``."""
    rng = random.Random(settings.seed)
    return GameService(
        players=PlayerDirectory(settings.server_dir),
        games=GameRepository(settings.server_dir),
        arbiter=MoveArbiter(rng=rng),
    )


def _body() -> dict:
    body = request.get_json(force=True, silent=True)
    if not isinstance(body, dict):
        raise BadRequestError("JSON object body required")
    return body


def _player(body: dict) -> Player:
    return Player(
        player_id=require_int(body, "playerId"),
        first_name=str(body.get("firstName", "")),
        phone=str(body.get("phone", "")),
        country=str(body.get("country", "")),
    )


def create_app(service: Optional[GameService] = None, settings: Optional[Settings] = None) -> Flask:
    """
    Create the Flask application.

    Args:
        service: Service to expose (built from settings when omitted)
        settings: Settings used to build the service

    Returns:
        A configured Flask app
    """
    if service is None:
        service = build_service(settings or Settings.from_env())

    app = Flask(__name__)
    app.config["GAME_SERVICE"] = service

    @app.errorhandler(Connect4Error)
    def handle_game_error(err: Connect4Error) -> Any:
        debug.debug(f"{request.method} {request.path} rejected: {err.code}: {err}", "server")
        return jsonify({"ok": False, "code": err.code, "error": str(err)}), err.http_status

    @app.post("/api/game/start")
    def api_start() -> Any:
        body = _body()
        state = service.start_game(require_int(body, "playerId"))
        return jsonify({"ok": True, **state})

    @app.post("/api/game/move")
    def api_move() -> Any:
        body = _body()
        state = service.make_move(
            require_int(body, "gameId"),
            require_int(body, "column"),
            expected_version=optional_int(body, "expectedVersion"),
        )
        return jsonify({"ok": True, **state})

    @app.get("/api/game/<int:game_id>")
    def api_get_game(game_id: int) -> Any:
        return jsonify({"ok": True, **service.get_game(game_id)})

    @app.delete("/api/game/<int:game_id>")
    def api_delete_game(game_id: int) -> Any:
        return jsonify({"ok": True, **service.delete_game(game_id)})

    @app.post("/api/player")
    def api_register_player() -> Any:
        return jsonify({"ok": True, **service.register_player(_player(_body()))}), 201

    @app.get("/api/player/<int:player_id>")
    def api_get_player(player_id: int) -> Any:
        return jsonify({"ok": True, **service.get_player(player_id)})

    @app.put("/api/player/<int:player_id>")
    def api_update_player(player_id: int) -> Any:
        body = _body()
        body.setdefault("playerId", player_id)
        return jsonify({"ok": True, **service.update_player(player_id, _player(body))})

    @app.delete("/api/player/<int:player_id>")
    def api_delete_player(player_id: int) -> Any:
        return jsonify({"ok": True, **service.delete_player(player_id)})

    @app.get("/api/player/<int:player_id>/games")
    def api_player_games(player_id: int) -> Any:
        return jsonify({"ok": True, "games": service.player_games(player_id)})

    return app
