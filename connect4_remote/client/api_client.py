"""
api_client.py - HTTP client for the game server

Thin wrapper around a ``requests`` session: connection pooling, retries on
gateway errors only, JSON decoding, and translation of failures into
TransportError (network trouble, retryable) or RemoteError (the server
rejected the request, carrying its error code).
"""

from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from connect4_remote.debug import debug
from connect4_remote.errors import ConsistencyError, RemoteError, TransportError
from connect4_remote.protocol import GameSnapshot


class GameApiClient:
    """
    Client for the /api/game and /api/player routes.

    Args:
        base_url: Server root, e.g. http://127.0.0.1:5000
        request_timeout_s: Per-request timeout in seconds
        session: Optional pre-built requests.Session (used by tests)
    """

    def __init__(self, base_url: str, request_timeout_s: float = 10.0,
                 session: Optional[requests.Session] = None):
        self._base = base_url.rstrip("/")
        self._timeout = float(request_timeout_s)
        self._http = session if session is not None else self._create_session()

    def _create_session(self) -> requests.Session:
        session = requests.Session()

        # Only gateway errors are retried: a POST that reached the
        # application may already have been applied.
        retry_strategy = Retry(
            total=3,
            backoff_factor=0.3,
            status_forcelist=[502, 503, 504],
            allowed_methods=["GET", "POST"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy, pool_connections=4, pool_maxsize=4)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self._base}{path}"
        try:
            response = self._http.request(method, url, json=body, timeout=self._timeout)
        except requests.RequestException as e:
            debug.warning(f"{method} {path} failed: {e}", "client")
            raise TransportError(f"Cannot reach server at {self._base}: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            raise TransportError(f"{method} {path}: server sent a non-JSON response",
                                 status_code=response.status_code) from None

        if not isinstance(payload, dict):
            raise TransportError(f"{method} {path}: unexpected response body", status_code=response.status_code)

        if response.status_code >= 400 or not payload.get("ok", False):
            code = payload.get("code", "error")
            message = payload.get("error", f"HTTP {response.status_code}")
            debug.debug(f"{method} {path} rejected ({response.status_code}): {code}: {message}", "client")
            raise RemoteError(code, message, http_status=response.status_code)

        return payload

    @staticmethod
    def _snapshot(payload: Dict[str, Any]) -> GameSnapshot:
        try:
            return GameSnapshot.from_json(payload)
        except ValueError as e:
            raise ConsistencyError(f"Malformed game snapshot from server: {e}") from e

    def start_game(self, player_id: int) -> GameSnapshot:
        payload = self._request("POST", "/api/game/start", {"playerId": player_id})
        return self._snapshot(payload)

    def make_move(self, game_id: int, column: int, expected_version: Optional[int] = None) -> GameSnapshot:
        body: Dict[str, Any] = {"gameId": game_id, "column": column}
        if expected_version is not None:
            body["expectedVersion"] = expected_version
        payload = self._request("POST", "/api/game/move", body)
        return self._snapshot(payload)

    def get_game(self, game_id: int) -> GameSnapshot:
        return self._snapshot(self._request("GET", f"/api/game/{game_id}"))

    def get_player(self, player_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/api/player/{player_id}")

    def register_player(self, player_id: int, first_name: str, phone: str, country: str) -> Dict[str, Any]:
        return self._request("POST", "/api/player", {
            "playerId": player_id,
            "firstName": first_name,
            "phone": phone,
            "country": country,
        })

    def close(self):
        self._http.close()
