import tempfile
import unittest

from connect4_remote.config import Settings
from connect4_remote.server.app import build_service, create_app
from connect4_remote.utils import ROWS
from tests.fakes import FixedColumnRng, make_service

SNAPSHOT_KEYS = {"ok", "gameId", "board", "currentPlayer", "status", "version"}


class TestFlaskAPI(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.service = make_service(self._tmp.name, rng=FixedColumnRng(6))
        self.client = create_app(service=self.service).test_client()

    def tearDown(self):
        self._tmp.cleanup()

    def _start(self):
        r = self.client.post("/api/game/start", json={"playerId": 7})
        self.assertEqual(r.status_code, 200)
        return r.get_json()

    def _move(self, game_id, column, **extra):
        return self.client.post("/api/game/move", json={"gameId": game_id, "column": column, **extra})

    def test_given_registered_player_when_starting_then_empty_board_snapshot(self):
        data = self._start()
        self.assertEqual(set(data), SNAPSHOT_KEYS)
        self.assertTrue(data["ok"])
        self.assertEqual(data["status"], "ongoing")
        self.assertEqual(data["currentPlayer"], 1)
        self.assertEqual(data["version"], 0)
        self.assertEqual(data["board"], [[0] * 7 for _ in range(6)])

    def test_given_unknown_player_when_starting_then_404(self):
        r = self.client.post("/api/game/start", json={"playerId": 99})
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.get_json(), {"ok": False, "code": "player_not_found", "error": "Player 99 not found"})

    def test_given_move_when_posted_then_only_board_and_status_come_back(self):
        game_id = self._start()["gameId"]
        r = self._move(game_id, 3, expectedVersion=0)
        self.assertEqual(r.status_code, 200)
        data = r.get_json()
        self.assertEqual(set(data), SNAPSHOT_KEYS)
        self.assertEqual(data["version"], 2)
        self.assertEqual(data["board"][ROWS - 1][3], 1)
        self.assertEqual(data["board"][ROWS - 1][6], 2)

        r = self.client.get(f"/api/game/{game_id}")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.get_json(), data)

    def test_given_bad_move_requests_when_posted_then_400_codes(self):
        game_id = self._start()["gameId"]
        cases = [
            ({"gameId": game_id, "column": 7}, "invalid_column"),
            ({"gameId": game_id, "column": -1}, "invalid_column"),
            ({"gameId": game_id, "column": "3"}, "bad_request"),
            ({"gameId": game_id, "column": True}, "bad_request"),
            ({"gameId": game_id}, "bad_request"),
            ({"column": 3}, "bad_request"),
            ({"gameId": game_id, "column": 3, "expectedVersion": "0"}, "bad_request"),
        ]
        for body, code in cases:
            r = self.client.post("/api/game/move", json=body)
            self.assertEqual(r.status_code, 400, body)
            self.assertEqual(r.get_json()["code"], code, body)

        r = self.client.post("/api/game/move", data="not json", content_type="application/json")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(self.client.get(f"/api/game/{game_id}").get_json()["version"], 0)

    def test_given_unknown_game_when_moving_or_reading_then_404(self):
        self.assertEqual(self._move(42, 3).status_code, 404)
        r = self.client.get("/api/game/42")
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.get_json()["code"], "game_not_found")

    def test_given_stale_version_when_moving_then_409_version_conflict(self):
        game_id = self._start()["gameId"]
        self.assertEqual(self._move(game_id, 3, expectedVersion=0).status_code, 200)
        r = self._move(game_id, 3, expectedVersion=0)
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.get_json()["code"], "version_conflict")
        self.assertEqual(self.client.get(f"/api/game/{game_id}").get_json()["version"], 2)

    def test_given_won_game_when_moving_again_then_409_game_already_over(self):
        game_id = self._start()["gameId"]
        for _ in range(4):
            data = self._move(game_id, 3).get_json()
        self.assertEqual(data["status"], "player_won")
        self.assertEqual(data["currentPlayer"], 1)

        r = self._move(game_id, 0)
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.get_json()["code"], "game_already_over")
        self.assertEqual(self.client.get(f"/api/game/{game_id}").get_json()["status"], "player_won")

    def test_given_won_game_when_stale_version_retried_then_409_version_conflict(self):
        game_id = self._start()["gameId"]
        for version in range(0, 6, 2):
            self._move(game_id, 3, expectedVersion=version)
        self.assertEqual(self._move(game_id, 3, expectedVersion=6).get_json()["status"], "player_won")

        r = self._move(game_id, 3, expectedVersion=6)
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.get_json()["code"], "version_conflict")

        r = self._move(game_id, 3, expectedVersion=7)
        self.assertEqual(r.get_json()["code"], "game_already_over")

    def test_given_player_when_edited_then_fields_change_and_id_locked_once_games_exist(self):
        body = {"firstName": "Dina", "phone": "0529999999", "country": "Cyprus"}
        r = self.client.put("/api/player/7", json=body)
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.get_json()["firstName"], "Dina")
        self.assertEqual(self.client.get("/api/player/7").get_json()["country"], "Cyprus")

        self.assertEqual(self.client.put("/api/player/7", json={**body, "phone": "12"}).get_json()["code"],
                         "invalid_player")
        self.assertEqual(self.client.put("/api/player/70", json=body).status_code, 404)

        self._start()
        r = self.client.put("/api/player/7", json={**body, "playerId": 8})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.get_json()["code"], "invalid_player")

    def test_given_player_without_games_when_id_changed_then_found_under_new_id(self):
        r = self.client.put("/api/player/7", json={"playerId": 8, "firstName": "Dana",
                                                    "phone": "0501234567", "country": "Israel"})
        self.assertEqual(r.get_json()["playerId"], 8)
        self.assertEqual(self.client.get("/api/player/7").status_code, 404)
        self.assertEqual(self.client.get("/api/player/8").status_code, 200)

    def test_given_game_when_deleted_then_gone_from_reads_and_history(self):
        game_id = self._start()["gameId"]
        r = self.client.delete(f"/api/game/{game_id}")
        self.assertEqual(r.get_json(), {"ok": True, "gameId": game_id})

        self.assertEqual(self.client.get(f"/api/game/{game_id}").status_code, 404)
        self.assertEqual(self._move(game_id, 3).status_code, 404)
        self.assertEqual(self.client.get("/api/player/7/games").get_json()["games"], [])
        self.assertEqual(self.client.delete(f"/api/game/{game_id}").status_code, 404)

    def test_given_player_with_games_when_deleted_then_games_removed_too(self):
        first = self._start()["gameId"]
        second = self._start()["gameId"]

        r = self.client.delete("/api/player/7")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(sorted(r.get_json()["deletedGames"]), [first, second])
        self.assertEqual(self.client.get("/api/player/7").status_code, 404)
        self.assertEqual(self.client.get(f"/api/game/{first}").status_code, 404)
        self.assertEqual(self.client.delete("/api/player/7").status_code, 404)

    def test_given_full_column_when_moving_then_400_column_full(self):
        self.service.arbiter.rng = FixedColumnRng(0)
        game_id = self._start()["gameId"]
        for _ in range(ROWS // 2):
            self.assertEqual(self._move(game_id, 0).status_code, 200)
        r = self._move(game_id, 0)
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.get_json()["code"], "column_full")

    def test_given_player_routes_when_used_then_register_lookup_and_history(self):
        r = self.client.post("/api/player", json={"playerId": 8, "firstName": "Eli",
                                                   "phone": "123456789", "country": "Israel"})
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.get_json()["playerId"], 8)

        r = self.client.post("/api/player", json={"playerId": 8, "firstName": "Eli",
                                                   "phone": "123456789", "country": "Israel"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.get_json()["code"], "invalid_player")

        r = self.client.post("/api/player", json={"playerId": 9, "firstName": "E",
                                                   "phone": "12ab", "country": ""})
        self.assertEqual(r.status_code, 400)

        self.assertEqual(self.client.get("/api/player/8").get_json()["firstName"], "Eli")
        self.assertEqual(self.client.get("/api/player/500").status_code, 404)

        game_id = self._start()["gameId"]
        self._move(game_id, 2)
        games = self.client.get("/api/player/7/games").get_json()["games"]
        self.assertEqual(len(games), 1)
        self.assertEqual(games[0]["gameId"], game_id)
        self.assertEqual(games[0]["moves"], [2, 6])
        self.assertIsNone(games[0]["durationSeconds"])


class TestBuildService(unittest.TestCase):
    def test_given_settings_when_building_then_games_persist_across_restarts(self):
        with tempfile.TemporaryDirectory() as tmp:
            settings = Settings(data_dir=tmp, seed=3)
            app = create_app(settings=settings)
            client = app.test_client()
            client.post("/api/player", json={"playerId": 5, "firstName": "Noa",
                                             "phone": "0521234567", "country": "Israel"})
            game_id = client.post("/api/game/start", json={"playerId": 5}).get_json()["gameId"]
            board = client.post("/api/game/move", json={"gameId": game_id, "column": 1}).get_json()["board"]

            restarted = build_service(settings)
            self.assertEqual(restarted.get_game(game_id)["board"], board)
            self.assertEqual(restarted.get_player(5)["firstName"], "Noa")


if __name__ == "__main__":
    unittest.main()
