import contextlib
import datetime
import io
import tempfile
import unittest

from connect4_remote.client.controller import ClientGame
from connect4_remote.config import Settings
from connect4_remote.data.recorder import RecordingStore
from connect4_remote.interfaces.cli import SimpleCLI, build_parser, main
from connect4_remote.utils import Actor, GameStatus
from tests.fakes import FixedColumnRng, InProcessApi, make_service

T0 = datetime.datetime(2024, 5, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)


class TestCLI(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.settings = Settings(data_dir=self._tmp.name, tick_seconds=0, replay_interval_ticks=0)
        self.store = RecordingStore(self.settings.client_dir)

    def tearDown(self):
        self._tmp.cleanup()

    def _run(self, fn, *args):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = fn(*args)
        return code, out.getvalue()

    def _record_game(self):
        local_id = self.store.ensure_recording(21, 7, "Dana", T0)
        for turn, column in enumerate([3, 6, 3, 6, 3, 6, 3]):
            self.store.append_move(local_id, turn, column, Actor.HUMAN if turn % 2 == 0 else Actor.SERVER)
        self.store.finish(local_id, GameStatus.HUMAN_WIN, 33)
        return local_id

    def test_given_no_recordings_when_listing_then_message_printed(self):
        code, out = self._run(SimpleCLI(self.settings).list_recordings)
        self.assertEqual(code, 0)
        self.assertIn("No recorded games found", out)

    def test_given_recording_when_listing_then_row_shows_result_and_moves(self):
        self._record_game()
        code, out = self._run(SimpleCLI(self.settings).list_recordings, 7)
        self.assertEqual(code, 0)
        self.assertIn("player_won", out)
        self.assertIn("33s", out)
        self.assertIn("    7 |", out)

    def test_given_recording_when_replaying_then_final_board_printed(self):
        self._record_game()
        code, out = self._run(SimpleCLI(self.settings).replay_game, 21)
        self.assertEqual(code, 0)
        self.assertIn("Move 7:", out)
        self.assertIn("Final board:", out)

    def test_given_unknown_game_when_replaying_then_error_exit_code(self):
        code, out = self._run(SimpleCLI(self.settings).replay_game, 99)
        self.assertEqual(code, 1)
        self.assertIn("No recording for server game 99", out)

    def test_given_scripted_input_when_reading_moves_then_parsed(self):
        answers = iter(["4", "x", "q"])
        cli = SimpleCLI(self.settings, input_fn=lambda prompt: next(answers))
        with contextlib.redirect_stdout(io.StringIO()):
            self.assertEqual(cli.get_human_move(), 4)
            self.assertIsNone(cli.get_human_move())
            self.assertEqual(cli.get_human_move(), -1)

    def test_given_main_when_listing_recordings_then_uses_data_dir_flag(self):
        self._record_game()
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(["--data-dir", self._tmp.name, "--debug-level", "none", "recordings"])
        self.assertEqual(code, 0)
        self.assertIn("Found 1 recorded games", out.getvalue())

    def test_given_lost_winning_response_when_move_retried_then_cli_shows_win(self):
        api = InProcessApi(make_service(self.settings.server_dir, rng=FixedColumnRng(6)))
        client = ClientGame(api, self.store, player_id=7)
        client.start()
        cli = SimpleCLI(self.settings)
        for _ in range(3):
            self._run(cli._submit, client, 3)
        api.lose_next = True
        _, out = self._run(cli._submit, client, 3)
        self.assertIn("Nothing was changed", out)

        _, out = self._run(cli._submit, client, 3)

        self.assertNotIn("Move rejected", out)
        self.assertEqual(client.status, GameStatus.HUMAN_WIN)
        recording = self.store.get_recording(client.local_id)
        self.assertEqual(recording.result, GameStatus.HUMAN_WIN)
        self.assertEqual(len(self.store.load_moves(client.local_id)), 7)

    def test_given_parser_when_play_without_player_then_exits(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                build_parser().parse_args(["play"])


if __name__ == "__main__":
    unittest.main()
