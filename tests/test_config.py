import os
import unittest

from connect4_remote.config import DEFAULT_API_URL, Settings
from connect4_remote.debug import DebugLevel, DebugManager


class TestSettings(unittest.TestCase):
    def test_given_empty_environment_when_loading_then_defaults(self):
        settings = Settings.from_env({})
        self.assertEqual(settings.api_url, DEFAULT_API_URL)
        self.assertEqual(settings.port, 5000)
        self.assertIsNone(settings.seed)
        self.assertEqual(settings.tick_seconds, 0.05)
        self.assertEqual(settings.replay_interval_ticks, 10)

    def test_given_environment_when_loading_then_values_parsed(self):
        settings = Settings.from_env({
            "CONNECT4_DATA_DIR": "/tmp/c4",
            "CONNECT4_API_URL": "http://example.test:8080/",
            "CONNECT4_PORT": "8080",
            "CONNECT4_SEED": "17",
            "CONNECT4_TICK_SECONDS": "0.01",
            "CONNECT4_LOG_LEVEL": "debug",
        })
        self.assertEqual(settings.api_url, "http://example.test:8080")
        self.assertEqual(settings.port, 8080)
        self.assertEqual(settings.seed, 17)
        self.assertEqual(settings.tick_seconds, 0.01)
        self.assertEqual(settings.server_dir, os.path.join("/tmp/c4", "server"))
        self.assertEqual(settings.client_dir, os.path.join("/tmp/c4", "client"))
        self.assertEqual(settings.log_level, "debug")

    def test_given_malformed_number_when_loading_then_value_error(self):
        with self.assertRaises(ValueError):
            Settings.from_env({"CONNECT4_PORT": "eighty"})
        with self.assertRaises(ValueError):
            Settings.from_env({"CONNECT4_TICK_SECONDS": "fast"})

    def test_given_overrides_when_applied_then_none_values_ignored(self):
        settings = Settings.from_env({}).override(port=6000, seed=None, data_dir="/srv/c4")
        self.assertEqual(settings.port, 6000)
        self.assertIsNone(settings.seed)
        self.assertEqual(settings.data_dir, "/srv/c4")


class TestDebugManager(unittest.TestCase):
    def test_given_level_string_when_setting_then_known_levels_accepted(self):
        manager = DebugManager()
        self.assertTrue(manager.set_from_string("trace"))
        self.assertEqual(manager.level, DebugLevel.TRACE)
        self.assertFalse(manager.set_from_string("loud"))
        self.assertEqual(manager.level, DebugLevel.TRACE)

    def test_given_timer_when_ended_then_elapsed_time_returned(self):
        manager = DebugManager()
        manager.start_timer("work")
        self.assertGreaterEqual(manager.end_timer("work"), 0.0)
        self.assertIsNone(manager.end_timer("never-started"))


if __name__ == "__main__":
    unittest.main()
