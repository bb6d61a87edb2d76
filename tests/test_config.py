import os
import tempfile
import textwrap
import unittest

from raidplanner.utils.config import Config


class TestConfig(unittest.TestCase):

    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmpdir.cleanup)

    def write_config(self, body: str) -> Config:
        path = os.path.join(self._tmpdir.name, "config.yaml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(textwrap.dedent(body))
        return Config(path)

    def test_values_are_read_with_dot_notation(self):
        config = self.write_config(
            """
            discord:
              token: "abc"
              guild_id: "1234"
            database:
              path: "tmp/test.db"
            raid:
              attendance_requires_raid: false
              list_limit: 5
              reminders:
                interval_minutes: 15
                advance_window_hours: [47, 49]
                final_window_hours: [0.5, 1]
                final_reminder_once: true
            permissions:
              admin_users: [42]
            """
        )

        self.assertEqual(config.discord_token, "abc")
        self.assertEqual(config.guild_id, 1234)
        self.assertEqual(config.database_path, "tmp/test.db")
        self.assertFalse(config.attendance_requires_raid)
        self.assertEqual(config.raid_list_limit, 5)
        self.assertEqual(config.reminder_interval_minutes, 15)
        self.assertEqual(config.reminder_advance_window_hours, (47.0, 49.0))
        self.assertEqual(config.reminder_final_window_hours, (0.5, 1.0))
        self.assertTrue(config.final_reminder_once)
        self.assertEqual(config.admin_users, [42])
        self.assertEqual(config.get("raid.reminders.missing", "fallback"), "fallback")

    def test_defaults(self):
        config = self.write_config(
            """
            discord:
              token: "abc"
            """
        )

        self.assertIsNone(config.guild_id)
        self.assertEqual(config.database_path, "data/raids.db")
        self.assertTrue(config.attendance_requires_raid)
        self.assertEqual(config.raid_list_limit, 10)
        self.assertEqual(config.reminder_interval_minutes, 30)
        self.assertEqual(config.reminder_advance_window_hours, (24, 25))
        self.assertEqual(config.reminder_final_window_hours, (1, 2))
        self.assertFalse(config.final_reminder_once)
        self.assertEqual(config.admin_roles, [])
        self.assertEqual(config.log_level, "INFO")

    def test_missing_token(self):
        config = self.write_config(
            """
            discord:
              token: "YOUR_BOT_TOKEN_HERE"
            """
        )
        with self.assertRaises(ValueError):
            config.discord_token

    def test_invalid_window(self):
        config = self.write_config(
            """
            raid:
              reminders:
                advance_window_hours: [25, 24]
                final_window_hours: [1]
            """
        )
        with self.assertRaises(ValueError):
            config.reminder_advance_window_hours
        with self.assertRaises(ValueError):
            config.reminder_final_window_hours

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            Config(os.path.join(self._tmpdir.name, "nope.yaml"))

    def test_empty_file(self):
        config = self.write_config("")
        self.assertEqual(config.raid_list_limit, 10)

    def test_example_config_loads(self):
        root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        config = Config(os.path.join(root, "config", "config.example.yaml"))
        self.assertEqual(config.reminder_interval_minutes, 30)
        self.assertEqual(config.reminder_advance_window_hours, (24, 25))
        with self.assertRaises(ValueError):
            config.discord_token


if __name__ == "__main__":
    unittest.main()
