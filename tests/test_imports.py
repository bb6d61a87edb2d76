"""Check that every module imports and the cogs wire up."""

import unittest


class TestImports(unittest.TestCase):

    def test_imports(self):
        from raidplanner.utils import Config, SingleInstanceLock, setup_logger
        from raidplanner.database import RaidStore, UserSettingsStore
        from raidplanner.raids.attendance import AttendanceTracker
        from raidplanner.raids.composition import CompositionManager
        from raidplanner.raids.lifecycle import RaidCreator, RaidLifecycle
        from raidplanner.raids.settings import UserSettingsService
        from raidplanner.commands import (
            AttendanceCommand,
            CharacterCommand,
            RaidCommand,
            SettingsCommand,
        )
        from raidplanner.events.reminder_events import ReminderEvents
        from raidplanner.tasks.reminder_scheduler import ReminderScheduler
        from raidplanner.bot import RaidPlannerBot, main

        self.assertTrue(callable(main))

    def test_command_groups(self):
        from raidplanner.commands import CharacterCommand, RaidCommand, SettingsCommand

        self.assertEqual(
            sorted(command.name for command in RaidCommand.raid.commands),
            ["archive", "create", "delete", "list", "show"],
        )
        self.assertEqual(
            sorted(command.name for command in CharacterCommand.character.commands),
            ["list", "register", "update-jobs"],
        )
        self.assertEqual(
            sorted(command.name for command in SettingsCommand.settings.commands),
            ["timezone", "timezone-list"],
        )


if __name__ == "__main__":
    unittest.main()
