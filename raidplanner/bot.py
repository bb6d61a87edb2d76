"""Main bot file for the raid planner Discord bot."""

import logging
import sys
from typing import List

import discord
from discord import app_commands
from discord.ext import commands

from raidplanner.database import RaidStore, UserSettingsStore
from raidplanner.raids.attendance import AttendanceTracker
from raidplanner.raids.composition import CompositionManager
from raidplanner.raids.lifecycle import RaidCreator, RaidLifecycle
from raidplanner.raids.settings import UserSettingsService
from raidplanner.raids.signals import RaidSignalBus
from raidplanner.raids.timezones import TimeZoneConverter
from raidplanner.utils import Config, setup_logger
from raidplanner.utils.discord_hub import DiscordNotificationHub
from raidplanner.utils.interactions import reply, user_error_message
from raidplanner.commands.attendance import setup as setup_attendance
from raidplanner.commands.character import setup as setup_character
from raidplanner.commands.raid import setup as setup_raid
from raidplanner.commands.settings import setup as setup_settings
from raidplanner.events.reminder_events import setup as setup_reminder_events
from raidplanner.tasks.reminder_scheduler import setup as setup_reminder_scheduler


class RaidPlannerBot(commands.Bot):
    """Main raid planner bot class."""

    def __init__(
        self,
        config: Config,
        raid_store: RaidStore,
        settings_store: UserSettingsStore,
        *args,
        **kwargs
    ):
        """
        Wire the raid engine together.

        Args:
            config: Configuration object
            raid_store: Store for raids, attendance, characters and compositions
            settings_store: Store for per-user settings
        """
        self.config = config
        self.raid_store = raid_store
        self.settings_store = settings_store
        self.logger = logging.getLogger("raidplanner.bot")
        self.loaded_cogs: List[str] = []

        converter = TimeZoneConverter()
        self.signals = RaidSignalBus()
        self.hub = DiscordNotificationHub(self)
        self.attendance = AttendanceTracker(
            raid_store,
            self.signals,
            require_raid=config.attendance_requires_raid,
        )
        self.composition = CompositionManager(raid_store, self.signals)
        # Subscribes itself so every attendance or composition change re-renders the raid.
        self.lifecycle = RaidLifecycle(raid_store, self.hub, self.signals)
        self.creator = RaidCreator(self.lifecycle, self.attendance, settings_store, converter)
        self.user_settings = UserSettingsService(settings_store, converter)

        # Reactions arrive as raw events; no privileged intents needed
        intents = discord.Intents.default()

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            *args,
            **kwargs
        )

    async def setup_hook(self):
        """Setup hook called when bot is starting."""
        self.logger.info("Setting up bot...")

        await self.raid_store.initialize()
        await self.settings_store.initialize()
        self.logger.info("Database initialized at %s", self.raid_store.db_path)

        self.tree.on_error = self.on_app_command_error

        await setup_raid(self, self.config, self.lifecycle, self.creator)
        await setup_attendance(self, self.config, self.attendance, self.lifecycle)
        await setup_character(self, self.config, self.composition, self.lifecycle)
        await setup_settings(self, self.user_settings)
        self.logger.info("Commands loaded")

        await setup_reminder_events(self, self.raid_store, self.attendance)
        self.logger.info("Event handlers loaded")

        await setup_reminder_scheduler(self, self.config, self.raid_store, self.hub)
        self.logger.info("Background tasks loaded")

        self.loaded_cogs = sorted(self.cogs)
        self.logger.info("Loaded cogs: %s", ", ".join(self.loaded_cogs))

        try:
            guild_id = self.config.guild_id
            if guild_id:
                guild = discord.Object(id=guild_id)
                self.tree.copy_global_to(guild=guild)
                await self.tree.sync(guild=guild)
                self.logger.info("Synced commands to guild %s", guild_id)
            else:
                await self.tree.sync()
                self.logger.info("Synced commands globally")
        except discord.HTTPException as e:
            self.logger.error("Failed to sync commands: %s", e)

    async def on_ready(self):
        self.logger.info("Logged in as %s (ID: %s)", self.user, self.user.id if self.user else "?")

    async def on_app_command_error(
        self,
        interaction: discord.Interaction,
        error: app_commands.AppCommandError
    ):
        """Translate domain errors into ephemeral answers; log everything else."""
        original = error.original if isinstance(error, app_commands.CommandInvokeError) else error
        message = user_error_message(original)

        if message is None:
            self.logger.error("App command error: %s", original, exc_info=original)
            message = "❌ An unexpected error occurred."
        else:
            self.logger.info(
                "Command /%s rejected: %s",
                interaction.command.qualified_name if interaction.command else "?",
                original,
            )

        try:
            await reply(interaction, message)
        except discord.HTTPException:
            self.logger.warning("Failed to report command error", exc_info=True)

    async def close(self):
        self.logger.info("Shutting down raid planner...")
        await super().close()
        self.logger.info("Shutdown complete")


def main():
    """Main entry point for the bot."""
    try:
        config = Config()
        token = config.discord_token
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Configuration Error: {e}")
        sys.exit(1)

    logger = setup_logger(
        name="raidplanner",
        level=config.log_level,
        log_file=config.log_file,
        log_format=config.log_format
    )

    logger.info("=" * 50)
    logger.info("Raid planner starting...")
    logger.info("=" * 50)

    raid_store = RaidStore(config.database_path)
    settings_store = UserSettingsStore(config.database_path)
    bot = RaidPlannerBot(config, raid_store, settings_store)

    try:
        bot.run(token, log_handler=None)
    except discord.LoginFailure:
        logger.error("❌ Failed to login. Please check your bot token.")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
