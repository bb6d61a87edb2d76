"""User settings commands."""

from __future__ import annotations

import logging
from typing import List

import discord
from discord import app_commands
from discord.ext import commands

from raidplanner.raids.settings import UserSettingsService
from raidplanner.utils.interactions import reply


logger = logging.getLogger("raidplanner.commands.settings")

MAX_AUTOCOMPLETE = 25


class SettingsCommand(commands.Cog):
    """Cog for the /settings command group."""

    settings = app_commands.Group(name="settings", description="Your personal settings")

    def __init__(self, bot: commands.Bot, service: UserSettingsService):
        self.bot = bot
        self.service = service

    @settings.command(name="timezone", description="Set your timezone (IANA name, e.g. Europe/Paris)")
    @app_commands.describe(timezone="IANA timezone name")
    async def settings_timezone(self, interaction: discord.Interaction, timezone: str) -> None:
        if not await self.service.set_timezone(interaction.user.id, timezone):
            await reply(
                interaction,
                f"❌ Unknown timezone `{timezone}`. Use /settings timezone-list for examples.",
            )
            return
        await reply(interaction, f"✅ Timezone set to **{timezone.strip()}**.")

    @settings_timezone.autocomplete("timezone")
    async def timezone_autocomplete(
        self,
        interaction: discord.Interaction,
        current: str,
    ) -> List[app_commands.Choice[str]]:
        if not current:
            zones = self.service.common_timezones()
        else:
            needle = current.casefold()
            zones = [zone for zone in self.service.available_timezones() if needle in zone.casefold()]
        return [app_commands.Choice(name=zone, value=zone) for zone in zones[:MAX_AUTOCOMPLETE]]

    @settings.command(name="timezone-list", description="Show common timezones")
    async def settings_timezone_list(self, interaction: discord.Interaction) -> None:
        current = await self.service.get(interaction.user.id)
        lines = [f"• `{zone}`" for zone in self.service.common_timezones()]
        header = (
            f"Your timezone: **{current.timezone_id}**"
            if current.has_timezone
            else "You have not set a timezone yet."
        )
        await reply(
            interaction,
            header + "\n\nCommon timezones:\n" + "\n".join(lines)
            + f"\n\n{len(self.service.available_timezones())} timezones are available in total.",
        )


async def setup(bot: commands.Bot, service: UserSettingsService) -> None:
    """Setup function for settings commands."""
    await bot.add_cog(SettingsCommand(bot, service))
    logger.info("SettingsCommand cog loaded")
