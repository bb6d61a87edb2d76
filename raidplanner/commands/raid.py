"""Raid scheduling commands."""

from __future__ import annotations

import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from raidplanner.raids.lifecycle import RaidCreator, RaidLifecycle
from raidplanner.utils.config import Config
from raidplanner.utils.interactions import has_admin_permission, reply
from raidplanner.utils.raid_utils import build_raid_list_message, format_time


logger = logging.getLogger("raidplanner.commands.raid")


class RaidCommand(commands.Cog):
    """Cog for the /raid command group."""

    raid = app_commands.Group(name="raid", description="Schedule and manage raids")

    def __init__(
        self,
        bot: commands.Bot,
        config: Config,
        lifecycle: RaidLifecycle,
        creator: RaidCreator,
    ):
        self.bot = bot
        self.config = config
        self.lifecycle = lifecycle
        self.creator = creator

    @raid.command(name="create", description="Create a raid in this channel")
    @app_commands.describe(
        name="Raid name",
        date="Date in your timezone (YYYY-MM-DD)",
        time="Start time in your timezone (HH:MM)",
        location="Where the party meets",
        description="Optional details",
    )
    async def raid_create(
        self,
        interaction: discord.Interaction,
        name: str,
        date: str,
        time: str,
        location: str,
        description: Optional[str] = None,
    ) -> None:
        if not interaction.guild:
            await reply(interaction, "❌ This command only works in a server.")
            return

        await interaction.response.defer(ephemeral=True)
        raid = await self.creator.schedule(
            creator_id=interaction.user.id,
            creator_name=interaction.user.display_name,
            name=name,
            description=description or "",
            date_str=date,
            time_str=time,
            location=location,
            guild_id=interaction.guild.id,
            channel_id=interaction.channel_id,
        )
        await reply(
            interaction,
            f"✅ Raid **{raid.name}** (ID {raid.id}) scheduled for {format_time(raid.scheduled_at)}.",
        )

    @raid.command(name="list", description="Show upcoming raids")
    async def raid_list(self, interaction: discord.Interaction) -> None:
        if not interaction.guild:
            await reply(interaction, "❌ This command only works in a server.")
            return

        raids = await self.lifecycle.list_upcoming(interaction.guild.id)
        if not raids:
            await reply(interaction, "ℹ️ No upcoming raids.")
            return

        await reply(
            interaction,
            message=build_raid_list_message(raids, limit=self.config.raid_list_limit),
        )

    @raid.command(name="show", description="Show a raid with its roster")
    @app_commands.describe(raid_id="Raid ID")
    async def raid_show(self, interaction: discord.Interaction, raid_id: int) -> None:
        aggregate = await self.lifecycle.require(raid_id)
        await reply(interaction, message=self.lifecycle.build_message(aggregate))

    @raid.command(name="archive", description="[Admin] Archive a raid")
    @app_commands.describe(raid_id="Raid ID")
    async def raid_archive(self, interaction: discord.Interaction, raid_id: int) -> None:
        if not has_admin_permission(interaction, self.config):
            await reply(interaction, "❌ Only admins can archive raids.")
            return

        await interaction.response.defer(ephemeral=True)
        await self.lifecycle.require(raid_id)
        if not await self.lifecycle.archive(raid_id):
            await reply(interaction, f"ℹ️ Raid {raid_id} is already archived.")
            return

        await self.lifecycle.render(raid_id)
        await reply(interaction, f"✅ Raid {raid_id} archived.")

    @raid.command(name="delete", description="[Admin] Delete a raid and its roster")
    @app_commands.describe(raid_id="Raid ID")
    async def raid_delete(self, interaction: discord.Interaction, raid_id: int) -> None:
        if not has_admin_permission(interaction, self.config):
            await reply(interaction, "❌ Only admins can delete raids.")
            return

        await interaction.response.defer(ephemeral=True)
        if not await self.lifecycle.delete(raid_id):
            await reply(interaction, f"❌ Raid {raid_id} not found.")
            return

        logger.info("Raid %s deleted by %s", raid_id, interaction.user.id)
        await reply(interaction, f"✅ Raid {raid_id} deleted.")


async def setup(
    bot: commands.Bot,
    config: Config,
    lifecycle: RaidLifecycle,
    creator: RaidCreator,
) -> None:
    """Setup function for raid commands."""
    await bot.add_cog(RaidCommand(bot, config, lifecycle, creator))
    logger.info("RaidCommand cog loaded")
