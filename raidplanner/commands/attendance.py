"""Attendance commands."""

from __future__ import annotations

import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from raidplanner.database.raid_store import AttendanceStatus
from raidplanner.raids.attendance import AttendanceTracker
from raidplanner.raids.lifecycle import RaidLifecycle
from raidplanner.utils.config import Config
from raidplanner.utils.interactions import has_admin_permission, reply
from raidplanner.utils.raid_utils import STATUS_LABELS, build_attendance_message


logger = logging.getLogger("raidplanner.commands.attendance")


class AttendanceCommand(commands.Cog):
    """Cog for attendance responses and bench moves."""

    def __init__(
        self,
        bot: commands.Bot,
        config: Config,
        tracker: AttendanceTracker,
        lifecycle: RaidLifecycle,
    ):
        self.bot = bot
        self.config = config
        self.tracker = tracker
        self.lifecycle = lifecycle

    async def _respond(
        self,
        interaction: discord.Interaction,
        raid_id: int,
        status: AttendanceStatus,
        note: Optional[str],
    ) -> None:
        await interaction.response.defer(ephemeral=True)
        record = await self.tracker.set_status(
            raid_id,
            interaction.user.id,
            interaction.user.display_name,
            status,
            note,
        )
        await reply(
            interaction,
            f"✅ Your attendance for raid {raid_id} is now **{STATUS_LABELS[record.status]}**.",
        )

    @app_commands.command(name="attend", description="Confirm that you will attend a raid")
    @app_commands.describe(raid_id="Raid ID", note="Optional note")
    async def attend(
        self,
        interaction: discord.Interaction,
        raid_id: int,
        note: Optional[str] = None,
    ) -> None:
        await self._respond(interaction, raid_id, AttendanceStatus.CONFIRMED, note)

    @app_commands.command(name="decline", description="Decline a raid")
    @app_commands.describe(raid_id="Raid ID", reason="Optional reason")
    async def decline(
        self,
        interaction: discord.Interaction,
        raid_id: int,
        reason: Optional[str] = None,
    ) -> None:
        await self._respond(interaction, raid_id, AttendanceStatus.DECLINED, reason)

    @app_commands.command(name="bench", description="Ask to be put on the bench for a raid")
    @app_commands.describe(raid_id="Raid ID", note="Optional note")
    async def bench(
        self,
        interaction: discord.Interaction,
        raid_id: int,
        note: Optional[str] = None,
    ) -> None:
        await self._respond(interaction, raid_id, AttendanceStatus.BENCH_REQUESTED, note)

    @app_commands.command(name="move-to-bench", description="[Admin] Move a member to the bench")
    @app_commands.describe(raid_id="Raid ID", member="Member to move")
    async def move_to_bench(
        self,
        interaction: discord.Interaction,
        raid_id: int,
        member: discord.Member,
    ) -> None:
        if not has_admin_permission(interaction, self.config):
            await reply(interaction, "❌ Only admins can move members.")
            return

        await interaction.response.defer(ephemeral=True)
        record = await self.tracker.move_to_bench(raid_id, member.id)
        if record is None:
            await reply(interaction, f"❌ {member.display_name} has no attendance for raid {raid_id}.")
            return
        await reply(interaction, f"✅ {member.display_name} moved to the bench.")

    @app_commands.command(
        name="move-from-bench",
        description="[Admin] Move a member from the bench to confirmed",
    )
    @app_commands.describe(raid_id="Raid ID", member="Member to move")
    async def move_from_bench(
        self,
        interaction: discord.Interaction,
        raid_id: int,
        member: discord.Member,
    ) -> None:
        if not has_admin_permission(interaction, self.config):
            await reply(interaction, "❌ Only admins can move members.")
            return

        await interaction.response.defer(ephemeral=True)
        record = await self.tracker.move_from_bench_to_confirmed(raid_id, member.id)
        if record is None:
            await reply(interaction, f"❌ {member.display_name} has no attendance for raid {raid_id}.")
            return
        await reply(interaction, f"✅ {member.display_name} is now confirmed.")

    @app_commands.command(name="attendance", description="Show the attendance list of a raid")
    @app_commands.describe(raid_id="Raid ID")
    async def attendance(self, interaction: discord.Interaction, raid_id: int) -> None:
        aggregate = await self.lifecycle.require(raid_id)
        await reply(interaction, message=build_attendance_message(aggregate.raid, aggregate.attendance))


async def setup(
    bot: commands.Bot,
    config: Config,
    tracker: AttendanceTracker,
    lifecycle: RaidLifecycle,
) -> None:
    """Setup function for attendance commands."""
    await bot.add_cog(AttendanceCommand(bot, config, tracker, lifecycle))
    logger.info("AttendanceCommand cog loaded")
