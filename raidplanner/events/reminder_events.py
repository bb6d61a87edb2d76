"""Attendance updates from reactions on reminder messages."""

from __future__ import annotations

import logging
from typing import Optional

import discord
from discord.ext import commands

from raidplanner.database.raid_store import AttendanceRecord, RaidStore
from raidplanner.raids.attendance import AttendanceTracker
from raidplanner.utils.raid_utils import REACTION_STATUSES


logger = logging.getLogger("raidplanner.events.reminders")


class ReminderReactionRouter:
    """Maps a reaction on an advance reminder to an attendance change."""

    def __init__(self, raid_store: RaidStore, tracker: AttendanceTracker):
        self.raid_store = raid_store
        self.tracker = tracker

    async def handle(
        self,
        message_id: int,
        member_id: int,
        display_name: str,
        emoji: str,
    ) -> Optional[AttendanceRecord]:
        """Returns the updated record, or None if the reaction was not for us."""
        status = REACTION_STATUSES.get(emoji)
        if status is None:
            return None

        raid = await self.raid_store.get_raid_by_reminder_message_id(message_id)
        if raid is None:
            return None

        record = await self.tracker.set_status(raid.id, member_id, display_name, status)
        logger.info(
            "Member %s answered reminder for raid %s with %s",
            member_id,
            raid.id,
            status.value,
        )
        return record


class ReminderEvents(commands.Cog):
    """Handle reactions on raid reminder messages."""

    def __init__(self, bot: commands.Bot, router: ReminderReactionRouter):
        self.bot = bot
        self.router = router

    async def _get_member(
        self,
        guild: discord.Guild,
        user_id: int,
    ) -> Optional[discord.Member]:
        member = guild.get_member(user_id)
        if member:
            return member
        try:
            return await guild.fetch_member(user_id)
        except discord.HTTPException:
            return None

    @commands.Cog.listener()
    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent) -> None:
        if payload.guild_id is None:
            return
        if self.bot.user and payload.user_id == self.bot.user.id:
            return
        if str(payload.emoji) not in REACTION_STATUSES:
            return

        member = payload.member
        if member is None:
            guild = self.bot.get_guild(payload.guild_id)
            if not guild:
                return
            member = await self._get_member(guild, payload.user_id)
        if member is None or member.bot:
            return

        try:
            await self.router.handle(
                payload.message_id,
                payload.user_id,
                member.display_name,
                str(payload.emoji),
            )
        except Exception:
            logger.warning(
                "Failed to process reminder reaction on message %s",
                payload.message_id,
                exc_info=True,
            )


async def setup(bot: commands.Bot, raid_store: RaidStore, tracker: AttendanceTracker) -> None:
    """Setup the reminder events cog."""
    await bot.add_cog(ReminderEvents(bot, ReminderReactionRouter(raid_store, tracker)))
    logger.info("ReminderEvents cog loaded")
