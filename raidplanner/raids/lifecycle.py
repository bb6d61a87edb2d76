"""Raid creation, archival, deletion and public message upkeep."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from raidplanner.database.raid_store import (
    AttendanceRecord,
    AttendanceStatus,
    CompositionRecord,
    RaidRecord,
    RaidStore,
)
from raidplanner.database.settings_store import UserSettingsStore
from raidplanner.errors import (
    InvalidInputError,
    RaidNotFoundError,
    TimezoneRequiredError,
)
from raidplanner.raids.attendance import AttendanceTracker, utcnow
from raidplanner.raids.notifications import NotificationHub, RaidMessage
from raidplanner.raids.signals import RaidSignalBus
from raidplanner.raids.timezones import TimeZoneConverter
from raidplanner.utils.raid_utils import build_raid_message, parse_raid_datetime


logger = logging.getLogger("raidplanner.lifecycle")


@dataclass(frozen=True)
class RaidAggregate:
    """A raid together with its attendance and composition rows."""

    raid: RaidRecord
    attendance: List[AttendanceRecord] = field(default_factory=list)
    compositions: List[CompositionRecord] = field(default_factory=list)

    @property
    def id(self) -> int:
        return self.raid.id


class RaidLifecycle:
    """
    Owns raid records and keeps each raid's public message current.

    States: scheduled -> archived (archive), scheduled|archived -> deleted
    (delete, terminal). There is no way back from archived.
    """

    def __init__(
        self,
        raid_store: RaidStore,
        hub: NotificationHub,
        signals: Optional[RaidSignalBus] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.raid_store = raid_store
        self.hub = hub
        self.clock = clock
        if signals is not None:
            signals.subscribe(self.handle_raid_changed)

    async def create(
        self,
        name: str,
        description: str,
        scheduled_utc: datetime,
        location: str,
        guild_id: int,
        channel_id: int,
    ) -> RaidRecord:
        """Store a new raid; the caller converts the schedule to UTC beforehand."""
        if scheduled_utc.tzinfo is None:
            raise InvalidInputError("Scheduled time must be timezone-aware")

        raid = await self.raid_store.create_raid(
            name,
            description,
            scheduled_utc.astimezone(timezone.utc),
            location,
            guild_id,
            channel_id,
        )
        logger.info("Raid %s '%s' created for guild %s", raid.id, raid.name, guild_id)
        return raid

    async def get(self, raid_id: int) -> Optional[RaidAggregate]:
        raid = await self.raid_store.get_raid(raid_id)
        if raid is None:
            return None
        attendance = await self.raid_store.list_attendance(raid_id)
        compositions = await self.raid_store.list_compositions(raid_id)
        return RaidAggregate(raid=raid, attendance=attendance, compositions=compositions)

    async def require(self, raid_id: int) -> RaidAggregate:
        aggregate = await self.get(raid_id)
        if aggregate is None:
            raise RaidNotFoundError(raid_id)
        return aggregate

    async def list_upcoming(
        self,
        guild_id: int,
        now: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[RaidRecord]:
        """Unarchived raids scheduled strictly after now, soonest first."""
        return await self.raid_store.list_upcoming_raids(guild_id, now or self.clock(), limit)

    async def archive(self, raid_id: int) -> bool:
        """Archive a raid. False if it does not exist or is already archived."""
        archived = await self.raid_store.archive_raid(raid_id)
        if archived:
            logger.info("Raid %s archived", raid_id)
        return archived

    async def delete(self, raid_id: int) -> bool:
        """Delete a raid with its attendance and composition rows."""
        raid = await self.raid_store.get_raid(raid_id)
        if raid is None:
            return False

        await self.raid_store.delete_raid(raid_id)
        logger.info("Raid %s '%s' deleted", raid_id, raid.name)

        if raid.message_id:
            try:
                await self.hub.delete(raid.channel_id, raid.message_id)
            except Exception:
                logger.warning(
                    "Failed to delete message for raid %s", raid_id, exc_info=True
                )
        return True

    def build_message(self, aggregate: RaidAggregate) -> RaidMessage:
        return build_raid_message(aggregate.raid, aggregate.attendance, aggregate.compositions)

    async def render(self, raid_id: int) -> Optional[int]:
        """
        Send or repair the raid's public message and return its handle.

        Sends a new message when none exists yet. Otherwise the existing one
        is edited, and if the edit fails a fresh message replaces it. The
        handle is only stored if it is unchanged since the raid was read, so
        concurrent renders settle on a single message.
        """
        aggregate = await self.get(raid_id)
        if aggregate is None:
            return None

        raid = aggregate.raid
        message = self.build_message(aggregate)

        if raid.message_id:
            try:
                updated = await self.hub.update(raid.channel_id, raid.message_id, message)
            except Exception:
                logger.warning(
                    "Updating message for raid %s raised", raid_id, exc_info=True
                )
                updated = False
            if updated:
                return raid.message_id
            logger.info(
                "Message %s for raid %s could not be updated, sending a new one",
                raid.message_id,
                raid_id,
            )

        message_id = await self.hub.send(raid.channel_id, message)
        if await self.raid_store.replace_message_id(raid_id, message_id, raid.message_id):
            return message_id

        # A concurrent render stored its handle first; keep that message and
        # bring it up to date instead of leaving two copies in the channel.
        logger.info(
            "Raid %s got a message from a concurrent render, dropping duplicate %s",
            raid_id,
            message_id,
        )
        try:
            await self.hub.delete(raid.channel_id, message_id)
        except Exception:
            logger.warning(
                "Failed to delete duplicate message %s for raid %s",
                message_id,
                raid_id,
                exc_info=True,
            )
        return await self.render(raid_id)

    async def handle_raid_changed(self, raid_id: int) -> None:
        await self.render(raid_id)


class RaidCreator:
    """
    End-to-end raid creation from user input.

    Parses the creator's wall-clock date and time, converts it through their
    configured timezone, rejects past times, then creates the raid, confirms
    the creator and posts the raid message.
    """

    def __init__(
        self,
        lifecycle: RaidLifecycle,
        attendance: AttendanceTracker,
        settings_store: UserSettingsStore,
        converter: Optional[TimeZoneConverter] = None,
    ):
        self.lifecycle = lifecycle
        self.attendance = attendance
        self.settings_store = settings_store
        self.converter = converter or TimeZoneConverter()

    async def convert_for_user(self, user_id: int, local_time: datetime) -> datetime:
        settings = await self.settings_store.get_or_create(user_id)
        utc_time = self.converter.to_utc(settings.timezone_id, local_time)
        if utc_time.tzinfo is None:
            utc_time = utc_time.replace(tzinfo=timezone.utc)
        return utc_time

    async def schedule(
        self,
        creator_id: int,
        creator_name: str,
        name: str,
        description: str,
        date_str: str,
        time_str: str,
        location: str,
        guild_id: int,
        channel_id: int,
        now: Optional[datetime] = None,
    ) -> RaidRecord:
        settings = await self.settings_store.find(creator_id)
        if settings is None or not settings.has_timezone:
            raise TimezoneRequiredError(
                "Set your timezone with /settings timezone before creating a raid."
            )

        local_time = parse_raid_datetime(date_str, time_str)
        scheduled_utc = await self.convert_for_user(creator_id, local_time)

        now = now or self.lifecycle.clock()
        if scheduled_utc <= now:
            raise InvalidInputError("Raid time must be in the future.")

        raid = await self.lifecycle.create(
            name, description, scheduled_utc, location, guild_id, channel_id
        )
        # Publishing the confirm re-renders the raid, which posts its first message.
        await self.attendance.set_status(
            raid.id, creator_id, creator_name, AttendanceStatus.CONFIRMED
        )
        return raid
