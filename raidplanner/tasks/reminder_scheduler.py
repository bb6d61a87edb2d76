"""Background task that reminds members about upcoming raids."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from discord.ext import commands, tasks

from raidplanner.database.raid_store import AttendanceStatus, RaidRecord, RaidStore
from raidplanner.raids.attendance import utcnow
from raidplanner.raids.notifications import NotificationHub
from raidplanner.utils.config import Config
from raidplanner.utils.raid_utils import (
    build_final_reminder_message,
    build_reminder_message,
)


logger = logging.getLogger("raidplanner.tasks.reminders")


@dataclass(frozen=True)
class ReminderSettings:
    interval_minutes: int = 30
    advance_window_hours: Tuple[float, float] = (24, 25)
    final_window_hours: Tuple[float, float] = (1, 2)
    final_reminder_once: bool = False

    @classmethod
    def from_config(cls, config: Config) -> "ReminderSettings":
        return cls(
            interval_minutes=config.reminder_interval_minutes,
            advance_window_hours=config.reminder_advance_window_hours,
            final_window_hours=config.reminder_final_window_hours,
            final_reminder_once=config.final_reminder_once,
        )


@dataclass
class SweepReport:
    """Outcome of one reminder sweep."""

    advance_sent: List[int] = field(default_factory=list)
    advance_skipped: List[int] = field(default_factory=list)
    final_sent: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)

    @property
    def total_sent(self) -> int:
        return len(self.advance_sent) + len(self.final_sent)


class ReminderSweep:
    """
    One pass over the raid store.

    Advance reminders go out once per raid, to raids starting in the advance
    window that still have pending members. Final reminders go to every raid
    in the final window; they repeat on every sweep unless
    ``final_reminder_once`` is set. A failure for one raid is logged and the
    sweep carries on with the next.
    """

    def __init__(self, settings: Optional[ReminderSettings] = None):
        self.settings = settings or ReminderSettings()

    def _window(self, now: datetime, hours: Tuple[float, float]) -> Tuple[datetime, datetime]:
        start, end = hours
        return now + timedelta(hours=start), now + timedelta(hours=end)

    async def run(self, now: datetime, raid_store: RaidStore, hub: NotificationHub) -> SweepReport:
        report = SweepReport()
        await self._send_advance_reminders(now, raid_store, hub, report)
        await self._send_final_reminders(now, raid_store, hub, report)

        if report.total_sent or report.failed:
            logger.info(
                "Reminder sweep: %s advance, %s final, %s failed",
                len(report.advance_sent),
                len(report.final_sent),
                len(report.failed),
            )
        return report

    async def _send_advance_reminders(
        self,
        now: datetime,
        raid_store: RaidStore,
        hub: NotificationHub,
        report: SweepReport,
    ) -> None:
        start, end = self._window(now, self.settings.advance_window_hours)
        raids = await raid_store.list_raids_in_window(start, end, without_reminder=True)

        for raid in raids:
            try:
                pending = await raid_store.list_attendance_by_status(
                    raid.id, (AttendanceStatus.PENDING,)
                )
                if not pending:
                    # Stays eligible; someone may still be marked pending later.
                    report.advance_skipped.append(raid.id)
                    continue

                message_id = await hub.send(raid.channel_id, build_reminder_message(raid, pending))
                await raid_store.set_reminder_message_id(raid.id, message_id)
                report.advance_sent.append(raid.id)
                logger.info(
                    "Sent reminder for raid %s to %s pending members", raid.id, len(pending)
                )
            except Exception:
                report.failed.append(raid.id)
                logger.warning("Failed to send reminder for raid %s", raid.id, exc_info=True)

    async def _send_final_reminders(
        self,
        now: datetime,
        raid_store: RaidStore,
        hub: NotificationHub,
        report: SweepReport,
    ) -> None:
        once = self.settings.final_reminder_once
        start, end = self._window(now, self.settings.final_window_hours)
        raids = await raid_store.list_raids_in_window(start, end, without_final_reminder=once)

        for raid in raids:
            try:
                await self._send_final(raid, now, raid_store, hub, once)
                report.final_sent.append(raid.id)
            except Exception:
                report.failed.append(raid.id)
                logger.warning(
                    "Failed to send final reminder for raid %s", raid.id, exc_info=True
                )

    async def _send_final(
        self,
        raid: RaidRecord,
        now: datetime,
        raid_store: RaidStore,
        hub: NotificationHub,
        once: bool,
    ) -> None:
        await hub.send(raid.channel_id, build_final_reminder_message(raid))
        if once:
            await raid_store.mark_final_reminder_sent(raid.id, now)


class ReminderScheduler(commands.Cog):
    """Runs the reminder sweep on a fixed interval."""

    def __init__(
        self,
        bot: commands.Bot,
        config: Config,
        raid_store: RaidStore,
        hub: NotificationHub,
    ):
        self.bot = bot
        self.config = config
        self.raid_store = raid_store
        self.hub = hub
        self.sweep = ReminderSweep(ReminderSettings.from_config(config))
        self.reminder_task.change_interval(minutes=self.sweep.settings.interval_minutes)
        self.reminder_task.start()

    def cog_unload(self) -> None:
        if self.reminder_task.is_running():
            self.reminder_task.cancel()

    @tasks.loop(minutes=30)
    async def reminder_task(self) -> None:
        try:
            await self.sweep.run(utcnow(), self.raid_store, self.hub)
        except Exception:
            logger.error("Reminder sweep failed", exc_info=True)

    @reminder_task.before_loop
    async def before_reminder_task(self) -> None:
        await self.bot.wait_until_ready()


async def setup(
    bot: commands.Bot,
    config: Config,
    raid_store: RaidStore,
    hub: NotificationHub,
) -> None:
    """Setup the reminder scheduler."""
    await bot.add_cog(ReminderScheduler(bot, config, raid_store, hub))
    logger.info("ReminderScheduler cog loaded")
