"""Per-raid RSVP tracking."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from raidplanner.database.raid_store import (
    BENCH_STATUSES,
    AttendanceRecord,
    AttendanceStatus,
    RaidStore,
)
from raidplanner.errors import InvalidInputError, RaidNotFoundError
from raidplanner.raids.signals import RaidSignalBus


logger = logging.getLogger("raidplanner.attendance")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AttendanceTracker:
    """
    Owns attendance records; one record per (raid, member).

    Args:
        raid_store: Backing store
        signals: Bus that receives a "raid changed" event after every write
        require_raid: Reject writes for raid ids that do not exist. When
            disabled, any raid id is accepted and orphan rows can be created.
        clock: Source of the current UTC time
    """

    def __init__(
        self,
        raid_store: RaidStore,
        signals: RaidSignalBus,
        require_raid: bool = True,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.raid_store = raid_store
        self.signals = signals
        self.require_raid = require_raid
        self.clock = clock

    async def set_status(
        self,
        raid_id: int,
        member_id: int,
        display_name: str,
        status: AttendanceStatus,
        note: Optional[str] = None,
    ) -> AttendanceRecord:
        """Upsert a member's status, stamping the response time."""
        status = AttendanceStatus(status)
        if status is AttendanceStatus.NONE:
            raise InvalidInputError("Attendance status NONE cannot be stored")

        if self.require_raid and not await self.raid_store.raid_exists(raid_id):
            raise RaidNotFoundError(raid_id)

        record = await self.raid_store.upsert_attendance(
            raid_id,
            member_id,
            display_name,
            status,
            self.clock(),
            note,
        )
        logger.info(
            "Attendance for raid %s: member %s -> %s", raid_id, member_id, status.value
        )
        await self.signals.publish(raid_id)
        return record

    async def list_by_raid(self, raid_id: int) -> List[AttendanceRecord]:
        return await self.raid_store.list_attendance(raid_id)

    async def list_by_status(
        self, raid_id: int, status: AttendanceStatus
    ) -> List[AttendanceRecord]:
        return await self.raid_store.list_attendance_by_status(raid_id, [status])

    async def list_confirmed(self, raid_id: int) -> List[AttendanceRecord]:
        return await self.list_by_status(raid_id, AttendanceStatus.CONFIRMED)

    async def list_pending(self, raid_id: int) -> List[AttendanceRecord]:
        return await self.list_by_status(raid_id, AttendanceStatus.PENDING)

    async def list_bench(self, raid_id: int) -> List[AttendanceRecord]:
        """Return members who asked for, or were moved to, the bench."""
        return await self.raid_store.list_attendance_by_status(raid_id, BENCH_STATUSES)

    async def get_status(self, raid_id: int, member_id: int) -> AttendanceStatus:
        """Return a member's status, or ``AttendanceStatus.NONE`` if they never responded."""
        record = await self.raid_store.get_attendance(raid_id, member_id)
        if record is None:
            return AttendanceStatus.NONE
        return record.status

    async def delete_all_for_raid(self, raid_id: int) -> int:
        return await self.raid_store.delete_attendance_for_raid(raid_id)

    async def move_to_bench(self, raid_id: int, member_id: int) -> Optional[AttendanceRecord]:
        return await self._move(raid_id, member_id, AttendanceStatus.ON_BENCH)

    async def move_from_bench_to_confirmed(
        self, raid_id: int, member_id: int
    ) -> Optional[AttendanceRecord]:
        return await self._move(raid_id, member_id, AttendanceStatus.CONFIRMED)

    async def _move(
        self, raid_id: int, member_id: int, status: AttendanceStatus
    ) -> Optional[AttendanceRecord]:
        # Shortcuts only act on members who already responded.
        existing = await self.raid_store.get_attendance(raid_id, member_id)
        if existing is None:
            return None
        return await self.set_status(raid_id, member_id, existing.display_name, status)

    async def count_confirmed(self, member_id: int, start: datetime, end: datetime) -> int:
        """Count confirmed attendances for raids scheduled between start and end."""
        return await self.raid_store.count_confirmed_attendance(member_id, start, end)
