"""SQLite storage for raids, attendance, compositions and characters."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional

import aiosqlite

from raidplanner.raids.jobs import JobType


logger = logging.getLogger("raidplanner.raid_store")


class AttendanceStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    BENCH_REQUESTED = "bench_requested"
    ON_BENCH = "on_bench"
    # Returned by lookups when a member never responded; never stored.
    NONE = "none"


STATUS_ORDER = [
    AttendanceStatus.PENDING,
    AttendanceStatus.CONFIRMED,
    AttendanceStatus.DECLINED,
    AttendanceStatus.BENCH_REQUESTED,
    AttendanceStatus.ON_BENCH,
]

BENCH_STATUSES = (AttendanceStatus.BENCH_REQUESTED, AttendanceStatus.ON_BENCH)


def to_timestamp(value: datetime, round_up: bool = False) -> int:
    """
    Epoch seconds for an aware datetime.

    Stored values are whole seconds. Against an integer column,
    ``col > t`` and ``col <= t`` need ``t`` rounded down, while
    ``col >= t`` and ``col < t`` need it rounded up (``round_up=True``).
    """
    if value.tzinfo is None:
        raise ValueError("Naive datetimes are not accepted; pass a UTC-aware value")
    seconds = value.timestamp()
    return math.ceil(seconds) if round_up else math.floor(seconds)


def from_timestamp(value: Optional[int]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), timezone.utc)


@dataclass(frozen=True)
class RaidRecord:
    """Represents a stored raid."""

    id: int
    name: str
    description: str
    scheduled_at: datetime
    location: str
    is_archived: bool
    guild_id: int
    channel_id: int
    message_id: Optional[int]
    reminder_message_id: Optional[int]
    final_reminder_sent_at: Optional[datetime]
    created_at: datetime


@dataclass(frozen=True)
class AttendanceRecord:
    raid_id: int
    member_id: int
    display_name: str
    status: AttendanceStatus
    responded_at: Optional[datetime]
    note: Optional[str]


@dataclass(frozen=True)
class CharacterRecord:
    id: int
    user_id: int
    name: str
    world: str
    preferred_job: JobType
    secondary_jobs: List[JobType] = field(default_factory=list)


@dataclass(frozen=True)
class CompositionRecord:
    raid_id: int
    member_id: int
    character_id: int
    character_name: str
    job: JobType
    sub_role: Optional[str]


_RAID_COLUMNS = """
    id, name, description, scheduled_at, location, is_archived, guild_id,
    channel_id, message_id, reminder_message_id, final_reminder_sent_at, created_at
"""

_ATTENDANCE_COLUMNS = "raid_id, member_id, display_name, status, responded_at, note"

_CHARACTER_COLUMNS = "id, user_id, name, world, preferred_job, secondary_jobs"

_COMPOSITION_SELECT = """
    SELECT c.raid_id, c.member_id, c.character_id, ch.name, c.job, c.sub_role
    FROM raid_compositions c
    LEFT JOIN characters ch ON ch.id = c.character_id
"""


class RaidStore:
    """SQLite-based storage for raids and everything keyed to them."""

    def __init__(self, db_path: str = "data/raids.db"):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialized = False

    async def initialize(self) -> None:
        """Ensure the database schema exists."""
        if self._initialized:
            return

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("PRAGMA journal_mode=WAL")

            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS raids (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    scheduled_at INTEGER NOT NULL,
                    location TEXT NOT NULL DEFAULT '',
                    is_archived INTEGER NOT NULL DEFAULT 0,
                    guild_id INTEGER NOT NULL,
                    channel_id INTEGER NOT NULL,
                    message_id INTEGER,
                    reminder_message_id INTEGER,
                    final_reminder_sent_at INTEGER,
                    created_at INTEGER NOT NULL
                )
                """
            )

            await db.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_raids_guild_schedule
                ON raids(guild_id, scheduled_at)
                """
            )

            await db.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_raids_reminder_message
                ON raids(reminder_message_id)
                """
            )

            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS raid_attendance (
                    raid_id INTEGER NOT NULL,
                    member_id INTEGER NOT NULL,
                    display_name TEXT NOT NULL,
                    status TEXT NOT NULL,
                    responded_at INTEGER,
                    note TEXT,
                    PRIMARY KEY (raid_id, member_id)
                )
                """
            )

            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS characters (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    world TEXT NOT NULL,
                    preferred_job TEXT NOT NULL,
                    secondary_jobs TEXT NOT NULL DEFAULT '[]',
                    UNIQUE (user_id, name)
                )
                """
            )

            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS raid_compositions (
                    raid_id INTEGER NOT NULL,
                    member_id INTEGER NOT NULL,
                    character_id INTEGER NOT NULL,
                    job TEXT NOT NULL,
                    sub_role TEXT,
                    assigned_at INTEGER NOT NULL,
                    PRIMARY KEY (raid_id, member_id)
                )
                """
            )

            await db.commit()

        self._initialized = True
        logger.info("Raid store initialized at %s", self.db_path)

    @staticmethod
    def _row_to_raid(row) -> RaidRecord:
        return RaidRecord(
            id=row[0],
            name=row[1],
            description=row[2] or "",
            scheduled_at=from_timestamp(row[3]),
            location=row[4] or "",
            is_archived=bool(row[5]),
            guild_id=int(row[6]),
            channel_id=int(row[7]),
            message_id=int(row[8]) if row[8] else None,
            reminder_message_id=int(row[9]) if row[9] else None,
            final_reminder_sent_at=from_timestamp(row[10]),
            created_at=from_timestamp(row[11]),
        )

    @staticmethod
    def _row_to_attendance(row) -> AttendanceRecord:
        return AttendanceRecord(
            raid_id=int(row[0]),
            member_id=int(row[1]),
            display_name=row[2],
            status=AttendanceStatus(row[3]),
            responded_at=from_timestamp(row[4]),
            note=row[5],
        )

    @staticmethod
    def _row_to_character(row) -> CharacterRecord:
        return CharacterRecord(
            id=int(row[0]),
            user_id=int(row[1]),
            name=row[2],
            world=row[3],
            preferred_job=JobType(row[4]),
            secondary_jobs=[JobType(job) for job in json.loads(row[5] or "[]")],
        )

    @staticmethod
    def _row_to_composition(row) -> CompositionRecord:
        return CompositionRecord(
            raid_id=int(row[0]),
            member_id=int(row[1]),
            character_id=int(row[2]),
            character_name=row[3] or "",
            job=JobType(row[4]),
            sub_role=row[5],
        )

    # Raids

    async def create_raid(
        self,
        name: str,
        description: str,
        scheduled_at: datetime,
        location: str,
        guild_id: int,
        channel_id: int,
    ) -> RaidRecord:
        """Insert a raid and return the stored record."""
        await self.initialize()
        created_at = int(datetime.now(timezone.utc).timestamp())

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO raids (
                    name,
                    description,
                    scheduled_at,
                    location,
                    is_archived,
                    guild_id,
                    channel_id,
                    created_at
                ) VALUES (?, ?, ?, ?, 0, ?, ?, ?)
                """,
                (
                    name,
                    description or "",
                    to_timestamp(scheduled_at, round_up=True),
                    location or "",
                    guild_id,
                    channel_id,
                    created_at,
                ),
            )
            raid_id = cursor.lastrowid
            await db.commit()

        raid = await self.get_raid(raid_id)
        return raid

    async def get_raid(self, raid_id: int) -> Optional[RaidRecord]:
        """Fetch a raid by ID."""
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"SELECT {_RAID_COLUMNS} FROM raids WHERE id = ?",
                (raid_id,),
            )
            row = await cursor.fetchone()
            return self._row_to_raid(row) if row else None

    async def raid_exists(self, raid_id: int) -> bool:
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT 1 FROM raids WHERE id = ?", (raid_id,))
            return await cursor.fetchone() is not None

    async def get_raid_by_reminder_message_id(self, message_id: int) -> Optional[RaidRecord]:
        """Fetch the raid whose advance reminder is the given message."""
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"SELECT {_RAID_COLUMNS} FROM raids WHERE reminder_message_id = ?",
                (message_id,),
            )
            row = await cursor.fetchone()
            return self._row_to_raid(row) if row else None

    async def replace_message_id(
        self,
        raid_id: int,
        message_id: int,
        expected: Optional[int],
    ) -> bool:
        """
        Store the public raid message if the current handle is still ``expected``.

        Returns False when another render stored a different handle first.
        """
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "UPDATE raids SET message_id = ? WHERE id = ? AND message_id IS ?",
                (message_id, raid_id, expected),
            )
            await db.commit()
            return cursor.rowcount > 0

    async def set_reminder_message_id(self, raid_id: int, message_id: int) -> None:
        """Store the advance reminder message; the raid leaves the advance window for good."""
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "UPDATE raids SET reminder_message_id = ? WHERE id = ?",
                (message_id, raid_id),
            )
            await db.commit()

    async def mark_final_reminder_sent(self, raid_id: int, sent_at: datetime) -> None:
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "UPDATE raids SET final_reminder_sent_at = ? WHERE id = ?",
                (to_timestamp(sent_at), raid_id),
            )
            await db.commit()

    async def archive_raid(self, raid_id: int) -> bool:
        """Mark a raid as archived. Returns False if it was missing or already archived."""
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "UPDATE raids SET is_archived = 1 WHERE id = ? AND is_archived = 0",
                (raid_id,),
            )
            await db.commit()
            return cursor.rowcount > 0

    async def delete_raid(self, raid_id: int) -> bool:
        """Delete a raid together with its attendance and composition rows."""
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM raid_attendance WHERE raid_id = ?", (raid_id,))
            await db.execute("DELETE FROM raid_compositions WHERE raid_id = ?", (raid_id,))
            cursor = await db.execute("DELETE FROM raids WHERE id = ?", (raid_id,))
            await db.commit()
            return cursor.rowcount > 0

    async def list_upcoming_raids(
        self,
        guild_id: int,
        now: datetime,
        limit: Optional[int] = None,
    ) -> List[RaidRecord]:
        """Return unarchived raids of a guild scheduled after ``now``, soonest first."""
        await self.initialize()
        query = f"""
            SELECT {_RAID_COLUMNS}
            FROM raids
            WHERE guild_id = ? AND is_archived = 0 AND scheduled_at > ?
            ORDER BY scheduled_at ASC, id ASC
        """
        params = [guild_id, to_timestamp(now)]
        if limit is not None:
            query += " LIMIT ?"
            params.append(int(limit))

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(query, tuple(params))
            rows = await cursor.fetchall()
            return [self._row_to_raid(row) for row in rows]

    async def list_raids_in_window(
        self,
        start: datetime,
        end: datetime,
        without_reminder: bool = False,
        without_final_reminder: bool = False,
    ) -> List[RaidRecord]:
        """Return unarchived raids with start < scheduled_at < end."""
        await self.initialize()
        query = f"""
            SELECT {_RAID_COLUMNS}
            FROM raids
            WHERE is_archived = 0 AND scheduled_at > ? AND scheduled_at < ?
        """
        if without_reminder:
            query += " AND reminder_message_id IS NULL"
        if without_final_reminder:
            query += " AND final_reminder_sent_at IS NULL"
        query += " ORDER BY scheduled_at ASC"

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                query, (to_timestamp(start), to_timestamp(end, round_up=True))
            )
            rows = await cursor.fetchall()
            return [self._row_to_raid(row) for row in rows]

    # Attendance

    async def upsert_attendance(
        self,
        raid_id: int,
        member_id: int,
        display_name: str,
        status: AttendanceStatus,
        responded_at: datetime,
        note: Optional[str] = None,
    ) -> AttendanceRecord:
        """Insert or update a member's attendance; a missing note keeps the stored one."""
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO raid_attendance (
                    raid_id, member_id, display_name, status, responded_at, note
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(raid_id, member_id)
                DO UPDATE SET display_name = excluded.display_name,
                              status = excluded.status,
                              responded_at = excluded.responded_at,
                              note = COALESCE(excluded.note, raid_attendance.note)
                """,
                (
                    raid_id,
                    member_id,
                    display_name,
                    AttendanceStatus(status).value,
                    to_timestamp(responded_at),
                    note,
                ),
            )
            cursor = await db.execute(
                f"""
                SELECT {_ATTENDANCE_COLUMNS}
                FROM raid_attendance
                WHERE raid_id = ? AND member_id = ?
                """,
                (raid_id, member_id),
            )
            row = await cursor.fetchone()
            await db.commit()
            return self._row_to_attendance(row)

    async def get_attendance(self, raid_id: int, member_id: int) -> Optional[AttendanceRecord]:
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"""
                SELECT {_ATTENDANCE_COLUMNS}
                FROM raid_attendance
                WHERE raid_id = ? AND member_id = ?
                """,
                (raid_id, member_id),
            )
            row = await cursor.fetchone()
            return self._row_to_attendance(row) if row else None

    async def list_attendance(self, raid_id: int) -> List[AttendanceRecord]:
        """Return attendance ordered by status group, then display name."""
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"SELECT {_ATTENDANCE_COLUMNS} FROM raid_attendance WHERE raid_id = ?",
                (raid_id,),
            )
            rows = await cursor.fetchall()

        records = [self._row_to_attendance(row) for row in rows]
        records.sort(
            key=lambda record: (
                STATUS_ORDER.index(record.status),
                record.display_name.casefold(),
                record.member_id,
            )
        )
        return records

    async def list_attendance_by_status(
        self,
        raid_id: int,
        statuses: Iterable[AttendanceStatus],
    ) -> List[AttendanceRecord]:
        await self.initialize()
        values = [AttendanceStatus(status).value for status in statuses]
        if not values:
            return []
        placeholders = ",".join("?" for _ in values)
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"""
                SELECT {_ATTENDANCE_COLUMNS}
                FROM raid_attendance
                WHERE raid_id = ? AND status IN ({placeholders})
                ORDER BY display_name COLLATE NOCASE ASC, member_id ASC
                """,
                (raid_id, *values),
            )
            rows = await cursor.fetchall()
            return [self._row_to_attendance(row) for row in rows]

    async def delete_attendance_for_raid(self, raid_id: int) -> int:
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "DELETE FROM raid_attendance WHERE raid_id = ?",
                (raid_id,),
            )
            await db.commit()
            return cursor.rowcount

    async def count_confirmed_attendance(
        self,
        member_id: int,
        start: datetime,
        end: datetime,
    ) -> int:
        """Count confirmed attendances for raids scheduled within [start, end]."""
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT COUNT(*)
                FROM raid_attendance a
                JOIN raids r ON a.raid_id = r.id
                WHERE a.member_id = ?
                  AND a.status = ?
                  AND r.scheduled_at >= ?
                  AND r.scheduled_at <= ?
                """,
                (
                    member_id,
                    AttendanceStatus.CONFIRMED.value,
                    to_timestamp(start, round_up=True),
                    to_timestamp(end),
                ),
            )
            row = await cursor.fetchone()
            return int(row[0]) if row else 0

    # Characters

    async def upsert_character(
        self,
        user_id: int,
        name: str,
        world: str,
        preferred_job: JobType,
        secondary_jobs: Optional[List[JobType]] = None,
    ) -> CharacterRecord:
        """Register a character, or update its jobs if the user already has one by that name."""
        await self.initialize()
        replace_secondary = secondary_jobs is not None
        secondary_json = json.dumps([JobType(job).value for job in (secondary_jobs or [])])
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO characters (user_id, name, world, preferred_job, secondary_jobs)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(user_id, name)
                DO UPDATE SET preferred_job = excluded.preferred_job,
                              secondary_jobs = CASE WHEN ?
                                  THEN excluded.secondary_jobs
                                  ELSE characters.secondary_jobs
                              END
                """,
                (
                    user_id,
                    name,
                    world,
                    JobType(preferred_job).value,
                    secondary_json,
                    1 if replace_secondary else 0,
                ),
            )
            cursor = await db.execute(
                f"SELECT {_CHARACTER_COLUMNS} FROM characters WHERE user_id = ? AND name = ?",
                (user_id, name),
            )
            row = await cursor.fetchone()
            await db.commit()
            return self._row_to_character(row)

    async def get_character(self, character_id: int) -> Optional[CharacterRecord]:
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"SELECT {_CHARACTER_COLUMNS} FROM characters WHERE id = ?",
                (character_id,),
            )
            row = await cursor.fetchone()
            return self._row_to_character(row) if row else None

    async def list_user_characters(self, user_id: int) -> List[CharacterRecord]:
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"SELECT {_CHARACTER_COLUMNS} FROM characters WHERE user_id = ? ORDER BY id ASC",
                (user_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_character(row) for row in rows]

    # Compositions

    async def assign_job(
        self,
        raid_id: int,
        member_id: int,
        character_id: int,
        job: JobType,
        sub_role: Optional[str],
        display_name: str,
        assigned_at: datetime,
    ) -> CompositionRecord:
        """
        Upsert a member's job slot and confirm their attendance in one transaction.

        A ``None`` sub-role keeps the previously stored label. An attendance
        record that is already confirmed is left untouched.
        """
        await self.initialize()
        assigned_ts = to_timestamp(assigned_at)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO raid_compositions (
                    raid_id, member_id, character_id, job, sub_role, assigned_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(raid_id, member_id)
                DO UPDATE SET character_id = excluded.character_id,
                              job = excluded.job,
                              sub_role = COALESCE(excluded.sub_role, raid_compositions.sub_role),
                              assigned_at = excluded.assigned_at
                """,
                (raid_id, member_id, character_id, JobType(job).value, sub_role, assigned_ts),
            )
            await db.execute(
                """
                INSERT INTO raid_attendance (
                    raid_id, member_id, display_name, status, responded_at, note
                ) VALUES (?, ?, ?, ?, ?, NULL)
                ON CONFLICT(raid_id, member_id)
                DO UPDATE SET status = excluded.status,
                              responded_at = excluded.responded_at
                WHERE raid_attendance.status != excluded.status
                """,
                (
                    raid_id,
                    member_id,
                    display_name,
                    AttendanceStatus.CONFIRMED.value,
                    assigned_ts,
                ),
            )
            cursor = await db.execute(
                f"{_COMPOSITION_SELECT} WHERE c.raid_id = ? AND c.member_id = ?",
                (raid_id, member_id),
            )
            row = await cursor.fetchone()
            await db.commit()
            return self._row_to_composition(row)

    async def list_compositions(self, raid_id: int) -> List[CompositionRecord]:
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"{_COMPOSITION_SELECT} WHERE c.raid_id = ? ORDER BY c.assigned_at ASC, c.member_id ASC",
                (raid_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_composition(row) for row in rows]

    async def remove_composition(self, raid_id: int, member_id: int) -> bool:
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "DELETE FROM raid_compositions WHERE raid_id = ? AND member_id = ?",
                (raid_id, member_id),
            )
            await db.commit()
            return cursor.rowcount > 0

    async def count_rows_for_raid(self, raid_id: int) -> int:
        """Return how many attendance and composition rows reference a raid."""
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT
                    (SELECT COUNT(*) FROM raid_attendance WHERE raid_id = ?)
                  + (SELECT COUNT(*) FROM raid_compositions WHERE raid_id = ?)
                """,
                (raid_id, raid_id),
            )
            row = await cursor.fetchone()
            return int(row[0]) if row else 0
