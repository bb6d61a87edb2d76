"""SQLite storage for per-user settings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import aiosqlite

from raidplanner.database.raid_store import from_timestamp


@dataclass(frozen=True)
class UserSettingsRecord:
    user_id: int
    timezone_id: str
    updated_at: datetime

    @property
    def has_timezone(self) -> bool:
        return bool(self.timezone_id)


class UserSettingsStore:
    def __init__(self, db_path: str = "data/raids.db"):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialized = False

    async def initialize(self) -> None:
        if self._initialized:
            return
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("PRAGMA journal_mode=WAL")
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS user_settings (
                    user_id INTEGER PRIMARY KEY,
                    timezone_id TEXT NOT NULL DEFAULT '',
                    updated_at INTEGER NOT NULL
                )
                """
            )
            await db.commit()
        self._initialized = True

    def _row_to_settings(self, row) -> UserSettingsRecord:
        return UserSettingsRecord(
            user_id=int(row[0]),
            timezone_id=row[1] or "",
            updated_at=from_timestamp(row[2]),
        )

    async def find(self, user_id: int) -> Optional[UserSettingsRecord]:
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT user_id, timezone_id, updated_at FROM user_settings WHERE user_id = ?",
                (user_id,),
            )
            row = await cursor.fetchone()
            return self._row_to_settings(row) if row else None

    async def get_or_create(self, user_id: int) -> UserSettingsRecord:
        """Return a user's settings, inserting an empty record on first access."""
        await self.initialize()
        now_ts = int(datetime.now(timezone.utc).timestamp())
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT OR IGNORE INTO user_settings (user_id, timezone_id, updated_at)
                VALUES (?, '', ?)
                """,
                (user_id, now_ts),
            )
            cursor = await db.execute(
                "SELECT user_id, timezone_id, updated_at FROM user_settings WHERE user_id = ?",
                (user_id,),
            )
            row = await cursor.fetchone()
            await db.commit()
            return self._row_to_settings(row)

    async def set_timezone(self, user_id: int, timezone_id: str) -> UserSettingsRecord:
        await self.initialize()
        now_ts = int(datetime.now(timezone.utc).timestamp())
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO user_settings (user_id, timezone_id, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(user_id)
                DO UPDATE SET timezone_id = excluded.timezone_id,
                              updated_at = excluded.updated_at
                """,
                (user_id, timezone_id, now_ts),
            )
            await db.commit()
        return UserSettingsRecord(
            user_id=user_id,
            timezone_id=timezone_id,
            updated_at=from_timestamp(now_ts),
        )
