"""Shared fixtures for the raid engine tests."""

import os
import tempfile
from datetime import datetime, timezone
from typing import List, Optional, Set, Tuple

from raidplanner.database import RaidStore, UserSettingsStore
from raidplanner.errors import ExternalUnavailableError
from raidplanner.raids.notifications import RaidMessage


FIXED_NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)

GUILD_ID = 1
CHANNEL_ID = 100


def fixed_clock(value: datetime = FIXED_NOW):
    return lambda: value


class FakeHub:
    """In-memory NotificationHub that records every call."""

    def __init__(self):
        self.sent: List[Tuple[int, RaidMessage, int]] = []
        self.updated: List[Tuple[int, int, RaidMessage]] = []
        self.deleted: List[Tuple[int, int]] = []
        self.failing_channels: Set[int] = set()
        self.update_result = True
        self.update_error: Optional[Exception] = None
        self.delete_error: Optional[Exception] = None
        self._next_id = 5000

    async def send(self, channel_id: int, message: RaidMessage) -> int:
        if channel_id in self.failing_channels:
            raise ExternalUnavailableError(f"channel {channel_id} unavailable")
        self._next_id += 1
        self.sent.append((channel_id, message, self._next_id))
        return self._next_id

    async def update(self, channel_id: int, message_id: int, message: RaidMessage) -> bool:
        if self.update_error is not None:
            raise self.update_error
        self.updated.append((channel_id, message_id, message))
        return self.update_result

    async def delete(self, channel_id: int, message_id: int) -> bool:
        if self.delete_error is not None:
            raise self.delete_error
        self.deleted.append((channel_id, message_id))
        return True


class TempDatabaseMixin:
    """Creates stores on a fresh SQLite file per test."""

    def make_stores(self) -> Tuple[RaidStore, UserSettingsStore]:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmpdir.cleanup)
        db_path = os.path.join(self._tmpdir.name, "raids.db")
        return RaidStore(db_path), UserSettingsStore(db_path)
