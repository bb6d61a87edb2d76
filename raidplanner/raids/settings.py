"""Per-user timezone preferences."""

from __future__ import annotations

import logging
from typing import List, Optional

from raidplanner.database.settings_store import UserSettingsRecord, UserSettingsStore
from raidplanner.raids.timezones import TimeZoneConverter


logger = logging.getLogger("raidplanner.settings")

COMMON_TIMEZONES = [
    "Europe/London",
    "Europe/Paris",
    "Europe/Stockholm",
    "America/New_York",
    "America/Los_Angeles",
    "Asia/Tokyo",
    "Australia/Sydney",
    "Pacific/Auckland",
]


class UserSettingsService:
    def __init__(
        self,
        settings_store: UserSettingsStore,
        converter: Optional[TimeZoneConverter] = None,
    ):
        self.settings_store = settings_store
        self.converter = converter or TimeZoneConverter()

    async def get(self, user_id: int) -> UserSettingsRecord:
        return await self.settings_store.get_or_create(user_id)

    async def has_timezone(self, user_id: int) -> bool:
        settings = await self.settings_store.find(user_id)
        return settings is not None and settings.has_timezone

    async def set_timezone(self, user_id: int, timezone_id: str) -> bool:
        """Store a timezone after validating it. Returns False for unknown zones."""
        timezone_id = (timezone_id or "").strip()
        if not self.converter.is_valid_zone(timezone_id):
            logger.info("User %s tried unknown timezone %r", user_id, timezone_id)
            return False
        await self.settings_store.set_timezone(user_id, timezone_id)
        return True

    def available_timezones(self) -> List[str]:
        return self.converter.list_zone_ids()

    def common_timezones(self) -> List[str]:
        available = set(self.available_timezones())
        return [zone for zone in COMMON_TIMEZONES if zone in available]
