"""Wall-clock to UTC conversion backed by the IANA timezone database."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

from raidplanner.errors import UnknownZoneError


class TimeZoneConverter:
    """Stateless converter between named zones and UTC."""

    def get_zone(self, zone_id: str) -> ZoneInfo:
        try:
            return ZoneInfo(zone_id)
        except (ZoneInfoNotFoundError, ValueError):
            raise UnknownZoneError(zone_id) from None

    def is_valid_zone(self, zone_id: str) -> bool:
        if not zone_id:
            return False
        try:
            self.get_zone(zone_id)
        except UnknownZoneError:
            return False
        return True

    def to_utc(self, zone_id: str, local_time: datetime) -> datetime:
        """
        Convert a local wall-clock time in ``zone_id`` to UTC.

        An empty zone id means "no zone configured": the input is returned
        unchanged. Naive datetimes are read as wall-clock time in the zone;
        aware datetimes are converted from their own offset.

        Raises:
            UnknownZoneError: if ``zone_id`` is not a known IANA zone
        """
        if not zone_id:
            return local_time

        tz = self.get_zone(zone_id)
        if local_time.tzinfo is None:
            local_time = local_time.replace(tzinfo=tz)
        return local_time.astimezone(timezone.utc)

    def from_utc(self, zone_id: str, utc_time: datetime) -> datetime:
        if not zone_id:
            return utc_time
        if utc_time.tzinfo is None:
            utc_time = utc_time.replace(tzinfo=timezone.utc)
        return utc_time.astimezone(self.get_zone(zone_id))

    def list_zone_ids(self) -> List[str]:
        """Return all known zone ids, sorted."""
        return sorted(available_timezones())
