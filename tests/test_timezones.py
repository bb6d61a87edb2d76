import unittest
from datetime import datetime, timedelta, timezone

from raidplanner.errors import InvalidInputError, UnknownZoneError
from raidplanner.raids.timezones import TimeZoneConverter


class TestTimeZoneConverter(unittest.TestCase):

    def setUp(self):
        self.converter = TimeZoneConverter()

    def test_naive_time_is_wall_clock_in_zone(self):
        result = self.converter.to_utc("America/New_York", datetime(2025, 1, 15, 12, 0))
        self.assertEqual(result, datetime(2025, 1, 15, 17, 0, tzinfo=timezone.utc))
        self.assertEqual(result.utcoffset(), timedelta(0))

    def test_daylight_saving_is_applied(self):
        result = self.converter.to_utc("America/New_York", datetime(2025, 7, 15, 12, 0))
        self.assertEqual(result, datetime(2025, 7, 15, 16, 0, tzinfo=timezone.utc))

    def test_aware_time_is_converted_from_its_offset(self):
        local = datetime(2025, 1, 15, 20, 0, tzinfo=timezone(timedelta(hours=9)))
        result = self.converter.to_utc("Europe/Paris", local)
        self.assertEqual(result, datetime(2025, 1, 15, 11, 0, tzinfo=timezone.utc))

    def test_empty_zone_returns_input_unchanged(self):
        local = datetime(2025, 1, 15, 12, 0)
        self.assertIs(self.converter.to_utc("", local), local)

    def test_unknown_zone_raises(self):
        with self.assertRaises(UnknownZoneError) as ctx:
            self.converter.to_utc("Mars/Olympus_Mons", datetime(2025, 1, 15, 12, 0))
        self.assertIsInstance(ctx.exception, InvalidInputError)
        self.assertEqual(ctx.exception.zone_id, "Mars/Olympus_Mons")

    def test_is_valid_zone(self):
        self.assertTrue(self.converter.is_valid_zone("Europe/Stockholm"))
        self.assertFalse(self.converter.is_valid_zone("Not/AZone"))
        self.assertFalse(self.converter.is_valid_zone(""))

    def test_from_utc(self):
        utc_time = datetime(2025, 1, 15, 17, 0, tzinfo=timezone.utc)
        local = self.converter.from_utc("America/New_York", utc_time)
        self.assertEqual((local.hour, local.minute), (12, 0))

    def test_zone_ids_are_sorted(self):
        zones = self.converter.list_zone_ids()
        self.assertIn("Europe/Paris", zones)
        self.assertEqual(zones, sorted(zones))


if __name__ == "__main__":
    unittest.main()
