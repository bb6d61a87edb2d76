import unittest

from raidplanner.raids.settings import COMMON_TIMEZONES, UserSettingsService

from tests.helpers import TempDatabaseMixin


class TestUserSettings(TempDatabaseMixin, unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        _, self.settings_store = self.make_stores()
        self.service = UserSettingsService(self.settings_store)

    async def test_first_access_creates_empty_settings(self):
        self.assertIsNone(await self.settings_store.find(1))

        settings = await self.service.get(1)
        self.assertEqual(settings.timezone_id, "")
        self.assertFalse(settings.has_timezone)
        self.assertFalse(await self.service.has_timezone(1))
        self.assertIsNotNone(await self.settings_store.find(1))

    async def test_set_valid_timezone(self):
        self.assertTrue(await self.service.set_timezone(1, " Europe/Berlin "))
        self.assertTrue(await self.service.has_timezone(1))
        self.assertEqual((await self.service.get(1)).timezone_id, "Europe/Berlin")

        self.assertTrue(await self.service.set_timezone(1, "Asia/Tokyo"))
        self.assertEqual((await self.service.get(1)).timezone_id, "Asia/Tokyo")

    async def test_unknown_timezone_is_not_stored(self):
        self.assertFalse(await self.service.set_timezone(1, "Atlantis/Capital"))
        self.assertFalse(await self.service.set_timezone(1, ""))
        self.assertIsNone(await self.settings_store.find(1))

    def test_common_timezones_are_available(self):
        self.assertEqual(self.service.common_timezones(), COMMON_TIMEZONES)


if __name__ == "__main__":
    unittest.main()
