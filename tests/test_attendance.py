import unittest
from datetime import timedelta

from raidplanner.database.raid_store import AttendanceStatus
from raidplanner.errors import InvalidInputError, RaidNotFoundError
from raidplanner.raids.attendance import AttendanceTracker
from raidplanner.raids.signals import RaidSignalBus

from tests.helpers import CHANNEL_ID, FIXED_NOW, GUILD_ID, TempDatabaseMixin, fixed_clock


class TestAttendanceTracker(TempDatabaseMixin, unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.store, _ = self.make_stores()
        self.signals = RaidSignalBus()
        self.published = []

        async def record(raid_id):
            self.published.append(raid_id)

        self.signals.subscribe(record)
        self.tracker = AttendanceTracker(self.store, self.signals, clock=fixed_clock())
        self.raid = await self.store.create_raid(
            "Savage Night", "", FIXED_NOW + timedelta(days=2), "Limsa", GUILD_ID, CHANNEL_ID
        )

    async def test_set_status_keeps_one_record_per_member(self):
        await self.tracker.set_status(self.raid.id, 1, "Alice", AttendanceStatus.PENDING)
        await self.tracker.set_status(self.raid.id, 1, "Alice", AttendanceStatus.CONFIRMED)

        records = await self.tracker.list_by_raid(self.raid.id)
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].status, AttendanceStatus.CONFIRMED)
        self.assertEqual(records[0].responded_at, FIXED_NOW)
        self.assertEqual(self.published, [self.raid.id, self.raid.id])

    async def test_missing_note_keeps_previous_note(self):
        await self.tracker.set_status(
            self.raid.id, 1, "Alice", AttendanceStatus.DECLINED, note="work trip"
        )
        record = await self.tracker.set_status(self.raid.id, 1, "Alice", AttendanceStatus.PENDING)
        self.assertEqual(record.note, "work trip")

        record = await self.tracker.set_status(
            self.raid.id, 1, "Alice", AttendanceStatus.CONFIRMED, note="back early"
        )
        self.assertEqual(record.note, "back early")

    async def test_none_status_is_rejected(self):
        with self.assertRaises(InvalidInputError):
            await self.tracker.set_status(self.raid.id, 1, "Alice", AttendanceStatus.NONE)
        self.assertEqual(await self.tracker.list_by_raid(self.raid.id), [])
        self.assertEqual(self.published, [])

    async def test_get_status_without_record_is_none(self):
        self.assertIs(await self.tracker.get_status(self.raid.id, 42), AttendanceStatus.NONE)

    async def test_unknown_raid_is_rejected_by_default(self):
        with self.assertRaises(RaidNotFoundError):
            await self.tracker.set_status(999, 1, "Alice", AttendanceStatus.CONFIRMED)
        self.assertIsNone(await self.store.get_attendance(999, 1))

    async def test_unknown_raid_allowed_when_check_disabled(self):
        tracker = AttendanceTracker(
            self.store, self.signals, require_raid=False, clock=fixed_clock()
        )
        record = await tracker.set_status(999, 1, "Alice", AttendanceStatus.CONFIRMED)
        self.assertEqual(record.raid_id, 999)
        self.assertIsNotNone(await self.store.get_attendance(999, 1))

    async def test_bench_moves(self):
        await self.tracker.set_status(self.raid.id, 1, "Alice", AttendanceStatus.CONFIRMED)
        await self.tracker.set_status(self.raid.id, 2, "Bob", AttendanceStatus.BENCH_REQUESTED)

        moved = await self.tracker.move_to_bench(self.raid.id, 1)
        self.assertEqual(moved.status, AttendanceStatus.ON_BENCH)
        self.assertEqual(moved.display_name, "Alice")

        bench = await self.tracker.list_bench(self.raid.id)
        self.assertEqual([record.member_id for record in bench], [1, 2])

        back = await self.tracker.move_from_bench_to_confirmed(self.raid.id, 2)
        self.assertEqual(back.status, AttendanceStatus.CONFIRMED)
        confirmed = await self.tracker.list_confirmed(self.raid.id)
        self.assertEqual([record.member_id for record in confirmed], [2])

    async def test_moves_ignore_members_without_record(self):
        self.assertIsNone(await self.tracker.move_to_bench(self.raid.id, 7))
        self.assertIsNone(await self.tracker.move_from_bench_to_confirmed(self.raid.id, 7))
        self.assertEqual(self.published, [])

    async def test_list_is_grouped_by_status_then_name(self):
        await self.tracker.set_status(self.raid.id, 1, "zoe", AttendanceStatus.CONFIRMED)
        await self.tracker.set_status(self.raid.id, 2, "Adam", AttendanceStatus.CONFIRMED)
        await self.tracker.set_status(self.raid.id, 3, "Mia", AttendanceStatus.PENDING)
        await self.tracker.set_status(self.raid.id, 4, "Bea", AttendanceStatus.DECLINED)

        records = await self.tracker.list_by_raid(self.raid.id)
        self.assertEqual([record.display_name for record in records], ["Mia", "Adam", "zoe", "Bea"])

        pending = await self.tracker.list_pending(self.raid.id)
        self.assertEqual([record.member_id for record in pending], [3])

    async def test_delete_all_for_raid(self):
        await self.tracker.set_status(self.raid.id, 1, "Alice", AttendanceStatus.CONFIRMED)
        await self.tracker.set_status(self.raid.id, 2, "Bob", AttendanceStatus.PENDING)

        self.assertEqual(await self.tracker.delete_all_for_raid(self.raid.id), 2)
        self.assertEqual(await self.tracker.list_by_raid(self.raid.id), [])

    async def test_count_confirmed_in_window(self):
        later = await self.store.create_raid(
            "Later", "", FIXED_NOW + timedelta(days=20), "", GUILD_ID, CHANNEL_ID
        )
        await self.tracker.set_status(self.raid.id, 1, "Alice", AttendanceStatus.CONFIRMED)
        await self.tracker.set_status(later.id, 1, "Alice", AttendanceStatus.CONFIRMED)

        count = await self.tracker.count_confirmed(1, FIXED_NOW, FIXED_NOW + timedelta(days=7))
        self.assertEqual(count, 1)
        count = await self.tracker.count_confirmed(1, FIXED_NOW, FIXED_NOW + timedelta(days=30))
        self.assertEqual(count, 2)

    async def test_count_confirmed_bounds_are_exact(self):
        await self.tracker.set_status(self.raid.id, 1, "Alice", AttendanceStatus.CONFIRMED)
        scheduled = self.raid.scheduled_at
        half_second = timedelta(milliseconds=500)

        self.assertEqual(await self.tracker.count_confirmed(1, scheduled, scheduled), 1)
        self.assertEqual(
            await self.tracker.count_confirmed(1, scheduled + half_second, scheduled + timedelta(days=1)),
            0,
        )
        self.assertEqual(
            await self.tracker.count_confirmed(1, scheduled - timedelta(days=1), scheduled - half_second),
            0,
        )


if __name__ == "__main__":
    unittest.main()
