import unittest
from datetime import datetime, timedelta

from raidplanner.database.raid_store import (
    AttendanceRecord,
    AttendanceStatus,
    CompositionRecord,
    RaidRecord,
)
from raidplanner.errors import InvalidInputError
from raidplanner.raids.jobs import ROLE_DPS, ROLE_HEALER, ROLE_TANK, JobType
from raidplanner.raids.notifications import COLOR_REMINDER, COLOR_SUCCESS
from raidplanner.utils.raid_utils import (
    REMINDER_REACTIONS,
    build_composition_message,
    build_raid_list_message,
    build_raid_message,
    build_reminder_message,
    parse_raid_datetime,
    summarize_attendance,
)

from tests.helpers import CHANNEL_ID, FIXED_NOW, GUILD_ID


def make_raid(raid_id: int = 1, archived: bool = False, offset: timedelta = timedelta(days=1)) -> RaidRecord:
    return RaidRecord(
        id=raid_id,
        name=f"Raid {raid_id}",
        description="Prog night",
        scheduled_at=FIXED_NOW + offset,
        location="Limsa",
        is_archived=archived,
        guild_id=GUILD_ID,
        channel_id=CHANNEL_ID,
        message_id=None,
        reminder_message_id=None,
        final_reminder_sent_at=None,
        created_at=FIXED_NOW,
    )


def make_attendance(member_id: int, status: AttendanceStatus) -> AttendanceRecord:
    return AttendanceRecord(1, member_id, f"Member {member_id}", status, FIXED_NOW, None)


class TestParseRaidDatetime(unittest.TestCase):

    def test_iso_and_european_formats(self):
        self.assertEqual(parse_raid_datetime("2025-01-16", "20:30"), datetime(2025, 1, 16, 20, 30))
        self.assertEqual(parse_raid_datetime("16.01.2025", " 20:30 "), datetime(2025, 1, 16, 20, 30))

    def test_invalid_input(self):
        for date_str, time_str in (("2025-02-30", "20:00"), ("2025-01-16", "25:00"), ("", "")):
            with self.assertRaises(InvalidInputError):
                parse_raid_datetime(date_str, time_str)


class TestMessages(unittest.TestCase):

    def test_summary_merges_bench_states(self):
        summary = summarize_attendance([
            make_attendance(1, AttendanceStatus.CONFIRMED),
            make_attendance(2, AttendanceStatus.BENCH_REQUESTED),
            make_attendance(3, AttendanceStatus.ON_BENCH),
            make_attendance(4, AttendanceStatus.PENDING),
        ])
        self.assertEqual(summary, {"confirmed": 1, "pending": 1, "declined": 0, "bench": 2})

    def test_raid_message_without_compositions_has_no_role_fields(self):
        message = build_raid_message(make_raid(), [make_attendance(1, AttendanceStatus.CONFIRMED)], [])
        self.assertEqual([field.name for field in message.fields], ["Time", "Location", "Attendance"])
        self.assertEqual(message.footer, "Raid ID: 1")

    def test_archived_raid_footer(self):
        message = build_raid_message(make_raid(archived=True), [], [])
        self.assertEqual(message.footer, "Raid ID: 1 · Archived")

    def test_reminder_message(self):
        pending = [make_attendance(7, AttendanceStatus.PENDING), make_attendance(8, AttendanceStatus.PENDING)]
        message = build_reminder_message(make_raid(), pending)

        self.assertEqual(message.content, "<@7> <@8>")
        self.assertEqual(message.reactions, REMINDER_REACTIONS)
        self.assertEqual(message.color, COLOR_REMINDER)
        values = {field.name: field.value for field in message.fields}
        self.assertEqual(values["Pending Responses"], "2")

    def test_composition_message_color_tracks_validity(self):
        entries = [
            CompositionRecord(1, 1, 1, "Tank", JobType.PLD, "MT"),
        ]
        invalid = build_composition_message(make_raid(), entries, {ROLE_TANK: 1, ROLE_HEALER: 0, ROLE_DPS: 0})
        self.assertEqual(invalid.color, COLOR_REMINDER)
        self.assertIn("Tanks (1/2)", invalid.fields[0].name)

        valid = build_composition_message(make_raid(), entries, {ROLE_TANK: 2, ROLE_HEALER: 2, ROLE_DPS: 4})
        self.assertEqual(valid.color, COLOR_SUCCESS)

    def test_raid_list_is_truncated(self):
        raids = [make_raid(raid_id) for raid_id in range(1, 13)]
        message = build_raid_list_message(raids, limit=10)
        self.assertEqual(len(message.fields), 10)
        self.assertEqual(message.footer, "Showing 10 of 12 upcoming raids.")


if __name__ == "__main__":
    unittest.main()
