"""Shared helpers for raid scheduling and roster payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Sequence

from raidplanner.database.raid_store import (
    BENCH_STATUSES,
    AttendanceRecord,
    AttendanceStatus,
    CharacterRecord,
    CompositionRecord,
    RaidRecord,
)
from raidplanner.errors import InvalidInputError
from raidplanner.raids.jobs import (
    ROLE_EMOJIS,
    ROLE_LABELS,
    ROLE_ORDER,
    STANDARD_PARTY,
    get_job_emoji,
    get_role,
    is_standard_party,
)
from raidplanner.raids.notifications import (
    COLOR_INFO,
    COLOR_REMINDER,
    COLOR_SUCCESS,
    COLOR_URGENT,
    RaidMessage,
)


CONFIRM_EMOJI = "✅"
DECLINE_EMOJI = "❌"
BENCH_EMOJI = "🪑"

REMINDER_REACTIONS = (CONFIRM_EMOJI, DECLINE_EMOJI, BENCH_EMOJI)

REACTION_STATUSES = {
    CONFIRM_EMOJI: AttendanceStatus.CONFIRMED,
    DECLINE_EMOJI: AttendanceStatus.DECLINED,
    BENCH_EMOJI: AttendanceStatus.BENCH_REQUESTED,
}

STATUS_LABELS = {
    AttendanceStatus.PENDING: "Pending",
    AttendanceStatus.CONFIRMED: "Confirmed",
    AttendanceStatus.DECLINED: "Declined",
    AttendanceStatus.BENCH_REQUESTED: "Bench requested",
    AttendanceStatus.ON_BENCH: "On bench",
    AttendanceStatus.NONE: "No response",
}

DATE_FORMATS = ("%Y-%m-%d %H:%M", "%d.%m.%Y %H:%M")

EMPTY_ROLE = "None assigned"


def parse_raid_datetime(date_str: str, time_str: str) -> datetime:
    """Parse raid date/time strings into a naive wall-clock datetime."""
    value = f"{(date_str or '').strip()} {(time_str or '').strip()}"
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    raise InvalidInputError(
        "Invalid date or time format. Please use YYYY-MM-DD (or DD.MM.YYYY) and HH:MM."
    )


def format_time(value: datetime) -> str:
    return value.strftime("%a, %d %b %Y %H:%M UTC")


def format_mention(member_id: int) -> str:
    return f"<@{member_id}>"


def format_mentions(records: Iterable[AttendanceRecord]) -> str:
    return " ".join(format_mention(record.member_id) for record in records)


def summarize_attendance(records: Iterable[AttendanceRecord]) -> Dict[str, int]:
    """Count attendance by display group; both bench states share one bucket."""
    summary = {"confirmed": 0, "pending": 0, "declined": 0, "bench": 0}
    for record in records:
        if record.status is AttendanceStatus.CONFIRMED:
            summary["confirmed"] += 1
        elif record.status is AttendanceStatus.PENDING:
            summary["pending"] += 1
        elif record.status is AttendanceStatus.DECLINED:
            summary["declined"] += 1
        elif record.status in BENCH_STATUSES:
            summary["bench"] += 1
    return summary


def group_by_role(compositions: Iterable[CompositionRecord]) -> Dict[str, List[CompositionRecord]]:
    grouped: Dict[str, List[CompositionRecord]] = {role: [] for role in ROLE_ORDER}
    for entry in compositions:
        grouped[get_role(entry.job)].append(entry)
    return grouped


def format_assignment(entry: CompositionRecord) -> str:
    line = f"{entry.job.value} - {entry.character_name or format_mention(entry.member_id)}"
    if entry.sub_role:
        line = f"{line} ({entry.sub_role})"
    return line


def build_raid_message(
    raid: RaidRecord,
    attendance: Sequence[AttendanceRecord],
    compositions: Sequence[CompositionRecord],
) -> RaidMessage:
    """Build the public raid message with attendance summary and roster."""
    message = RaidMessage(
        title=raid.name,
        description=raid.description or None,
        color=COLOR_INFO,
        timestamp=raid.scheduled_at,
        footer=f"Raid ID: {raid.id}",
    )
    message.add_field("Time", format_time(raid.scheduled_at), inline=True)
    message.add_field("Location", raid.location or "—", inline=True)

    summary = summarize_attendance(attendance)
    message.add_field(
        "Attendance",
        (
            f"{CONFIRM_EMOJI} Confirmed: {summary['confirmed']}\n"
            f"⏳ Pending: {summary['pending']}\n"
            f"{DECLINE_EMOJI} Declined: {summary['declined']}\n"
            f"{BENCH_EMOJI} Bench: {summary['bench']}"
        ),
    )

    if compositions:
        grouped = group_by_role(compositions)
        for role in ROLE_ORDER:
            entries = grouped[role]
            message.add_field(
                f"{ROLE_EMOJIS[role]} {ROLE_LABELS[role]}",
                "\n".join(format_assignment(entry) for entry in entries) if entries else EMPTY_ROLE,
                inline=True,
            )

    if raid.is_archived:
        message.footer = f"Raid ID: {raid.id} · Archived"

    return message


def build_attendance_message(raid: RaidRecord, attendance: Sequence[AttendanceRecord]) -> RaidMessage:
    """Detailed attendance list for the attendance command."""
    message = RaidMessage(
        title=f"Attendance for {raid.name}",
        description=f"Scheduled for {format_time(raid.scheduled_at)}",
        color=COLOR_INFO,
    )
    groups = [
        (f"{CONFIRM_EMOJI} Confirmed", (AttendanceStatus.CONFIRMED,)),
        ("⏳ Pending", (AttendanceStatus.PENDING,)),
        (f"{DECLINE_EMOJI} Declined", (AttendanceStatus.DECLINED,)),
        (f"{BENCH_EMOJI} Bench", BENCH_STATUSES),
    ]
    for label, statuses in groups:
        names = [record.display_name for record in attendance if record.status in statuses]
        message.add_field(f"{label} ({len(names)})", "\n".join(names) if names else "None")
    return message


def build_reminder_message(raid: RaidRecord, pending: Sequence[AttendanceRecord]) -> RaidMessage:
    """Advance reminder pinging everyone who has not answered yet."""
    message = RaidMessage(
        title=f"⏰ Reminder: {raid.name}",
        description=(
            f"The raid is scheduled for tomorrow at {raid.scheduled_at.strftime('%H:%M')} UTC!\n\n"
            "Please confirm your attendance by reacting to this message "
            "or using the attendance commands."
        ),
        color=COLOR_REMINDER,
        timestamp=raid.scheduled_at,
        footer=f"Raid ID: {raid.id}",
        content=format_mentions(pending),
        reactions=REMINDER_REACTIONS,
    )
    message.add_field("Raid", raid.name, inline=True)
    message.add_field("Time", format_time(raid.scheduled_at), inline=True)
    message.add_field("Pending Responses", str(len(pending)), inline=True)
    return message


def build_final_reminder_message(raid: RaidRecord) -> RaidMessage:
    return RaidMessage(
        title=f"🚨 Final Reminder: {raid.name}",
        description=(
            f"The raid begins in about an hour at {raid.scheduled_at.strftime('%H:%M')} UTC!\n\n"
            "See you there!"
        ),
        color=COLOR_URGENT,
        timestamp=raid.scheduled_at,
        footer=f"Raid ID: {raid.id}",
    )


def build_raid_list_message(raids: Sequence[RaidRecord], limit: int = 10) -> RaidMessage:
    message = RaidMessage(title="Upcoming Raids", color=COLOR_INFO)
    for raid in raids[:limit]:
        message.add_field(
            f"{raid.name} (ID: {raid.id})",
            (
                f"**When:** {format_time(raid.scheduled_at)}\n"
                f"**Where:** {raid.location or '—'}\n"
                f"**Description:** {raid.description or '—'}"
            ),
        )
    if len(raids) > limit:
        message.footer = f"Showing {limit} of {len(raids)} upcoming raids."
    return message


def build_composition_message(
    raid: RaidRecord,
    compositions: Sequence[CompositionRecord],
    counts: Dict[str, int],
) -> RaidMessage:
    """Role breakdown of a raid against the standard party."""
    valid = is_standard_party(counts)
    message = RaidMessage(
        title=f"Composition for {raid.name}",
        description="✅ Standard party" if valid else "⚠️ Not a standard party",
        color=COLOR_SUCCESS if valid else COLOR_REMINDER,
        footer=f"Raid ID: {raid.id}",
    )
    grouped = group_by_role(compositions)
    for role in ROLE_ORDER:
        entries = grouped[role]
        message.add_field(
            f"{ROLE_EMOJIS[role]} {ROLE_LABELS[role]} ({counts.get(role, 0)}/{STANDARD_PARTY[role]})",
            "\n".join(format_assignment(entry) for entry in entries) if entries else EMPTY_ROLE,
            inline=True,
        )
    return message


def build_character_list_message(characters: Sequence[CharacterRecord]) -> RaidMessage:
    message = RaidMessage(title="Your Characters", color=COLOR_INFO)
    for character in characters:
        jobs = [f"{get_job_emoji(character.preferred_job)} {character.preferred_job.value}"]
        jobs.extend(job.value for job in character.secondary_jobs)
        message.add_field(
            f"{character.name} @ {character.world} (ID: {character.id})",
            ", ".join(jobs),
        )
    return message
