"""Database modules for RaidPlanner."""

from .raid_store import (
    AttendanceRecord,
    AttendanceStatus,
    CharacterRecord,
    CompositionRecord,
    RaidRecord,
    RaidStore,
)
from .settings_store import UserSettingsRecord, UserSettingsStore

__all__ = [
    "AttendanceRecord",
    "AttendanceStatus",
    "CharacterRecord",
    "CompositionRecord",
    "RaidRecord",
    "RaidStore",
    "UserSettingsRecord",
    "UserSettingsStore",
]
