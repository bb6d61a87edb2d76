"""Command modules for the raid planner bot."""

from .attendance import AttendanceCommand
from .character import CharacterCommand
from .raid import RaidCommand
from .settings import SettingsCommand

__all__ = ["AttendanceCommand", "CharacterCommand", "RaidCommand", "SettingsCommand"]
