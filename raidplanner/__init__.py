"""RaidPlanner: raid scheduling, attendance and composition for Discord guilds."""

__version__ = "1.0.0"
