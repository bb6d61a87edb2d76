"""Configuration loader for the raid planner bot."""

import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


class Config:
    """Configuration manager for the raid planner bot."""

    def __init__(self, config_path: str = "config/config.yaml"):
        """
        Initialize configuration from YAML file.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}\n"
                f"Please copy config/config.example.yaml to config/config.yaml and configure it."
            )

        with open(self.config_path, "r", encoding="utf-8") as f:
            self._config = yaml.safe_load(f) or {}

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'raid.reminders.interval_minutes')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value = self._config

        for k in key.split("."):
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

            if value is None:
                return default

        return value

    def _hour_window(self, key: str, default: Tuple[float, float]) -> Tuple[float, float]:
        window = self.get(key)
        if not window:
            return default
        if not isinstance(window, (list, tuple)) or len(window) != 2:
            raise ValueError(f"{key} must be a list of two hour offsets")
        start, end = float(window[0]), float(window[1])
        if start >= end:
            raise ValueError(f"{key} must start before it ends")
        return start, end

    @property
    def discord_token(self) -> str:
        """Get Discord bot token."""
        token = self.get("discord.token")
        if not token or token == "YOUR_BOT_TOKEN_HERE":
            raise ValueError("Discord token not configured in config.yaml")
        return token

    @property
    def guild_id(self) -> Optional[int]:
        """Guild to sync slash commands to; None syncs globally."""
        guild_id = self.get("discord.guild_id")
        return int(guild_id) if guild_id else None

    @property
    def database_path(self) -> str:
        return self.get("database.path", "data/raids.db")

    @property
    def reminder_interval_minutes(self) -> int:
        """Minutes between reminder sweeps."""
        minutes = int(self.get("raid.reminders.interval_minutes", 30))
        if minutes <= 0:
            raise ValueError("raid.reminders.interval_minutes must be positive")
        return minutes

    @property
    def reminder_advance_window_hours(self) -> Tuple[float, float]:
        return self._hour_window("raid.reminders.advance_window_hours", (24, 25))

    @property
    def reminder_final_window_hours(self) -> Tuple[float, float]:
        return self._hour_window("raid.reminders.final_window_hours", (1, 2))

    @property
    def final_reminder_once(self) -> bool:
        """Send the final reminder only once per raid instead of every sweep."""
        return bool(self.get("raid.reminders.final_reminder_once", False))

    @property
    def attendance_requires_raid(self) -> bool:
        """Reject attendance for raids that do not exist."""
        return bool(self.get("raid.attendance_requires_raid", True))

    @property
    def raid_list_limit(self) -> int:
        return int(self.get("raid.list_limit", 10))

    @property
    def admin_roles(self) -> List[int]:
        """Get list of admin role IDs."""
        return self.get("permissions.admin_roles", [])

    @property
    def admin_users(self) -> List[int]:
        """Get list of admin user IDs."""
        return self.get("permissions.admin_users", [])

    @property
    def log_level(self) -> str:
        return self.get("logging.level", "INFO")

    @property
    def log_file(self) -> Optional[str]:
        return self.get("logging.file", "logs/raidplanner.log")

    @property
    def log_format(self) -> str:
        return self.get(
            "logging.format",
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
