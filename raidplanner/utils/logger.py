"""Logging setup for the raid planner bot."""

import logging
import sys
from pathlib import Path
from typing import Optional


def setup_logger(
    name: str = "raidplanner",
    level: str = "INFO",
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    discord_level: str = "WARNING",
) -> logging.Logger:
    """
    Configure the package logger with a console and an optional file handler.

    Args:
        name: Root logger name; module loggers are children of it
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (optional)
        log_format: Log message format
        discord_level: Level for discord.py's own logger

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    formatter = logging.Formatter(
        log_format or "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # discord.py is chatty at INFO
    logging.getLogger("discord").setLevel(getattr(logging, discord_level.upper(), logging.WARNING))

    return logger
