#!/usr/bin/env python3
"""
Raid planner runner

Main entry point for the raid planner Discord bot.
Simply run: python run.py
"""

import sys

from raidplanner.bot import main
from raidplanner.utils import SingleInstanceLock

if __name__ == "__main__":
    # Two bots on one database would double every reminder
    lock = SingleInstanceLock()
    if not lock.acquire():
        print(f"❌ Error: Another raid planner instance is already running (checked {lock.lock_file_path}).")
        print("Please stop the existing instance before starting a new one.")
        sys.exit(1)

    try:
        main()
    finally:
        lock.release()
