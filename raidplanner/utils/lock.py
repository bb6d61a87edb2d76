"""Process guard so two bots never share one database."""

import fcntl
import logging
import os
from pathlib import Path
from typing import IO, Optional


logger = logging.getLogger("raidplanner.lock")


class SingleInstanceLock:
    """Holds an exclusive, non-blocking flock on a pid file while the bot runs."""

    def __init__(self, lock_file_name: str = "raidplanner.lock"):
        self.lock_file_path = Path(lock_file_name).absolute()
        self._handle: Optional[IO[str]] = None

    def acquire(self) -> bool:
        """Returns False if another process already holds the lock."""
        handle = open(self.lock_file_path, "a+")
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            handle.close()
            return False

        handle.seek(0)
        handle.truncate()
        handle.write(f"{os.getpid()}\n")
        handle.flush()
        self._handle = handle
        return True

    def release(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
            handle.close()
            self.lock_file_path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Failed to release lock %s", self.lock_file_path, exc_info=True)
