"""Append-only audit logs (change log, missing reports log)."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable

from .formatters import format_log_line


class AuditLog:
    """A flat text log that only ever gets lines appended to it.

    Write failures are reported through the module logger and never raised,
    so a broken audit sink cannot stop the daemon.
    """

    def __init__(self, path, clock: Callable[[], datetime] = datetime.now):
        self.path = Path(path)
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    def append(self, level: str, message: str) -> bool:
        """Append one formatted line.

        Returns:
            True if the line was written.
        """
        line = format_log_line(self.clock(), level, message)
        try:
            with open(self.path, 'a', encoding='utf-8') as f:
                f.write(line + "\n")
        except OSError as e:
            self.logger.warning(f"Could not write to {self.path}: {e}")
            return False
        return True
