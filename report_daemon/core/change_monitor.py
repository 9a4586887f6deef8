"""Throttled polling of the upload area for modified files."""

import pwd
import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from .models import ChangeEvent, DaemonPaths
from .scanner import DirectoryScanner
from ..utils.audit_log import AuditLog


MIN_INTERVAL_SECONDS = 5


def resolve_owner(uid: int) -> str:
    """Return the user name owning ``uid``.

    Raises:
        KeyError: If no passwd entry exists for ``uid``.
    """
    return pwd.getpwuid(uid).pw_name


class ChangeMonitor:
    """Detects and attributes recent modifications in the upload area.

    Calls closer together than ``min_interval`` are no-ops. Each effective run
    reports the entries modified after the previous effective run and no later
    than the current one, so every modification time falls in exactly one run.
    """

    def __init__(self, paths: DaemonPaths, scanner: Optional[DirectoryScanner] = None,
                 min_interval: float = MIN_INTERVAL_SECONDS,
                 clock: Callable[[], datetime] = datetime.now,
                 owner_resolver: Callable[[int], str] = resolve_owner):
        self.paths = paths
        self.scanner = scanner or DirectoryScanner()
        self.min_interval = timedelta(seconds=min_interval)
        self.clock = clock
        self.owner_resolver = owner_resolver
        self.change_log = AuditLog(paths.change_log, clock=clock)
        self.last_check: Optional[datetime] = None
        self.logger = logging.getLogger(__name__)

    def poll(self) -> List[ChangeEvent]:
        """Scan for changes unless the previous scan was too recent.

        Returns:
            The changes detected by this call.
        """
        now = self.clock()
        if self.last_check is not None and now - self.last_check < self.min_interval:
            return []

        since = self.last_check if self.last_check is not None else now - self.min_interval
        self.last_check = now

        try:
            entries = self.scanner.list_entries(self.paths.upload_dir)
        except OSError as e:
            self.logger.error(f"Failed to open upload directory for monitoring: {e}")
            return []

        changes = []
        for entry in entries:
            try:
                entry_stat = entry.stat()
            except OSError as e:
                self.logger.warning(f"Failed to stat file {entry.path}: {e}")
                continue

            modified_time = datetime.fromtimestamp(entry_stat.st_mtime)
            if not since < modified_time <= now:
                continue

            try:
                owner = self.owner_resolver(entry_stat.st_uid)
            except KeyError:
                self.logger.warning(f"Failed to get owner of file {entry.path} (uid {entry_stat.st_uid})")
                continue

            event = ChangeEvent(name=entry.name, owner=owner, modified_time=modified_time)
            changes.append(event)
            self.logger.info(f"File change detected: {event.name}, modified by {event.owner}")
            self.change_log.append(
                "INFO", f"File: {event.name}, User: {event.owner}, Action: {event.action}"
            )

        return changes
