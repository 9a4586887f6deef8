"""Snapshots of the reporting area."""

import os
import logging
from datetime import datetime
from typing import Callable, Optional

from .models import BackupResult, DaemonPaths, DIRECTORY_MODE
from .scanner import DirectoryScanner
from ..utils.fileops import copy_file
from ..utils.formatters import snapshot_name


class BackupEngine:
    """Copies every report of the reporting area into a timestamped snapshot."""

    def __init__(self, paths: DaemonPaths, scanner: Optional[DirectoryScanner] = None,
                 clock: Callable[[], datetime] = datetime.now):
        """Initialize backup engine.

        Args:
            paths: Daemon filesystem layout.
            scanner: Scanner used to list the reporting area.
            clock: Returns the current local time.
        """
        self.paths = paths
        self.scanner = scanner or DirectoryScanner()
        self.clock = clock
        self.last_result: Optional[BackupResult] = None
        self.logger = logging.getLogger(__name__)

    def backup_reporting_dir(self) -> bool:
        """Copy the reporting area into a new snapshot directory.

        A single file that cannot be copied is logged and marks the run as
        failed; the remaining files are still copied.

        Returns:
            True if the snapshot was created and every file was copied.
        """
        self.logger.info("Starting backup of reporting directory")

        snapshot_path = self._create_snapshot_dir()
        if snapshot_path is None:
            self.last_result = BackupResult(snapshot_path=None)
            return False

        result = BackupResult(snapshot_path=snapshot_path)
        self.last_result = result

        try:
            entries = self.scanner.list_report_entries(self.paths.reporting_dir)
        except OSError as e:
            self.logger.error(f"Failed to open reporting directory {self.paths.reporting_dir}: {e}")
            result.failed.append(str(self.paths.reporting_dir))
            return False

        for entry in entries:
            destination = os.path.join(snapshot_path, entry.name)
            try:
                copy_file(entry.path, destination)
            except OSError as e:
                self.logger.error(f"Failed to back up {entry.path}: {e}")
                result.failed.append(entry.name)
                continue
            result.copied.append(entry.name)
            self.logger.info(f"Backed up file: {entry.name}")

        if result.success:
            self.logger.info(f"Backup completed successfully to {snapshot_path}")
        else:
            self.logger.warning(f"Backup completed with errors ({len(result.failed)} failed)")

        return result.success

    def _create_snapshot_dir(self) -> Optional[str]:
        """Create the snapshot directory, adding a counter on same-second collisions."""
        taken_at = self.clock()
        counter = 0
        while True:
            path = os.path.join(self.paths.backup_dir, snapshot_name(taken_at, counter))
            try:
                os.mkdir(path, DIRECTORY_MODE)
                return path
            except FileExistsError:
                counter += 1
            except OSError as e:
                self.logger.error(f"Failed to create backup directory {path}: {e}")
                return None
