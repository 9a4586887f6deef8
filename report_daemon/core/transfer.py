"""Promotion of uploaded reports into the reporting area."""

import os
import logging
from datetime import datetime
from typing import Callable, Optional

from .models import DaemonPaths, TransferResult
from .scanner import DirectoryScanner
from ..utils.fileops import copy_file
from ..utils.formatters import timestamped_name


class TransferEngine:
    """Moves report files from the upload area into the reporting area.

    An existing file in the reporting area is never overwritten: the incoming
    file gets a timestamp inserted before its extension instead.
    """

    def __init__(self, paths: DaemonPaths, scanner: Optional[DirectoryScanner] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.paths = paths
        self.scanner = scanner or DirectoryScanner()
        self.clock = clock
        self.last_result: Optional[TransferResult] = None
        self.logger = logging.getLogger(__name__)

    def transfer_uploads(self) -> bool:
        """Move every upload into the reporting area.

        Returns:
            True if every file was transferred.
        """
        self.logger.info("Starting transfer of uploads to reporting directory")
        result = TransferResult()
        self.last_result = result

        try:
            entries = self.scanner.list_report_entries(self.paths.upload_dir)
        except OSError as e:
            self.logger.error(f"Failed to open upload directory {self.paths.upload_dir}: {e}")
            result.scan_error = str(e)
            return False

        for entry in entries:
            destination_name = self.destination_name(entry.name)
            destination = os.path.join(self.paths.reporting_dir, destination_name)
            if self._move(entry.path, destination, result):
                result.transferred.append((entry.name, destination_name))
                if destination_name != entry.name:
                    self.logger.info(f"Transferred file: {entry.name} as {destination_name}")
                else:
                    self.logger.info(f"Transferred file: {entry.name} to reporting directory")
            else:
                result.failed.append(entry.name)

        if result.success:
            self.logger.info(f"File transfer completed successfully ({len(result.transferred)} files)")
        else:
            self.logger.warning(f"File transfer completed with errors ({len(result.failed)} failed)")

        return result.success

    def destination_name(self, name: str) -> str:
        """Pick a name in the reporting area that does not collide with an existing file."""
        if not os.path.lexists(os.path.join(self.paths.reporting_dir, name)):
            return name

        now = self.clock()
        counter = 0
        while True:
            candidate = timestamped_name(name, now, counter)
            if not os.path.lexists(os.path.join(self.paths.reporting_dir, candidate)):
                return candidate
            counter += 1

    def _move(self, source: str, destination: str, result: TransferResult) -> bool:
        """Rename ``source`` to ``destination``, falling back to copy and delete."""
        try:
            os.rename(source, destination)
            return True
        except OSError as e:
            self.logger.debug(f"Rename of {source} failed ({e}), falling back to copy")

        try:
            copy_file(source, destination, exclusive=True)
        except OSError as e:
            self.logger.error(f"Failed to copy {source} to {destination}: {e}")
            return False

        try:
            os.unlink(source)
        except OSError as e:
            # Source stays behind; the report now exists in both areas.
            self.logger.warning(f"Failed to delete source file after copy {source}: {e}")
            result.left_behind.append(os.path.basename(source))

        return True
