"""Daily completeness check of department uploads."""

import logging
from datetime import datetime
from typing import Callable, Optional

from .models import DaemonPaths, DepartmentCoverage
from .scanner import DirectoryScanner
from ..utils.audit_log import AuditLog


class CompletenessChecker:
    """Verifies that every required department uploaded today's report."""

    def __init__(self, paths: DaemonPaths, scanner: Optional[DirectoryScanner] = None,
                 clock: Callable[[], datetime] = datetime.now):
        """Initialize completeness checker.

        Args:
            paths: Daemon filesystem layout.
            scanner: Scanner holding the department vocabulary and match mode.
            clock: Returns the current local time.
        """
        self.paths = paths
        self.scanner = scanner or DirectoryScanner()
        self.clock = clock
        self.audit_log = AuditLog(paths.missing_reports_log, clock=clock)
        self.last_coverage: Optional[DepartmentCoverage] = None
        self.logger = logging.getLogger(__name__)

    def check_missing_uploads(self) -> bool:
        """Check today's uploads for every department.

        Returns:
            True if all departments delivered a report for today.
        """
        today = self.clock().date()
        today_str = today.isoformat()
        found = {department: False for department in self.scanner.departments}
        self.last_coverage = DepartmentCoverage(report_date=today, found=found)

        self.logger.info(f"Checking for missing uploads for date: {today_str}")

        try:
            entries = self.scanner.list_report_entries(self.paths.upload_dir)
        except OSError as e:
            self.logger.error(f"Failed to open upload directory {self.paths.upload_dir}: {e}")
            return False

        for entry in entries:
            department = self.scanner.attribute(entry.name, today_str)
            if department is not None:
                found[department] = True

        coverage = self.last_coverage
        if coverage.complete:
            self.logger.info("All department reports have been received")
            return True

        for department in coverage.missing:
            self.logger.warning(f"Missing upload: {department} report for {today_str}")
        self.audit_log.append(
            "WARNING", f"Missing reports for {today_str}: {' '.join(coverage.missing)}"
        )
        return False
