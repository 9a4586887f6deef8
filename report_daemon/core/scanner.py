"""Directory scanning and report name classification."""

import os
import re
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from .models import ReportingFile, UploadFile


DEFAULT_DEPARTMENTS = ("warehouse", "manufacturing", "sales", "distribution")
REPORT_SUFFIX = ".xml"
MATCH_MODES = ("substring", "strict")

ISO_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


class DirectoryScanner:
    """Lists report entries in a flat directory and classifies their names."""

    def __init__(self, suffix: str = REPORT_SUFFIX,
                 departments: Sequence[str] = DEFAULT_DEPARTMENTS,
                 match_mode: str = "substring"):
        """Initialize directory scanner.

        Args:
            suffix: Substring a name must contain to count as a report.
            departments: Department keywords, in matching priority order.
            match_mode: ``substring`` for keyword containment, ``strict`` for
                        the ``<department>_<YYYY-MM-DD>.xml`` grammar.
        """
        if match_mode not in MATCH_MODES:
            raise ValueError(f"Unknown match mode: {match_mode}")
        self.suffix = suffix
        self.departments = list(departments)
        self.match_mode = match_mode
        self.logger = logging.getLogger(__name__)
        self._strict_pattern = re.compile(
            r"^(?P<department>{})_(?P<date>\d{{4}}-\d{{2}}-\d{{2}}){}$".format(
                "|".join(re.escape(d) for d in self.departments),
                re.escape(suffix),
            )
        )

    def list_entries(self, directory) -> List[os.DirEntry]:
        """Return every entry of ``directory`` sorted by name.

        Raises:
            OSError: If the directory cannot be read.
        """
        with os.scandir(directory) as it:
            entries = list(it)
        entries.sort(key=lambda entry: entry.name)
        return entries

    def list_report_entries(self, directory) -> List[os.DirEntry]:
        """Return the non-hidden report files of ``directory``.

        Symbolic links are included, dangling ones too; renaming moves the
        link and copying reads its target. Directories and special files
        are skipped.

        Raises:
            OSError: If the directory cannot be read.
        """
        reports = []
        for entry in self.list_entries(directory):
            if not self.is_report_name(entry.name):
                continue
            try:
                if entry.is_dir() or not (entry.is_file() or entry.is_symlink()):
                    self.logger.warning(f"Skipping non-file entry {entry.path}")
                    continue
            except OSError as e:
                self.logger.warning(f"Could not inspect {entry.path}: {e}")
                continue
            reports.append(entry)
        return reports

    def is_report_name(self, name: str) -> bool:
        """Check whether a file name looks like a report."""
        return not name.startswith(".") and self.suffix in name

    def scan_uploads(self, directory) -> List[UploadFile]:
        """Collect report files in the upload area with their inferred tags."""
        uploads = []
        for entry in self.list_report_entries(directory):
            try:
                entry_stat = entry.stat(follow_symlinks=False)
            except OSError as e:
                self.logger.warning(f"Failed to stat file {entry.path}: {e}")
                continue
            uploads.append(UploadFile(
                path=entry.path,
                name=entry.name,
                modified_time=datetime.fromtimestamp(entry_stat.st_mtime),
                owner_uid=entry_stat.st_uid,
                department=self.infer_department(entry.name),
                report_date=self.infer_date(entry.name)
            ))
        return uploads

    def scan_reporting(self, directory) -> List[ReportingFile]:
        """Collect report files currently in the reporting area."""
        files = []
        for entry in self.list_report_entries(directory):
            try:
                entry_stat = entry.stat(follow_symlinks=False)
            except OSError as e:
                self.logger.warning(f"Failed to stat file {entry.path}: {e}")
                continue
            files.append(ReportingFile(
                path=entry.path,
                name=entry.name,
                size=entry_stat.st_size,
                modified_time=datetime.fromtimestamp(entry_stat.st_mtime)
            ))
        return files

    def infer_department(self, name: str) -> Optional[str]:
        """Return the first department whose keyword appears in ``name``."""
        if self.match_mode == "strict":
            match = self._strict_pattern.match(name)
            return match.group("department") if match else None
        for department in self.departments:
            if department in name:
                return department
        return None

    def infer_date(self, name: str) -> Optional[str]:
        """Return the first ISO date found in ``name``."""
        if self.match_mode == "strict":
            match = self._strict_pattern.match(name)
            return match.group("date") if match else None
        match = ISO_DATE_PATTERN.search(name)
        return match.group(0) if match else None

    def attribute(self, name: str, date_str: str) -> Optional[str]:
        """Return the department whose report for ``date_str`` this file is.

        In substring mode the first department (in vocabulary order) whose
        keyword appears in the name wins, provided the name also contains the
        date. Strict mode requires the whole name to follow the grammar.
        """
        if self.match_mode == "strict":
            match = self._strict_pattern.match(name)
            if match and match.group("date") == date_str:
                return match.group("department")
            return None
        if date_str not in name:
            return None
        for department in self.departments:
            if department in name:
                return department
        return None
