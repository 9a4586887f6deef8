"""Data models for the report daemon."""

import enum
import os
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple


DIRECTORY_MODE = 0o755


class DirectoryLockState(enum.Enum):
    """Permission state of a watched directory."""
    UNLOCKED = "unlocked"
    LOCKED = "locked"


@dataclass
class DaemonPaths:
    """Filesystem locations shared by every daemon component."""
    upload_dir: Path
    reporting_dir: Path
    backup_dir: Path
    log_dir: Path
    pid_file: Path
    lock_file: Path

    @classmethod
    def from_config(cls, paths_config: Dict[str, str]) -> "DaemonPaths":
        """Build paths from the ``paths`` configuration section."""
        return cls(
            upload_dir=Path(paths_config['upload_dir']),
            reporting_dir=Path(paths_config['reporting_dir']),
            backup_dir=Path(paths_config['backup_dir']),
            log_dir=Path(paths_config['log_dir']),
            pid_file=Path(paths_config['pid_file']),
            lock_file=Path(paths_config['lock_file']),
        )

    @property
    def change_log(self) -> Path:
        return self.log_dir / "change.log"

    @property
    def error_log(self) -> Path:
        return self.log_dir / "error.log"

    @property
    def missing_reports_log(self) -> Path:
        return self.log_dir / "missing_reports.log"

    def ensure_directories(self) -> None:
        """Create the working directories if they do not exist yet."""
        for directory in (self.upload_dir, self.reporting_dir, self.backup_dir, self.log_dir):
            os.makedirs(directory, mode=DIRECTORY_MODE, exist_ok=True)


@dataclass
class UploadFile:
    """A report file found in the upload area."""
    path: str
    name: str
    modified_time: datetime
    owner_uid: int
    department: Optional[str] = None
    report_date: Optional[str] = None


@dataclass
class ReportingFile:
    """A file in the reporting area."""
    path: str
    name: str
    size: int
    modified_time: datetime


@dataclass
class BackupResult:
    """Outcome of one backup run."""
    snapshot_path: Optional[str]
    copied: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.snapshot_path is not None and not self.failed


@dataclass
class TransferResult:
    """Outcome of one transfer run."""
    transferred: List[Tuple[str, str]] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    left_behind: List[str] = field(default_factory=list)
    scan_error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.scan_error is None and not self.failed


@dataclass
class DepartmentCoverage:
    """Which departments delivered a report for a given day."""
    report_date: date
    found: Dict[str, bool]

    @property
    def missing(self) -> List[str]:
        return [department for department, present in self.found.items() if not present]

    @property
    def complete(self) -> bool:
        return all(self.found.values())


@dataclass
class ChangeEvent:
    """A file modification detected in the upload area."""
    name: str
    owner: str
    modified_time: datetime
    action: str = "modified"


@dataclass
class PipelineResult:
    """Step outcomes of one lock/check/backup/transfer/unlock run."""
    reason: str
    started_at: datetime
    locked: bool = False
    complete: bool = False
    backed_up: bool = False
    transferred: bool = False
    unlocked: bool = False
    locking: bool = True

    @property
    def success(self) -> bool:
        if self.locking and not (self.locked and self.unlocked):
            return False
        return self.backed_up and self.transferred
