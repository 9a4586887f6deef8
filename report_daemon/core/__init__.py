"""Core daemon functionality."""

from .backup import BackupEngine
from .change_monitor import ChangeMonitor
from .completeness import CompletenessChecker
from .daemon import ReportDaemon
from .lifecycle import SingletonLease, acquire_singleton
from .locks import DirectoryLockController
from .models import DaemonPaths, DirectoryLockState, DepartmentCoverage, UploadFile
from .scanner import DirectoryScanner
from .transfer import TransferEngine

__all__ = [
    "BackupEngine",
    "ChangeMonitor",
    "CompletenessChecker",
    "DaemonPaths",
    "DepartmentCoverage",
    "DirectoryLockController",
    "DirectoryLockState",
    "DirectoryScanner",
    "ReportDaemon",
    "SingletonLease",
    "TransferEngine",
    "UploadFile",
    "acquire_singleton",
]
