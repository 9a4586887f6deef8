"""
Report Daemon - collects department report uploads on a daily schedule.

This package provides a long-running daemon that watches a shared upload area,
checks that every department delivered its daily XML report, snapshots the
reporting area and promotes uploads into it.
"""

__version__ = "1.0.0"

from .core.daemon import ReportDaemon
from .core.scanner import DirectoryScanner
from .reporters.notifier import EventNotifier

__all__ = ["ReportDaemon", "DirectoryScanner", "EventNotifier"]
