"""Utility modules for the report daemon."""

from .audit_log import AuditLog
from .fileops import copy_file
from .formatters import format_date, format_file_size, format_log_line, snapshot_name, timestamped_name

__all__ = [
    "AuditLog",
    "copy_file",
    "format_date",
    "format_file_size",
    "format_log_line",
    "snapshot_name",
    "timestamped_name",
]
