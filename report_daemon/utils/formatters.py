"""Formatting utilities for log lines and file names."""

from datetime import datetime
from typing import Optional


LOG_TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'
FILE_TIMESTAMP_FORMAT = '%Y%m%d_%H%M%S'
SNAPSHOT_PREFIX = 'backup_'


def format_file_size(size_bytes: int) -> str:
    """Format file size in human readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Human readable size string.
    """
    if size_bytes < 1024:
        return f"{size_bytes}B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes // 1024}KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes // (1024 * 1024)}MB"
    else:
        return f"{size_bytes // (1024 * 1024 * 1024)}GB"


def format_date(dt: datetime, short: bool = False) -> str:
    """Format datetime for display.

    Args:
        dt: Datetime to format.
        short: If True, use short format.

    Returns:
        Formatted date string.
    """
    if short:
        return dt.strftime('%Y-%m-%d %H:%M')
    else:
        return dt.strftime(LOG_TIMESTAMP_FORMAT)


def format_log_line(dt: datetime, level: str, message: str) -> str:
    """Format one line of a flat audit log: ``[YYYY-MM-DD HH:MM:SS] LEVEL: message``."""
    return f"[{dt.strftime(LOG_TIMESTAMP_FORMAT)}] {level.upper()}: {message}"


def snapshot_name(dt: datetime, counter: int = 0) -> str:
    """Name of a backup snapshot directory taken at ``dt``.

    Args:
        dt: Snapshot time (local).
        counter: Disambiguates snapshots taken within the same second.

    Returns:
        Directory name such as ``backup_20240101_010000``.
    """
    name = f"{SNAPSHOT_PREFIX}{dt.strftime(FILE_TIMESTAMP_FORMAT)}"
    if counter:
        name = f"{name}_{counter}"
    return name


def timestamped_name(name: str, dt: datetime, counter: int = 0) -> str:
    """Insert ``_YYYYMMDD_HHMMSS`` before the last extension of ``name``.

    Names without a ``.`` get the stamp appended. A non-zero ``counter`` is
    added after the stamp.

    Args:
        name: Original file name.
        dt: Time used for the stamp.
        counter: Extra disambiguation suffix.

    Returns:
        The stamped file name.
    """
    stamp = f"_{dt.strftime(FILE_TIMESTAMP_FORMAT)}"
    if counter:
        stamp = f"{stamp}_{counter}"
    dot = name.rfind('.')
    if dot == -1:
        return name + stamp
    return name[:dot] + stamp + name[dot:]


def truncate_bytes(text: str, max_bytes: int) -> str:
    """Truncate ``text`` so that its UTF-8 encoding fits in ``max_bytes``."""
    encoded = text.encode('utf-8')
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode('utf-8', errors='ignore')


def format_mode(mode: Optional[int]) -> str:
    """Format permission bits as an octal string, e.g. ``0755``."""
    if mode is None:
        return "----"
    return f"{mode & 0o7777:04o}"
