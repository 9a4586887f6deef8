"""Formatter tests."""

from datetime import datetime

from report_daemon.utils.formatters import (
    format_file_size,
    format_log_line,
    format_mode,
    snapshot_name,
    timestamped_name,
    truncate_bytes,
)


WHEN = datetime(2024, 1, 2, 3, 4, 5)


def test_timestamped_name_inserts_before_last_extension() -> None:
    assert timestamped_name("sales_2024-01-02.xml", WHEN) == "sales_2024-01-02_20240102_030405.xml"
    assert timestamped_name("archive.tar.xml", WHEN) == "archive.tar_20240102_030405.xml"
    assert timestamped_name("noext", WHEN) == "noext_20240102_030405"
    assert timestamped_name("sales.xml", WHEN, counter=2) == "sales_20240102_030405_2.xml"


def test_snapshot_name() -> None:
    assert snapshot_name(WHEN) == "backup_20240102_030405"
    assert snapshot_name(WHEN, 1) == "backup_20240102_030405_1"


def test_format_log_line() -> None:
    assert format_log_line(WHEN, "warning", "disk full") == "[2024-01-02 03:04:05] WARNING: disk full"


def test_truncate_bytes_keeps_valid_utf8() -> None:
    assert truncate_bytes("short", 100) == "short"
    assert truncate_bytes("ééé", 3) == "é"


def test_small_formatters() -> None:
    assert format_file_size(512) == "512B"
    assert format_file_size(2048) == "2KB"
    assert format_mode(0o40755) == "0755"
    assert format_mode(None) == "----"
