"""Directory scanner and name classification tests."""

from __future__ import annotations

import pytest

from conftest import touch
from report_daemon.core.models import DaemonPaths
from report_daemon.core.scanner import DirectoryScanner


def test_list_report_entries_filters_and_sorts(paths: DaemonPaths) -> None:
    touch(paths.upload_dir / "b.xml")
    touch(paths.upload_dir / "a.xml")
    touch(paths.upload_dir / ".swap.xml")
    touch(paths.upload_dir / "notes.txt")
    (paths.upload_dir / "dir.xml").mkdir()

    scanner = DirectoryScanner()

    assert [e.name for e in scanner.list_report_entries(paths.upload_dir)] == ["a.xml", "b.xml"]
    assert len(scanner.list_entries(paths.upload_dir)) == 5


def test_scan_uploads_infers_tags(paths: DaemonPaths) -> None:
    touch(paths.upload_dir / "sales_2024-03-05.xml")
    touch(paths.upload_dir / "misc.xml")

    uploads = DirectoryScanner().scan_uploads(paths.upload_dir)

    tags = {u.name: (u.department, u.report_date) for u in uploads}
    assert tags == {
        "misc.xml": (None, None),
        "sales_2024-03-05.xml": ("sales", "2024-03-05"),
    }


@pytest.mark.parametrize(
    "name, expected",
    [
        ("warehouse_2024-01-01.xml", "warehouse"),
        ("Q1 distribution 2024-01-01.xml", "distribution"),
        ("warehouse_2023-12-31.xml", None),
        ("hr_2024-01-01.xml", None),
    ],
)
def test_attribute_substring_mode(name: str, expected) -> None:
    assert DirectoryScanner().attribute(name, "2024-01-01") == expected


@pytest.mark.parametrize(
    "name, expected",
    [
        ("warehouse_2024-01-01.xml", "warehouse"),
        ("Q1 distribution 2024-01-01.xml", None),
        ("sales_2024-01-01.xml.bak", None),
    ],
)
def test_attribute_strict_mode(name: str, expected) -> None:
    assert DirectoryScanner(match_mode="strict").attribute(name, "2024-01-01") == expected


def test_unknown_match_mode_is_rejected() -> None:
    with pytest.raises(ValueError):
        DirectoryScanner(match_mode="fuzzy")


def test_scan_reporting_collects_sizes(paths: DaemonPaths) -> None:
    touch(paths.reporting_dir / "sales.xml", "12345")
    touch(paths.reporting_dir / "readme.txt", "ignored")

    reports = DirectoryScanner().scan_reporting(paths.reporting_dir)

    assert [(r.name, r.size) for r in reports] == [("sales.xml", 5)]


def test_list_report_entries_keeps_symlinks_and_warns_on_directories(
    tmp_path, paths: DaemonPaths, caplog: pytest.LogCaptureFixture
) -> None:
    touch(tmp_path / "target.xml")
    (paths.upload_dir / "linked.xml").symlink_to(tmp_path / "target.xml")
    (paths.upload_dir / "dangling.xml").symlink_to(tmp_path / "gone.xml")
    (paths.upload_dir / "dir.xml").mkdir()

    entries = DirectoryScanner().list_report_entries(paths.upload_dir)

    assert [e.name for e in entries] == ["dangling.xml", "linked.xml"]
    assert "Skipping non-file entry" in caplog.text
    assert "dir.xml" in caplog.text
