"""Completeness checker tests."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from conftest import FakeClock, touch
from report_daemon.core.completeness import CompletenessChecker
from report_daemon.core.models import DaemonPaths
from report_daemon.core.scanner import DirectoryScanner


def _clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 1, 0, 0))


def test_reports_missing_departments(paths: DaemonPaths) -> None:
    """Only manufacturing and sales uploaded: warehouse and distribution are missing."""
    touch(paths.upload_dir / "manufacturing_2024-01-01.xml")
    touch(paths.upload_dir / "sales_2024-01-01.xml")

    checker = CompletenessChecker(paths, clock=_clock())

    assert checker.check_missing_uploads() is False
    assert checker.last_coverage.missing == ["warehouse", "distribution"]

    lines = paths.missing_reports_log.read_text(encoding="utf-8").splitlines()
    assert lines == [
        "[2024-01-01 01:00:00] WARNING: Missing reports for 2024-01-01: warehouse distribution"
    ]


def test_all_departments_present(paths: DaemonPaths) -> None:
    for department in ("warehouse", "manufacturing", "sales", "distribution"):
        touch(paths.upload_dir / f"{department}_2024-01-01.xml")

    checker = CompletenessChecker(paths, clock=_clock())

    assert checker.check_missing_uploads() is True
    assert checker.last_coverage.complete
    assert not paths.missing_reports_log.exists()


def test_reports_from_other_days_do_not_count(paths: DaemonPaths) -> None:
    touch(paths.upload_dir / "warehouse_2023-12-31.xml")
    touch(paths.upload_dir / "sales_2024-01-01.txt")

    checker = CompletenessChecker(paths, clock=_clock())

    assert checker.check_missing_uploads() is False
    assert checker.last_coverage.missing == ["warehouse", "manufacturing", "sales", "distribution"]


def test_substring_matching_is_lenient(paths: DaemonPaths) -> None:
    """Any name containing the keyword and the date counts in substring mode."""
    touch(paths.upload_dir / "final-warehouse-report 2024-01-01 v2.xml")

    checker = CompletenessChecker(paths, clock=_clock())
    checker.check_missing_uploads()

    assert checker.last_coverage.found["warehouse"] is True


def test_first_matching_department_wins(paths: DaemonPaths) -> None:
    touch(paths.upload_dir / "warehouse_to_sales_2024-01-01.xml")

    checker = CompletenessChecker(paths, clock=_clock())
    checker.check_missing_uploads()

    assert checker.last_coverage.found["warehouse"] is True
    assert checker.last_coverage.found["sales"] is False


def test_strict_mode_requires_exact_grammar(paths: DaemonPaths) -> None:
    touch(paths.upload_dir / "final-warehouse-report 2024-01-01 v2.xml")
    touch(paths.upload_dir / "sales_2024-01-01.xml")

    scanner = DirectoryScanner(match_mode="strict")
    checker = CompletenessChecker(paths, scanner, clock=_clock())
    checker.check_missing_uploads()

    assert checker.last_coverage.found["warehouse"] is False
    assert checker.last_coverage.found["sales"] is True


def test_missing_upload_dir_fails_check(tmp_path: Path, paths: DaemonPaths) -> None:
    paths.upload_dir = tmp_path / "gone"

    checker = CompletenessChecker(paths, clock=_clock())

    assert checker.check_missing_uploads() is False
