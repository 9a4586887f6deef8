"""Change monitor tests."""

from __future__ import annotations

from datetime import timedelta

from conftest import touch
from report_daemon.core.change_monitor import ChangeMonitor
from report_daemon.core.models import DaemonPaths


def _owner(uid: int) -> str:
    return "alice"


def _unknown_owner(uid: int) -> str:
    raise KeyError(uid)


def test_recent_modifications_are_logged(paths: DaemonPaths, clock) -> None:
    touch(paths.upload_dir / "sales_2024-01-01.xml", when=clock.now - timedelta(seconds=1))
    touch(paths.upload_dir / "old.xml", when=clock.now - timedelta(hours=1))

    monitor = ChangeMonitor(paths, clock=clock, owner_resolver=_owner)
    changes = monitor.poll()

    assert [(c.name, c.owner, c.action) for c in changes] == [
        ("sales_2024-01-01.xml", "alice", "modified")
    ]
    assert paths.change_log.read_text(encoding="utf-8").splitlines() == [
        "[2024-01-01 12:00:00] INFO: File: sales_2024-01-01.xml, User: alice, Action: modified"
    ]


def test_second_poll_within_interval_is_a_noop(paths: DaemonPaths, clock) -> None:
    """Changes made between two close polls are not reported by the second one."""
    monitor = ChangeMonitor(paths, clock=clock, owner_resolver=_owner)
    assert monitor.poll() == []

    clock.advance(2)
    touch(paths.upload_dir / "warehouse.xml", when=clock.now)

    assert monitor.poll() == []
    assert not paths.change_log.exists()


def test_changes_since_previous_run_are_reported_after_interval(paths: DaemonPaths, clock) -> None:
    monitor = ChangeMonitor(paths, clock=clock, owner_resolver=_owner)
    monitor.poll()

    clock.advance(2)
    touch(paths.upload_dir / "warehouse.xml", when=clock.now)
    clock.advance(8)

    changes = monitor.poll()

    assert [c.name for c in changes] == ["warehouse.xml"]
    assert len(paths.change_log.read_text(encoding="utf-8").splitlines()) == 1


def test_unresolvable_owner_is_skipped(paths: DaemonPaths, clock) -> None:
    touch(paths.upload_dir / "sales.xml", when=clock.now)

    monitor = ChangeMonitor(paths, clock=clock, owner_resolver=_unknown_owner)

    assert monitor.poll() == []
    assert not paths.change_log.exists()


def test_missing_upload_dir_does_not_raise(tmp_path, paths: DaemonPaths, clock) -> None:
    paths.upload_dir = tmp_path / "gone"

    monitor = ChangeMonitor(paths, clock=clock, owner_resolver=_owner)

    assert monitor.poll() == []


def test_future_modification_is_reported_once(paths: DaemonPaths, clock) -> None:
    """A timestamp ahead of the clock is reported by the poll that reaches it, then never again."""
    touch(paths.upload_dir / "sales.xml", when=clock.now + timedelta(seconds=30))
    monitor = ChangeMonitor(paths, clock=clock, owner_resolver=_owner)

    counts = []
    for _ in range(5):
        counts.append(len(monitor.poll()))
        clock.advance(10)

    assert counts == [0, 0, 0, 1, 0]
    assert len(paths.change_log.read_text(encoding="utf-8").splitlines()) == 1


def test_modification_at_poll_boundary_is_counted_once(paths: DaemonPaths, clock) -> None:
    touch(paths.upload_dir / "warehouse.xml", when=clock.now)
    monitor = ChangeMonitor(paths, clock=clock, owner_resolver=_owner)

    assert [c.name for c in monitor.poll()] == ["warehouse.xml"]
    clock.advance(10)
    assert monitor.poll() == []
