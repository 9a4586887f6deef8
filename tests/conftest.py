"""Shared fixtures for report daemon tests."""

from __future__ import annotations

import logging
import os
import signal
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict

import pytest

from report_daemon.core.models import DaemonPaths


class FakeClock:
    """Controllable replacement for ``datetime.now``."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


def touch(path: Path, content: str = "<report/>", when: datetime | None = None) -> Path:
    """Create ``path`` with ``content`` and optionally set its modification time.

    Args:
        path: File to create.
        content: Text written to the file.
        when: Modification time to apply.

    Returns:
        Path: The created file.
    """
    path.write_text(content, encoding="utf-8")
    if when is not None:
        stamp = when.timestamp()
        os.utime(path, (stamp, stamp))
    return path


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 12, 0, 0))


@pytest.fixture
def paths(tmp_path: Path) -> DaemonPaths:
    """Return a daemon layout inside ``tmp_path`` with every directory created.

    Args:
        tmp_path: Temporary directory provided by pytest.

    Returns:
        DaemonPaths: Layout rooted at the temporary directory.
    """
    layout = DaemonPaths(
        upload_dir=tmp_path / "data" / "upload",
        reporting_dir=tmp_path / "data" / "reporting",
        backup_dir=tmp_path / "data" / "backup",
        log_dir=tmp_path / "logs",
        pid_file=tmp_path / "report_daemon.pid",
        lock_file=tmp_path / "report_daemon.lock",
    )
    layout.ensure_directories()
    return layout


@pytest.fixture
def daemon_config(tmp_path: Path) -> Dict[str, Any]:
    """Return an in-memory daemon configuration rooted at ``tmp_path``.

    Directories stay owner-writable while "locked" so transfers succeed when the
    test suite does not run as root.
    """
    return {
        'paths': {
            'upload_dir': str(tmp_path / "data" / "upload"),
            'reporting_dir': str(tmp_path / "data" / "reporting"),
            'backup_dir': str(tmp_path / "data" / "backup"),
            'log_dir': str(tmp_path / "logs"),
            'lock_file': str(tmp_path / "report_daemon.lock"),
            'pid_file': str(tmp_path / "report_daemon.pid"),
        },
        'schedule': {'hour': 1, 'minute': 0},
        'locking': {'locked_mode': '0755', 'unlocked_mode': '0755'},
        'logging': {'syslog': False},
    }


@pytest.fixture
def restore_signal_handlers():
    """Put back the process signal handlers a test replaced."""
    signals = (signal.SIGTERM, signal.SIGINT, signal.SIGUSR1, signal.SIGUSR2, signal.SIGHUP)
    saved = {sig: signal.getsignal(sig) for sig in signals}
    yield
    for sig, handler in saved.items():
        signal.signal(sig, handler)


@pytest.fixture(autouse=True)
def reset_root_logger():
    """Undo handler changes made by CLI logging setup."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
