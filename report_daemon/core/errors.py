"""Exceptions raised by the report daemon."""


class DaemonError(RuntimeError):
    """Base error for daemon failures."""


class DaemonStartupError(DaemonError):
    """The daemon cannot start: singleton held elsewhere or control files unwritable."""


class DaemonNotRunningError(DaemonError):
    """No live daemon could be found through the PID file."""
