"""Process control files: the singleton lease and the PID file."""

import os
import errno
import fcntl
import logging
import signal
from pathlib import Path
from typing import List, Optional

from .errors import DaemonNotRunningError, DaemonStartupError


LOCK_FILE_MODE = 0o600

logger = logging.getLogger(__name__)

# Leases taken through acquire_singleton(); referenced here so their
# descriptors stay open until the process exits.
_held_leases: List["SingletonLease"] = []


class SingletonLease:
    """Exclusive advisory lock on a lock file, held for the life of the process.

    The descriptor stays open while the daemon runs; closing it releases
    the lock. The OS drops it on process exit.
    """

    def __init__(self, lock_path):
        self.lock_path = Path(lock_path)
        self.fd: Optional[int] = None

    @property
    def held(self) -> bool:
        return self.fd is not None

    def acquire(self) -> bool:
        """Try to take the lock without blocking.

        Returns:
            True if this lease now holds the lock, False if another holder has it
            or the lock file cannot be opened.
        """
        if self.held:
            return True

        try:
            fd = os.open(self.lock_path, os.O_RDWR | os.O_CREAT, LOCK_FILE_MODE)
        except OSError as e:
            logger.error(f"Failed to open/create lock file {self.lock_path}: {e}")
            return False

        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            os.close(fd)
            if e.errno not in (errno.EAGAIN, errno.EACCES, errno.EWOULDBLOCK):
                logger.error(f"Failed to lock file {self.lock_path}: {e}")
            return False

        self.fd = fd
        return True


def acquire_singleton(lock_path) -> bool:
    """Take the daemon's singleton lease on ``lock_path``.

    Returns:
        True if acquired, False if another live lease holds it.
    """
    lease = SingletonLease(lock_path)
    if not lease.acquire():
        return False
    _held_leases.append(lease)
    return True


def write_pid(pid_path) -> int:
    """Write the current process id to ``pid_path``.

    Raises:
        DaemonStartupError: If the file cannot be written.
    """
    pid = os.getpid()
    try:
        with open(pid_path, 'w', encoding='utf-8') as f:
            f.write(f"{pid}\n")
    except OSError as e:
        raise DaemonStartupError(f"Failed to write PID file {pid_path}: {e}")
    logger.info(f"PID {pid} written to {pid_path}")
    return pid


def read_pid(pid_path) -> int:
    """Read the daemon process id from ``pid_path``.

    Raises:
        DaemonNotRunningError: If the file is missing or malformed.
    """
    try:
        with open(pid_path, 'r', encoding='utf-8') as f:
            content = f.read().strip()
    except FileNotFoundError:
        raise DaemonNotRunningError(f"PID file not found: {pid_path}")
    except OSError as e:
        raise DaemonNotRunningError(f"Could not read PID file {pid_path}: {e}")

    try:
        return int(content)
    except ValueError:
        raise DaemonNotRunningError(f"PID file {pid_path} does not contain a process id")


def is_process_alive(pid: int) -> bool:
    """Check whether a process with ``pid`` exists."""
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


def signal_daemon(pid_path, sig: int) -> int:
    """Send ``sig`` to the daemon recorded in ``pid_path``.

    Returns:
        The pid that was signalled.

    Raises:
        DaemonNotRunningError: If no live daemon is recorded.
    """
    pid = read_pid(pid_path)
    try:
        os.kill(pid, sig)
    except ProcessLookupError:
        raise DaemonNotRunningError(f"Process {pid} from {pid_path} is not running")
    logger.info(f"Sent {signal.Signals(sig).name} to daemon (pid {pid})")
    return pid


def remove_control_file(path, description: str) -> bool:
    """Delete a PID or lock file. A file that is already gone counts as removed.

    Returns:
        True if the file no longer exists.
    """
    try:
        os.unlink(path)
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.warning(f"Failed to remove {description} {path}: {e}")
        return False
    return True
