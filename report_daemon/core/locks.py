"""Permission-based locking of the upload and reporting directories."""

import os
import stat
import logging
from typing import Callable, Dict, Optional

from .models import DaemonPaths, DirectoryLockState


LOCKED_MODE = 0o555    # r-xr-xr-x
UNLOCKED_MODE = 0o755  # rwxr-xr-x


class DirectoryLockController:
    """Toggles the upload and reporting directories between writable and read-only.

    The lock is advisory: it only stops writers that respect permission bits.
    """

    def __init__(self, paths: DaemonPaths, locked_mode: int = LOCKED_MODE,
                 unlocked_mode: int = UNLOCKED_MODE):
        self.directories = {
            'upload': paths.upload_dir,
            'reporting': paths.reporting_dir,
        }
        self.locked_mode = locked_mode
        self.unlocked_mode = unlocked_mode
        self._saved_modes: Dict[str, int] = {}
        self.logger = logging.getLogger(__name__)

    def lock_directories(self) -> bool:
        """Make both directories read-only.

        The current mode of each directory is remembered so that unlocking
        can restore it.

        Returns:
            True only if both directories were locked.
        """
        self.logger.info("Locking directories for backup/transfer operations")
        self._saved_modes = {}
        for label, directory in self.directories.items():
            try:
                mode = stat.S_IMODE(os.stat(directory).st_mode)
            except OSError:
                continue
            if mode & stat.S_IWUSR:
                self._saved_modes[label] = mode
        return self._apply(lambda label: self.locked_mode, "lock")

    def unlock_directories(self) -> bool:
        """Restore write access on both directories.

        Each directory gets back the mode it had when it was locked, or
        ``unlocked_mode`` if it was not locked by this controller or was
        already read-only at the time.

        Returns:
            True only if both directories were unlocked.
        """
        self.logger.info("Unlocking directories after backup/transfer operations")
        success = self._apply(lambda label: self._saved_modes.get(label, self.unlocked_mode), "unlock")
        self._saved_modes = {}
        return success

    def _apply(self, mode_for: Callable[[str], int], action: str) -> bool:
        success = True
        for label, directory in self.directories.items():
            try:
                os.chmod(directory, mode_for(label))
            except OSError as e:
                self.logger.error(f"Failed to {action} {label} directory {directory}: {e}")
                success = False
        return success

    def state(self) -> Dict[str, Optional[DirectoryLockState]]:
        """Report the lock state of each directory, ``None`` when it cannot be read."""
        states = {}
        for label, directory in self.directories.items():
            try:
                mode = stat.S_IMODE(os.stat(directory).st_mode)
            except OSError as e:
                self.logger.warning(f"Could not stat {label} directory {directory}: {e}")
                states[label] = None
                continue
            if mode & stat.S_IWUSR:
                states[label] = DirectoryLockState.UNLOCKED
            else:
                states[label] = DirectoryLockState.LOCKED
        return states
