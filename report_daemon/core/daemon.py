"""Main report daemon: lifecycle, control loop and the privileged pipeline."""

import logging
import signal
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from .backup import BackupEngine
from .change_monitor import ChangeMonitor
from .completeness import CompletenessChecker
from .errors import DaemonStartupError
from .lifecycle import acquire_singleton, remove_control_file, write_pid
from .locks import DirectoryLockController
from .models import DaemonPaths, PipelineResult
from .schedule import DailySchedule
from .scanner import DirectoryScanner
from .transfer import TransferEngine
from ..config.config_manager import ConfigManager
from ..reporters.notifier import EventNotifier


TERMINATE_SIGNALS = (signal.SIGTERM, signal.SIGINT)
TRIGGER_SIGNAL = signal.SIGUSR1
IGNORED_SIGNALS = (signal.SIGHUP, signal.SIGUSR2)


class ReportDaemon:
    """Coordinates the report daemon components.

    Signal handlers only record requests; the control loop acts on them
    between iterations.
    """

    def __init__(self, config_path: Optional[str] = None,
                 config: Optional[Dict[str, Any]] = None,
                 clock: Callable[[], datetime] = datetime.now,
                 sleeper: Optional[Callable[[float], None]] = None):
        """Initialize report daemon.

        Args:
            config_path: Optional path to configuration file.
            config: In-memory configuration used instead of a file.
            clock: Returns the current local time.
            sleeper: Replaces the interruptible wait between loop iterations.
        """
        self.config_manager = ConfigManager(config_path)
        if config is not None:
            self.config = self.config_manager.load_dict(config)
        else:
            self.config = self.config_manager.load_config()
        self.clock = clock
        self.logger = logging.getLogger(__name__)

        self._sleeper = sleeper or self._wait
        self._wake = threading.Event()
        self._stop_requested = False
        self._trigger_requested = False
        self._started = False
        self._cleaned_up = False

        # Initialize components
        self._initialize_components()

    def _initialize_components(self):
        """Initialize daemon components from configuration."""
        self.paths = DaemonPaths.from_config(self.config_manager.get_paths_config())

        reports_config = self.config_manager.get_reports_config()
        self.scanner = DirectoryScanner(
            suffix=reports_config['suffix'],
            departments=reports_config['departments'],
            match_mode=reports_config['match_mode']
        )

        locking_config = self.config_manager.get_locking_config()
        self.lock_controller = DirectoryLockController(
            self.paths,
            locked_mode=locking_config['locked_mode'],
            unlocked_mode=locking_config['unlocked_mode']
        )

        self.completeness_checker = CompletenessChecker(self.paths, self.scanner, clock=self.clock)
        self.backup_engine = BackupEngine(self.paths, self.scanner, clock=self.clock)
        self.transfer_engine = TransferEngine(self.paths, self.scanner, clock=self.clock)
        self.change_monitor = ChangeMonitor(
            self.paths,
            self.scanner,
            min_interval=self.config_manager.get_monitoring_config()['min_interval_seconds'],
            clock=self.clock
        )

        schedule_config = self.config_manager.get_schedule_config()
        self.schedule = DailySchedule(hour=schedule_config['hour'], minute=schedule_config['minute'])
        self.poll_interval = schedule_config['poll_interval_seconds']
        self.post_run_sleep = schedule_config['post_run_sleep_seconds']

        notifications_config = self.config_manager.get_notifications_config()
        self.notifier = EventNotifier(
            enabled=notifications_config['enabled'],
            queue_size=notifications_config['queue_size']
        )

    def start(self) -> None:
        """Take the singleton lease, write the PID file and install signal handlers.

        Raises:
            DaemonStartupError: If another instance is running or the PID file
                                cannot be written.
        """
        if not acquire_singleton(self.paths.lock_file):
            raise DaemonStartupError(
                f"Daemon is already running or could not acquire lock {self.paths.lock_file}"
            )
        self._started = True

        try:
            write_pid(self.paths.pid_file)
        except DaemonStartupError:
            self.cleanup()
            raise

        self.paths.ensure_directories()
        self.install_signal_handlers()
        self.logger.info(f"Report daemon started, pipeline scheduled {self.schedule.describe()}")
        self.notifier.notify("daemon started")

    def run(self) -> int:
        """Start the daemon and run the control loop until a stop is requested.

        Returns:
            Process exit status.
        """
        self.start()
        try:
            self._loop()
        finally:
            self.cleanup()
        return 0

    def _loop(self) -> None:
        while not self._stop_requested:
            self.change_monitor.poll()

            if self._trigger_requested:
                self._trigger_requested = False
                self.logger.info("Manual trigger received, performing backup/transfer")
                self._run_pipeline_safely("manual")
                now = self.clock()
                if self.schedule.is_due(now):
                    self.logger.info("Manual run covers the scheduled run for this minute")
                    self.schedule.mark_ran(now)

            now = self.clock()
            if not self._stop_requested and self.schedule.is_due(now):
                self.logger.info("Starting scheduled transfer and backup")
                self.schedule.mark_ran(now)
                self._run_pipeline_safely("scheduled")
                self._sleep(self.post_run_sleep)

            self._sleep(self.poll_interval)

        self.logger.info("Control loop stopped")

    def _run_pipeline_safely(self, reason: str) -> Optional[PipelineResult]:
        try:
            return self.run_pipeline(reason)
        except Exception as e:
            self.logger.error(f"Pipeline ({reason}) aborted: {e}")
            return None

    def run_pipeline(self, reason: str = "manual") -> PipelineResult:
        """Lock, check, back up, transfer and unlock.

        The directories are unlocked even if a step raises.

        Args:
            reason: Why the pipeline runs (``scheduled`` or ``manual``).

        Returns:
            Outcome of each step.
        """
        result = PipelineResult(reason=reason, started_at=self.clock())
        self.notifier.notify(f"pipeline started ({reason})")

        result.locked = self.lock_controller.lock_directories()
        try:
            result.complete = self.completeness_checker.check_missing_uploads()
            if not result.complete:
                missing = self.completeness_checker.last_coverage.missing
                self.notifier.notify(f"missing reports: {' '.join(missing)}")
            result.backed_up = self.backup_engine.backup_reporting_dir()
            result.transferred = self.transfer_engine.transfer_uploads()
        finally:
            result.unlocked = self.lock_controller.unlock_directories()

        self._report(result)
        return result

    def run_once(self) -> PipelineResult:
        """Transfer, back up and check immediately, without locking or the singleton.

        Used to exercise the engines in the foreground.
        """
        self.paths.ensure_directories()
        result = PipelineResult(reason="once", started_at=self.clock(), locking=False)
        result.transferred = self.transfer_engine.transfer_uploads()
        result.backed_up = self.backup_engine.backup_reporting_dir()
        result.complete = self.completeness_checker.check_missing_uploads()
        self._report(result)
        return result

    def _report(self, result: PipelineResult) -> None:
        if result.success:
            self.logger.info(f"Pipeline ({result.reason}) completed successfully")
            self.notifier.notify(f"pipeline finished ({result.reason})")
        else:
            self.logger.warning(
                f"Pipeline ({result.reason}) completed with errors: locked={result.locked} "
                f"backed_up={result.backed_up} transferred={result.transferred} "
                f"unlocked={result.unlocked}"
            )
            self.notifier.notify(f"pipeline failed ({result.reason})")

    def install_signal_handlers(self) -> None:
        """Route termination, manual-trigger and other signals to the daemon."""
        for sig in TERMINATE_SIGNALS + (TRIGGER_SIGNAL,) + IGNORED_SIGNALS:
            signal.signal(sig, self._handle_signal)
        self.logger.info("Signal handlers established")

    def _handle_signal(self, signum, frame) -> None:
        if signum in TERMINATE_SIGNALS:
            self.logger.info("Received termination signal, cleaning up and exiting")
            self.request_stop()
        elif signum == TRIGGER_SIGNAL:
            self.logger.info("Received user-defined signal, scheduling backup/transfer")
            self.request_trigger()
        else:
            self.logger.warning(f"Unhandled signal ({signum}) received")

    def request_stop(self) -> None:
        self._stop_requested = True
        self._wake.set()

    def request_trigger(self) -> None:
        self._trigger_requested = True
        self._wake.set()

    def _sleep(self, seconds: float) -> None:
        if self._stop_requested or self._trigger_requested:
            return
        self._sleeper(seconds)

    def _wait(self, seconds: float) -> None:
        self._wake.wait(seconds)
        self._wake.clear()

    def cleanup(self) -> None:
        """Unlock directories, remove control files and close the notifier.

        Safe to call more than once.
        """
        if self._cleaned_up:
            return
        self._cleaned_up = True

        self.logger.info("Cleaning up daemon resources")
        self.lock_controller.unlock_directories()

        if self._started:
            remove_control_file(self.paths.pid_file, "PID file")
            remove_control_file(self.paths.lock_file, "lock file")

        self.notifier.notify("daemon stopping")
        self.notifier.close()

        for handler in logging.getLogger().handlers:
            handler.flush()
