"""Command-line interface for the report daemon."""

import logging
import logging.handlers
import os
import signal
import sys
import click
from typing import Optional

from .core.daemon import ReportDaemon
from .core.errors import DaemonNotRunningError, DaemonStartupError
from .core.lifecycle import is_process_alive, read_pid, signal_daemon
from .config.config_manager import ConfigManager
from .utils.formatters import LOG_TIMESTAMP_FORMAT, format_date, format_file_size, format_mode


LOG_FORMAT = '[%(asctime)s] %(levelname)s: %(message)s'
SYSLOG_FORMAT = 'report_daemon[%(process)d]: %(levelname)s: %(message)s'


def setup_logging(level: str, log_file: Optional[str] = None, console: bool = True,
                  syslog_address: Optional[str] = None):
    """Set up logging configuration.

    Every record goes to each configured sink: the console, the error log
    file and syslog. A sink that cannot be opened is skipped with a warning.
    """
    # Convert string level to logging constant
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')

    # Create formatter
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_TIMESTAMP_FORMAT)

    # Set up root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Add file handler if specified
    if log_file:
        try:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            click.echo(f"Warning: Could not set up file logging: {e}", err=True)

    if syslog_address:
        try:
            syslog_handler = logging.handlers.SysLogHandler(
                address=syslog_address,
                facility=logging.handlers.SysLogHandler.LOG_DAEMON
            )
            syslog_handler.setFormatter(logging.Formatter(SYSLOG_FORMAT))
            root_logger.addHandler(syslog_handler)
        except OSError as e:
            click.echo(f"Warning: Could not set up syslog logging: {e}", err=True)


def _load_daemon(ctx) -> ReportDaemon:
    """Build the daemon and attach its log sinks."""
    daemon = ReportDaemon(ctx.obj.get('config_path'))
    daemon.paths.ensure_directories()

    logging_config = daemon.config_manager.get_logging_config()
    setup_logging(
        ctx.obj.get('log_level') or logging_config['level'],
        ctx.obj.get('log_file') or str(daemon.paths.error_log),
        console=logging_config['console'],
        syslog_address=logging_config['syslog_address'] if logging_config['syslog'] else None
    )
    return daemon


def _load_config(ctx) -> ConfigManager:
    config_manager = ConfigManager(ctx.obj.get('config_path'))
    config_manager.load_config()
    return config_manager


@click.group()
@click.option('--config', '-c', 'config_path',
              help='Path to configuration file')
@click.option('--log-level', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level (overrides the configuration file)')
@click.option('--log-file',
              help='Log file path (defaults to error.log in the log directory)')
@click.pass_context
def cli(ctx, config_path: Optional[str], log_level: Optional[str], log_file: Optional[str]):
    """Report Daemon - collect department report uploads on a daily schedule."""

    # Ensure context exists
    ctx.ensure_object(dict)

    # Console logging until a command attaches the daemon's sinks
    setup_logging(log_level or 'INFO')

    ctx.obj['config_path'] = config_path
    ctx.obj['log_level'] = log_level
    ctx.obj['log_file'] = log_file


@cli.command()
@click.pass_context
def run(ctx):
    """Run the daemon in the foreground until SIGTERM/SIGINT."""
    try:
        daemon = _load_daemon(ctx)
    except (ValueError, FileNotFoundError) as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    try:
        status = daemon.run()
    except DaemonStartupError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        logging.shutdown()

    sys.exit(status)


@cli.command('run-once')
@click.pass_context
def run_once(ctx):
    """Transfer, back up and check immediately, then exit."""
    try:
        daemon = _load_daemon(ctx)
    except (ValueError, FileNotFoundError) as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    paths = daemon.paths
    click.echo("Paths:")
    click.echo(f"  Upload: {paths.upload_dir}")
    click.echo(f"  Reporting: {paths.reporting_dir}")
    click.echo(f"  Backup: {paths.backup_dir}")
    click.echo(f"  Logs: {paths.log_dir}")

    result = daemon.run_once()

    transfer = daemon.transfer_engine.last_result
    backup = daemon.backup_engine.last_result
    coverage = daemon.completeness_checker.last_coverage

    click.echo("\nSummary:")
    click.echo(f"  Transferred: {len(transfer.transferred)} files ({len(transfer.failed)} failed)")
    if backup.snapshot_path:
        click.echo(f"  Backup: {len(backup.copied)} files to {backup.snapshot_path} ({len(backup.failed)} failed)")
    else:
        click.echo("  Backup: snapshot directory could not be created")
    if coverage.complete:
        click.echo(f"  Reports for {coverage.report_date}: complete")
    else:
        click.echo(f"  Reports for {coverage.report_date}: missing {', '.join(coverage.missing)}")

    sys.exit(0 if result.success else 1)


@cli.command()
@click.pass_context
def check(ctx):
    """Check whether every department uploaded today's report."""
    try:
        daemon = _load_daemon(ctx)
    except (ValueError, FileNotFoundError) as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    complete = daemon.completeness_checker.check_missing_uploads()
    coverage = daemon.completeness_checker.last_coverage

    click.echo(f"Report check for {coverage.report_date}:")
    for department, present in coverage.found.items():
        click.echo(f"  {department:<15} {'received' if present else 'MISSING'}")

    sys.exit(0 if complete else 1)


@cli.command()
@click.pass_context
def trigger(ctx):
    """Ask the running daemon to run the pipeline now (SIGUSR1)."""
    _signal_running_daemon(ctx, signal.SIGUSR1, "Pipeline run requested")


@cli.command()
@click.pass_context
def stop(ctx):
    """Ask the running daemon to shut down (SIGTERM)."""
    _signal_running_daemon(ctx, signal.SIGTERM, "Shutdown requested")


def _signal_running_daemon(ctx, sig: int, message: str):
    try:
        config_manager = _load_config(ctx)
        pid = signal_daemon(config_manager.get_paths_config()['pid_file'], sig)
    except (ValueError, FileNotFoundError, DaemonNotRunningError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except PermissionError as e:
        click.echo(f"Error: not allowed to signal the daemon: {e}", err=True)
        sys.exit(1)

    click.echo(f"{message} (pid {pid})")


@cli.command()
@click.pass_context
def status(ctx):
    """Show daemon, directory lock and pending upload status."""
    try:
        daemon = ReportDaemon(ctx.obj.get('config_path'))
    except (ValueError, FileNotFoundError) as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    paths = daemon.paths

    try:
        pid = read_pid(paths.pid_file)
        state = "running" if is_process_alive(pid) else "not running (stale PID file)"
        click.echo(f"Daemon: {state} (pid {pid})")
    except DaemonNotRunningError:
        click.echo("Daemon: not running")

    click.echo(f"Schedule: {daemon.schedule.describe()}")

    click.echo("Directories:")
    for label, lock_state in daemon.lock_controller.state().items():
        directory = daemon.lock_controller.directories[label]
        if lock_state is None:
            click.echo(f"  {label:<10} {directory} (unavailable)")
            continue
        mode = os.stat(directory).st_mode
        click.echo(f"  {label:<10} {directory} {lock_state.value} ({format_mode(mode)})")

    try:
        reports = daemon.scanner.scan_reporting(paths.reporting_dir)
        total = sum(report.size for report in reports)
        click.echo(f"Reporting area: {len(reports)} reports ({format_file_size(total)})")
    except OSError as e:
        click.echo(f"Reporting area: unavailable ({e})")

    try:
        uploads = daemon.scanner.scan_uploads(paths.upload_dir)
    except OSError as e:
        click.echo(f"Pending uploads: unavailable ({e})")
        return

    click.echo(f"Pending uploads: {len(uploads)}")
    for upload in uploads:
        try:
            size = format_file_size(os.path.getsize(upload.path))
        except OSError:
            size = "?"
        department = upload.department or "unknown"
        click.echo(
            f"  {upload.name:<40} {department:<15} {upload.report_date or '-':<10} "
            f"{size:>6} {format_date(upload.modified_time, short=True)}"
        )


@cli.command('validate-config')
@click.pass_context
def validate_config(ctx):
    """Validate configuration file."""
    try:
        config_manager = _load_config(ctx)
    except (ValueError, FileNotFoundError) as e:
        click.echo(f"Configuration validation failed: {e}", err=True)
        sys.exit(1)

    click.echo("Configuration loaded successfully")
    if config_manager.loaded_from:
        click.echo(f"  Source: {config_manager.loaded_from}")
    else:
        click.echo("  Source: built-in defaults")

    paths = config_manager.get_paths_config()
    schedule = config_manager.get_schedule_config()
    reports = config_manager.get_reports_config()
    locking = config_manager.get_locking_config()

    click.echo("\nConfiguration Summary:")
    for key in ('upload_dir', 'reporting_dir', 'backup_dir', 'log_dir', 'pid_file', 'lock_file'):
        click.echo(f"  {key}: {paths[key]}")
    click.echo(f"  Schedule: daily at {schedule['hour']:02d}:{schedule['minute']:02d}")
    click.echo(f"  Departments: {', '.join(reports['departments'])} ({reports['match_mode']} matching)")
    click.echo(f"  Lock modes: locked {format_mode(locking['locked_mode'])}, "
               f"unlocked {format_mode(locking['unlocked_mode'])}")


def main():
    """Main CLI entry point."""
    cli()


if __name__ == '__main__':
    main()
