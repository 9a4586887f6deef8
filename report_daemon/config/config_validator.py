"""Configuration validation for the report daemon."""

from typing import Dict, Any


KNOWN_SECTIONS = ['paths', 'schedule', 'monitoring', 'reports', 'locking', 'logging', 'notifications']
PATH_FIELDS = ['upload_dir', 'reporting_dir', 'backup_dir', 'log_dir', 'lock_file', 'pid_file']
MATCH_MODES = ['substring', 'strict']
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


class ConfigValidator:
    """Validates report daemon configuration."""

    def validate(self, config: Dict[str, Any]) -> None:
        """Validate configuration data.

        Args:
            config: Configuration dictionary to validate.

        Raises:
            ValueError: If configuration is invalid.
        """
        self._validate_structure(config)
        self._validate_paths(config.get('paths') or {})
        self._validate_schedule(config.get('schedule') or {})
        self._validate_monitoring(config.get('monitoring') or {})
        self._validate_reports(config.get('reports') or {})
        self._validate_locking(config.get('locking') or {})
        self._validate_logging(config.get('logging') or {})
        self._validate_notifications(config.get('notifications') or {})

    def _validate_structure(self, config: Dict[str, Any]) -> None:
        """Validate basic configuration structure.

        Args:
            config: Configuration dictionary.

        Raises:
            ValueError: If the configuration or one of its sections is not a mapping.
        """
        if not isinstance(config, dict):
            raise ValueError("Configuration must be a mapping")

        unknown_sections = [section for section in config if section not in KNOWN_SECTIONS]
        if unknown_sections:
            raise ValueError(f"Unknown configuration sections: {unknown_sections}")

        for section, value in config.items():
            if value is not None and not isinstance(value, dict):
                raise ValueError(f"Configuration section '{section}' must be a dictionary")

    def _validate_paths(self, paths: Dict[str, Any]) -> None:
        for field, value in paths.items():
            if field not in PATH_FIELDS:
                raise ValueError(f"Unknown path setting: {field}")
            if not value or not isinstance(value, str):
                raise ValueError(f"Path setting '{field}' cannot be empty")

    def _validate_schedule(self, schedule: Dict[str, Any]) -> None:
        if 'hour' in schedule:
            self._require_int_range(schedule['hour'], 0, 23, "schedule.hour")
        if 'minute' in schedule:
            self._require_int_range(schedule['minute'], 0, 59, "schedule.minute")
        for field in ('poll_interval_seconds', 'post_run_sleep_seconds'):
            if field in schedule:
                self._require_positive(schedule[field], f"schedule.{field}")

        if 'poll_interval_seconds' in schedule and 'post_run_sleep_seconds' in schedule:
            self.validate_schedule_timing(schedule)

    def validate_schedule_timing(self, schedule: Dict[str, Any]) -> None:
        """Check the post-run sleep against the poll interval.

        Args:
            schedule: Schedule section with both intervals present.

        Raises:
            ValueError: If a scheduled run could trigger twice in the same minute.
        """
        if schedule['post_run_sleep_seconds'] + schedule['poll_interval_seconds'] <= 60:
            raise ValueError(
                "schedule.post_run_sleep_seconds plus poll_interval_seconds must exceed 60 "
                "so a scheduled run cannot trigger twice in the same minute"
            )

    def _validate_monitoring(self, monitoring: Dict[str, Any]) -> None:
        if 'min_interval_seconds' in monitoring:
            self._require_positive(monitoring['min_interval_seconds'], "monitoring.min_interval_seconds")

    def _validate_reports(self, reports: Dict[str, Any]) -> None:
        if 'suffix' in reports and (not reports['suffix'] or not isinstance(reports['suffix'], str)):
            raise ValueError("reports.suffix must be a non-empty string")

        if 'departments' in reports:
            departments = reports['departments']
            if not isinstance(departments, list) or not departments:
                raise ValueError("reports.departments must be a non-empty list")
            for department in departments:
                if not isinstance(department, str) or not department:
                    raise ValueError(f"Invalid department keyword: {department!r}")
            if len(set(departments)) != len(departments):
                raise ValueError("reports.departments contains duplicates")

        match_mode = reports.get('match_mode', 'substring')
        if match_mode not in MATCH_MODES:
            raise ValueError(f"reports.match_mode must be one of {MATCH_MODES}, got {match_mode!r}")

    def _validate_locking(self, locking: Dict[str, Any]) -> None:
        for field in ('locked_mode', 'unlocked_mode'):
            if field not in locking:
                continue
            value = locking[field]
            try:
                mode = value if isinstance(value, int) else int(str(value), 8)
            except (ValueError, TypeError):
                raise ValueError(f"locking.{field} must be an octal mode such as '0755': {value!r}")
            if not (0 <= mode <= 0o7777):
                raise ValueError(f"locking.{field} is out of range: {value!r}")

    def _validate_logging(self, logging_config: Dict[str, Any]) -> None:
        level = logging_config.get('level', 'INFO')
        if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
            raise ValueError(f"logging.level must be one of {LOG_LEVELS}, got {level!r}")

    def _validate_notifications(self, notifications: Dict[str, Any]) -> None:
        if 'queue_size' in notifications:
            self._require_positive(notifications['queue_size'], "notifications.queue_size")

    def _require_int_range(self, value: Any, low: int, high: int, name: str) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or not (low <= value <= high):
            raise ValueError(f"{name} must be an integer between {low} and {high}: {value!r}")

    def _require_positive(self, value: Any, name: str) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ValueError(f"{name} must be a positive number: {value!r}")
