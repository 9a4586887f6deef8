"""Configuration management for the report daemon."""

import os
import copy
import logging
import yaml
from typing import Dict, Any, Optional

from .config_validator import ConfigValidator


DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    'paths': {
        'upload_dir': './data/upload',
        'reporting_dir': './data/reporting',
        'backup_dir': './data/backup',
        'log_dir': './logs',
        'lock_file': './report_daemon.lock',
        'pid_file': './report_daemon.pid'
    },
    'schedule': {
        'hour': 1,
        'minute': 0,
        'poll_interval_seconds': 10,
        'post_run_sleep_seconds': 60
    },
    'monitoring': {
        'min_interval_seconds': 5
    },
    'reports': {
        'suffix': '.xml',
        'departments': ['warehouse', 'manufacturing', 'sales', 'distribution'],
        'match_mode': 'substring'  # substring, strict
    },
    'locking': {
        'locked_mode': '0555',
        'unlocked_mode': '0755'
    },
    'logging': {
        'level': 'INFO',
        'syslog': True,
        'syslog_address': '/dev/log',
        'console': True
    },
    'notifications': {
        'enabled': True,
        'queue_size': 64
    }
}


class ConfigManager:
    """Manages configuration loading and validation for the report daemon."""

    DEFAULT_CONFIG_LOCATIONS = [
        "config.yaml",
        "config.yml",
        os.path.expanduser("~/.report-daemon/config.yaml"),
        os.path.expanduser("~/.report-daemon/config.yml"),
        "/etc/report-daemon/config.yaml",
        "/etc/report-daemon/config.yml"
    ]

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional path to config file. If not provided,
                        will search in default locations.
        """
        self.config_path = config_path
        self.config_data: Dict[str, Any] = {}
        self.loaded_from: Optional[str] = None
        self.validator = ConfigValidator()
        self.logger = logging.getLogger(__name__)

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from file.

        Falls back to built-in defaults when no file is given and none of the
        default locations exist.

        Returns:
            Dictionary containing configuration data.

        Raises:
            FileNotFoundError: If an explicit config file cannot be found.
            ValueError: If config file is invalid.
        """
        config_file = self._find_config_file()

        if config_file is None:
            self.logger.info("No configuration file found, using built-in defaults")
            self.config_data = {}
        else:
            try:
                with open(config_file, 'r', encoding='utf-8') as f:
                    self.config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in config file {config_file}: {e}")
            except OSError as e:
                raise ValueError(f"Error reading config file {config_file}: {e}")
            self.loaded_from = config_file

        # Validate configuration
        self.validator.validate(self.config_data)

        # Set defaults
        self._set_defaults()
        self.validator.validate_schedule_timing(self.config_data['schedule'])

        return self.config_data

    def load_dict(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and complete an in-memory configuration."""
        self.config_data = copy.deepcopy(config_data)
        self.validator.validate(self.config_data)
        self._set_defaults()
        self.validator.validate_schedule_timing(self.config_data['schedule'])
        return self.config_data

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in default locations.

        Returns:
            Path to configuration file, or None if none exists.

        Raises:
            FileNotFoundError: If the explicit config path does not exist.
        """
        if self.config_path:
            if os.path.exists(self.config_path):
                return self.config_path
            else:
                raise FileNotFoundError(f"Config file not found: {self.config_path}")

        for location in self.DEFAULT_CONFIG_LOCATIONS:
            if os.path.exists(location):
                return location

        return None

    def _set_defaults(self):
        """Set default values for optional configuration parameters."""
        # Merge defaults with existing config
        for section, section_defaults in DEFAULT_CONFIG.items():
            if section not in self.config_data or self.config_data[section] is None:
                self.config_data[section] = {}
            for key, value in section_defaults.items():
                if key not in self.config_data[section]:
                    self.config_data[section][key] = copy.deepcopy(value)

    def get_paths_config(self) -> Dict[str, Any]:
        """Get filesystem paths configuration.

        Returns:
            Paths configuration dictionary.
        """
        return self.config_data.get('paths', {})

    def get_schedule_config(self) -> Dict[str, Any]:
        """Get schedule configuration.

        Returns:
            Schedule configuration dictionary.
        """
        return self.config_data.get('schedule', {})

    def get_monitoring_config(self) -> Dict[str, Any]:
        """Get monitoring configuration.

        Returns:
            Monitoring configuration dictionary.
        """
        return self.config_data.get('monitoring', {})

    def get_reports_config(self) -> Dict[str, Any]:
        """Get reports configuration.

        Returns:
            Reports configuration dictionary.
        """
        return self.config_data.get('reports', {})

    def get_locking_config(self) -> Dict[str, Any]:
        """Get directory locking configuration with modes parsed to integers."""
        locking = self.config_data.get('locking', {})
        return {
            'locked_mode': parse_mode(locking.get('locked_mode', '0555')),
            'unlocked_mode': parse_mode(locking.get('unlocked_mode', '0755'))
        }

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration.

        Returns:
            Logging configuration dictionary.
        """
        return self.config_data.get('logging', {})

    def get_notifications_config(self) -> Dict[str, Any]:
        """Get notifications configuration.

        Returns:
            Notifications configuration dictionary.
        """
        return self.config_data.get('notifications', {})


def parse_mode(value) -> int:
    """Parse a permission mode given as an octal string (``"0755"``) or an int."""
    if isinstance(value, int):
        return value
    return int(str(value), 8)
