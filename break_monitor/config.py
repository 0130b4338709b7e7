"""
Configuration Management Module

Handles loading and managing configuration settings from YAML files.
"""

import copy
from pathlib import Path
from typing import Any, Dict

import yaml

from .errors import ConfigError, StartupError
from .logging_setup import get_logger
from .state_machine import Timings

DEFAULT_CONFIG: Dict[str, Any] = {
    'monitoring': {
        'tick_seconds': 5,
        'idle_threshold_seconds': 5,
        'probe': 'auto',
        'max_probe_failures': 3,
    },
    'pomodoro': {
        'work_session_seconds': 25 * 60,
        'short_break_seconds': 5 * 60,
        'long_break_seconds': 15 * 60,
        'long_break_every': 4,
        'resume_while_idle': True,
        'reset_idle_on_break': False,
    },
    'storage': {
        'state_path': './data/day_activity.json',
    },
    'notifications': {
        'backend': 'auto',
        'sound': 'default',
        'app_icon': './timer.png',
        'fail_on_error': False,
    },
    'logging': {
        'level': 'INFO',
        'log_file': 'logs/break_monitor.log',
        'max_log_size_mb': 10,
        'backup_count': 3,
    },
}

POSITIVE_INT_KEYS = (
    'monitoring.tick_seconds',
    'monitoring.idle_threshold_seconds',
    'monitoring.max_probe_failures',
    'pomodoro.work_session_seconds',
    'pomodoro.short_break_seconds',
    'pomodoro.long_break_seconds',
    'pomodoro.long_break_every',
)

BOOL_KEYS = (
    'pomodoro.resume_while_idle',
    'pomodoro.reset_idle_on_break',
    'notifications.fail_on_error',
)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """Manages application configuration settings."""

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.logger = get_logger(__name__)
        self.config_path = Path(config_path)
        self.config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file on top of the defaults."""
        if not self.config_path.exists():
            self.logger.debug(f"Configuration file not found: {self.config_path}, using defaults")
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            return

        try:
            with open(self.config_path, 'r', encoding='utf-8') as file:
                loaded = yaml.safe_load(file) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load configuration {self.config_path}: {e}") from e

        if not isinstance(loaded, dict):
            raise ConfigError(f"Configuration root must be a mapping: {self.config_path}")

        self.config = _merge(DEFAULT_CONFIG, loaded)
        self.validate()

    def validate(self) -> None:
        """
        Check timing and flag values.

        Raises:
            ConfigError: If a value has the wrong type or is not positive
        """
        for key in POSITIVE_INT_KEYS:
            value = self.get(key)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{key} must be a positive integer, got {value!r}")

        for key in BOOL_KEYS:
            if not isinstance(self.get(key), bool):
                raise ConfigError(f"{key} must be true or false, got {self.get(key)!r}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'pomodoro.long_break_seconds')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self.config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'monitoring.tick_seconds')
            value: Value to set
        """
        keys = key.split('.')
        config_ref = self.config

        # Navigate to the parent dictionary
        for k in keys[:-1]:
            if k not in config_ref:
                config_ref[k] = {}
            config_ref = config_ref[k]

        config_ref[keys[-1]] = value

    def save_config(self) -> None:
        """Save current configuration to file."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as file:
                yaml.safe_dump(self.config, file, default_flow_style=False, indent=2)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration {self.config_path}: {e}") from e

    def get_timings(self) -> Timings:
        """Build the state machine timings from the configuration."""
        return Timings(
            tick_seconds=self.get('monitoring.tick_seconds'),
            idle_threshold_seconds=self.get('monitoring.idle_threshold_seconds'),
            work_session_seconds=self.get('pomodoro.work_session_seconds'),
            short_break_seconds=self.get('pomodoro.short_break_seconds'),
            long_break_seconds=self.get('pomodoro.long_break_seconds'),
            long_break_every=self.get('pomodoro.long_break_every'),
            resume_while_idle=self.get('pomodoro.resume_while_idle'),
            reset_idle_on_break=self.get('pomodoro.reset_idle_on_break'),
        )

    def get_state_path(self) -> Path:
        """Get the path of the persisted day activity file."""
        return Path(self.get('storage.state_path', DEFAULT_CONFIG['storage']['state_path']))

    def get_log_file_path(self) -> Path:
        """Get the full path to the log file."""
        return Path(self.get('logging.log_file', DEFAULT_CONFIG['logging']['log_file']))

    def ensure_directories(self) -> None:
        """
        Ensure the state and log directories exist.

        Raises:
            StartupError: If a directory cannot be created
        """
        directories = [
            self.get_state_path().parent,
            self.get_log_file_path().parent,
        ]

        for directory in directories:
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StartupError(f"Cannot create directory {directory}: {e}") from e
