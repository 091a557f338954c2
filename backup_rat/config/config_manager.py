"""Configuration management for backup-rat."""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
import yaml

from ..core.models import GlobalSettings, Target, host_parallelism
from ..core.patterns import compile_patterns
from .config_validator import ConfigValidator

APP_NAME = "backup-rat"


class ConfigManager:
    """Manages configuration loading and validation for backup-rat."""

    DEFAULT_CONFIG_LOCATIONS = [
        "config.yaml",
        "config.yml",
        os.path.join(click.get_app_dir(APP_NAME), "config.yaml"),
        os.path.join(click.get_app_dir(APP_NAME), "config.yml"),
        os.path.expanduser("~/.backup-rat/config.yaml"),
    ]

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional path to config file. If not provided,
                        will search in default locations.
        """
        self.config_path = config_path
        self.config_data: Dict[str, Any] = {}
        self.validator = ConfigValidator()

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from file.

        Returns:
            Dictionary containing configuration data.

        Raises:
            FileNotFoundError: If config file cannot be found.
            ValueError: If config file is invalid.
            InvalidPattern: If an ignore pattern is a malformed regex.
        """
        config_file = self._find_config_file()

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                self.config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {config_file}: {e}")
        except OSError as e:
            raise ValueError(f"Error reading config file {config_file}: {e}")

        self.load_dict(self.config_data)
        self.config_path = config_file
        return self.config_data

    def load_dict(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate an already parsed configuration and apply defaults."""
        self.validator.validate(config_data)
        self.config_data = config_data
        self._set_defaults()
        return self.config_data

    def _find_config_file(self) -> str:
        """Find configuration file in default locations.

        Returns:
            Path to configuration file.

        Raises:
            FileNotFoundError: If no config file is found.
        """
        if self.config_path:
            if os.path.exists(self.config_path):
                return self.config_path
            else:
                raise FileNotFoundError(f"Config file not found: {self.config_path}")

        for location in self.DEFAULT_CONFIG_LOCATIONS:
            if os.path.exists(location):
                return location

        raise FileNotFoundError(
            f"Configuration file not found in any of these locations:\n" +
            "\n".join(f"  - {loc}" for loc in self.DEFAULT_CONFIG_LOCATIONS)
        )

    def _set_defaults(self):
        """Set default values for optional configuration parameters."""
        defaults = {
            'multi_threaded': True,
            'threads': host_parallelism(),
            'color': True,
            'fancy_text': True,
            'verbose': False,
            'daemon_interval': 0,
        }
        for key, value in defaults.items():
            self.config_data.setdefault(key, value)

        if self.config_data.get('targets') is None:
            self.config_data['targets'] = []

        logging_defaults = {
            'level': 'INFO',
            'file': None,
        }
        section = self.config_data.setdefault('logging', {})
        for key, value in logging_defaults.items():
            section.setdefault(key, value)

    def get_settings(self) -> GlobalSettings:
        """Get global settings.

        Returns:
            GlobalSettings built from the configuration.
        """
        return GlobalSettings(
            multi_threaded=self.config_data['multi_threaded'],
            thread_count=self.config_data['threads'],
            color=self.config_data['color'],
            fancy_text=self.config_data['fancy_text'],
            verbose=self.config_data['verbose'],
            daemon_interval=self.config_data['daemon_interval'],
        )

    def get_targets(self) -> List[Target]:
        """Get all configured backup targets.

        Returns:
            List of targets in configuration order.
        """
        return [self._build_target(raw) for raw in self.config_data.get('targets', [])]

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration.

        Returns:
            Logging configuration dictionary.
        """
        return self.config_data.get('logging', {})

    def _build_target(self, raw: Dict[str, Any]) -> Target:
        return Target(
            tag=raw.get('tag'),
            source_path=_expand_path(raw['path']),
            destination_root=_expand_path(raw['target_path']),
            optional=raw.get('optional', False),
            always_copy=raw.get('always_copy', False),
            multi_threaded_override=raw.get('multi_threaded'),
            thread_count_override=raw.get('threads'),
            ignore_files=compile_patterns(raw.get('ignore_files') or []),
            ignore_folders=compile_patterns(raw.get('ignore_folders') or []),
            keep_num=raw.get('keep_num', 1),
        )


def _expand_path(value: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(value)))
