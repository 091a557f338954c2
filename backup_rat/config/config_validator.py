"""Configuration validation for backup-rat."""

from typing import Any, Dict, List

from ..core.patterns import compile_patterns


class ConfigValidator:
    """Validates backup-rat configuration."""

    REQUIRED_TARGET_FIELDS = ['path', 'target_path']
    BOOLEAN_FIELDS = ['multi_threaded', 'color', 'fancy_text', 'verbose']
    TARGET_BOOLEAN_FIELDS = ['optional', 'always_copy', 'multi_threaded']
    VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']

    def validate(self, config: Dict[str, Any]) -> None:
        """Validate configuration data.

        Args:
            config: Configuration dictionary to validate.

        Raises:
            ValueError: If configuration is invalid.
            InvalidPattern: If an ignore pattern is a malformed regex.
        """
        if not isinstance(config, dict):
            raise ValueError("Configuration must be a mapping")

        self._validate_settings(config)
        self._validate_targets(config.get('targets', []))

        if 'logging' in config:
            self._validate_logging_config(config['logging'])

    def _validate_settings(self, config: Dict[str, Any]) -> None:
        """Validate top-level settings.

        Raises:
            ValueError: If a setting has the wrong type or value.
        """
        for key in self.BOOLEAN_FIELDS:
            if key in config and not isinstance(config[key], bool):
                raise ValueError(f"Setting '{key}' must be true or false")

        if 'threads' in config:
            self._validate_positive_int(config['threads'], "Setting 'threads'")

        if 'daemon_interval' in config:
            interval = config['daemon_interval']
            if isinstance(interval, bool) or not isinstance(interval, int) or interval < 0:
                raise ValueError("Setting 'daemon_interval' must be a non-negative integer")

    def _validate_targets(self, targets: List[Dict[str, Any]]) -> None:
        """Validate backup targets configuration.

        Args:
            targets: List of target configurations.

        Raises:
            ValueError: If a target is invalid.
            InvalidPattern: If an ignore pattern is a malformed regex.
        """
        if targets is None:
            return
        if not isinstance(targets, list):
            raise ValueError("'targets' must be a list")

        for i, target in enumerate(targets):
            if not isinstance(target, dict):
                raise ValueError(f"Target {i} must be a dictionary")

            missing_fields = [field for field in self.REQUIRED_TARGET_FIELDS if field not in target]
            if missing_fields:
                raise ValueError(f"Target {i} missing required fields: {missing_fields}")

            for field in self.REQUIRED_TARGET_FIELDS:
                if not target[field] or not isinstance(target[field], str):
                    raise ValueError(f"Target {i} {field} must be a non-empty string")

            if 'tag' in target and target['tag'] is not None and not isinstance(target['tag'], str):
                raise ValueError(f"Target {i} tag must be a string")

            for key in self.TARGET_BOOLEAN_FIELDS:
                if key in target and not isinstance(target[key], bool):
                    raise ValueError(f"Target {i} '{key}' must be true or false")

            if 'keep_num' in target:
                self._validate_positive_int(target['keep_num'], f"Target {i} keep_num")
            if 'threads' in target:
                self._validate_positive_int(target['threads'], f"Target {i} threads")

            for key in ('ignore_files', 'ignore_folders'):
                patterns = target.get(key)
                if patterns is None:
                    continue
                if not isinstance(patterns, list):
                    raise ValueError(f"Target {i} {key} must be a list")
                # Compiling surfaces malformed regexes before any target runs
                compile_patterns(patterns)

    def _validate_logging_config(self, logging_config: Dict[str, Any]) -> None:
        """Validate logging configuration.

        Raises:
            ValueError: If the logging section is invalid.
        """
        if not isinstance(logging_config, dict):
            raise ValueError("'logging' must be a dictionary")

        level = logging_config.get('level', 'INFO')
        if not isinstance(level, str) or level.upper() not in self.VALID_LOG_LEVELS:
            raise ValueError(f"Logging configuration has invalid level: {level}")

    def _validate_positive_int(self, value: Any, name: str) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValueError(f"{name} must be a positive integer, got {value!r}")
