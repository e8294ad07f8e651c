"""
Configuration Manager Module

Provides utilities for loading and accessing project configuration.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, Optional

from occupancy.utils.exceptions import ConfigurationError


class ConfigManager:
    """Manages project configuration from YAML files."""

    _instance: Optional['ConfigManager'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls) -> 'ConfigManager':
        """Singleton pattern to ensure single config instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def load(self, config_path: str = "configs/config.yaml") -> Dict[str, Any]:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to configuration file

        Returns:
            Dict containing configuration

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If the file does not hold a mapping
            yaml.YAMLError: If config file is invalid
        """
        path = Path(config_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path, 'r') as f:
            loaded = yaml.safe_load(f)

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(str(config_path), "top level must be a mapping")

        self._config = loaded
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'intervals.confidence_level')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self._config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def require(self, key: str) -> Any:
        """
        Get a configuration value that must be present.

        Raises:
            ConfigurationError: If the key is missing
        """
        value = self.get(key)
        if value is None:
            raise ConfigurationError(key, "required value is missing")
        return value

    def get_all(self) -> Dict[str, Any]:
        """Get a copy of the entire configuration dictionary."""
        return self._config.copy()

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value (runtime only, not persisted).

        Args:
            key: Configuration key (dot notation)
            value: Value to set
        """
        keys = key.split('.')
        config = self._config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def reset(self) -> None:
        """Drop all loaded values."""
        self._config = {}
