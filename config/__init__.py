"""
Configuration Module for the HUB3 Barcode Generator.

This module provides centralized configuration management using YAML files.
Field limits, heuristic thresholds, provider endpoints and rendering
parameters are all read from settings.yaml rather than hard-coded.
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional


# Environment variable that points to an alternative settings file
CONFIG_ENV_VAR = "UPLATKO_CONFIG"


class ConfigurationManager:
    """
    Centralized configuration management for uplatko.

    Loads settings.yaml once and serves values by dot-notation keys.
    Relative entries under ``paths`` are resolved against the project
    root, and ``~`` is expanded in the credential store path.

    Attributes:
        config_path (Path): Path to the configuration file.

    Example:
        >>> config = ConfigurationManager()
        >>> config.get("providers.groq.model")
        'llama-3.3-70b-versatile'
        >>> config.get("hub3.limits.description")
        35
    """

    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        """Return the shared instance, creating it on first use."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Optional path to configuration file. Falls back to
                        $UPLATKO_CONFIG, then config/settings.yaml.
        """
        if self._initialized:
            return

        if config_path is None:
            config_path = os.environ.get(CONFIG_ENV_VAR)

        if config_path is None:
            self.config_path = Path(__file__).parent / "settings.yaml"
        else:
            self.config_path = Path(config_path)

        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """
        Load configuration from YAML file.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            yaml.YAMLError: If configuration file is invalid.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}"
            )

        with open(self.config_path, 'r', encoding='utf-8') as f:
            self._config = yaml.safe_load(f) or {}

        self._resolve_paths()

    def _resolve_paths(self) -> None:
        """Make relative output paths absolute and expand the user directory."""
        project_root = Path(__file__).parent.parent

        for key, value in (self._config.get('paths') or {}).items():
            if value and not Path(value).is_absolute():
                self._config['paths'][key] = str(project_root / value)

        credentials = self._config.get('credentials') or {}
        if credentials.get('store_path'):
            credentials['store_path'] = str(
                Path(credentials['store_path']).expanduser()
            )

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., "barcode.columns").
            default: Default value if key doesn't exist.

        Returns:
            Configuration value or default.
        """
        value = self._config

        try:
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    @classmethod
    def reset(cls) -> None:
        """
        Drop the shared instance.
        The next ConfigurationManager() call reads the file again.
        """
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """
    Convenience function to get configuration values.

    Args:
        key: Configuration key in dot notation.
        default: Default value if key doesn't exist.

    Returns:
        Configuration value or default.
    """
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config', 'CONFIG_ENV_VAR']
