"""
Configuration Module for the ICDC Invoice Parser.

Parser policy (grammar windows, quantity scoring, match tolerances) is
read from ``settings.yaml`` in this directory. Components accept explicit
overrides, so callers that bring their own policy never have to touch
the file.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml


class ConfigurationManager:
    """
    Centralized configuration management for the invoice parser.

    Loads settings.yaml once per process and serves values through
    dotted keys.

    Attributes:
        config_path (Path): Path to the configuration file.

    Example:
        >>> config = ConfigurationManager()
        >>> config.get("brand_resolution.size_tolerance_ml")
        10
        >>> config.get("classifier.block_window")
        8
    """

    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Optional path to a YAML file.
                        Defaults to config/settings.yaml.
        """
        if self._initialized:
            return

        if config_path is None:
            self.config_path = Path(__file__).parent / "settings.yaml"
        else:
            self.config_path = Path(config_path)

        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """
        Load configuration from the YAML file.

        Raises:
            ConfigurationError: If the file is missing or is not a YAML mapping.
        """
        # Imported here so that src.utils can itself read configuration
        from src.utils.exceptions import ConfigurationError

        if not self.config_path.exists():
            raise ConfigurationError(
                str(self.config_path), "Configuration file not found"
            )

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(str(self.config_path), str(e))

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(
                str(self.config_path), "Top-level YAML value must be a mapping"
            )

        self._config = loaded
        self._resolve_paths()

    def _resolve_paths(self) -> None:
        """Resolve relative entries under ``paths`` against the project root."""
        project_root = Path(__file__).parent.parent

        for key, value in (self._config.get('paths') or {}).items():
            if value and not Path(value).is_absolute():
                self._config['paths'][key] = str(project_root / value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key in dot notation
                (e.g., "quantity.default_confidence").
            default: Default value if key doesn't exist.

        Returns:
            Configuration value or default.

        Example:
            >>> config.get("quantity.default_confidence")
            0.6
            >>> config.get("nonexistent.key", "default_value")
            'default_value'
        """
        value = self._config

        try:
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Override a single value in memory (the file is left untouched).

        Args:
            key: Configuration key in dot notation.
            value: New value.
        """
        keys = key.split('.')
        node = self._config
        for k in keys[:-1]:
            node = node.setdefault(k, {})
        node[keys[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        """Return a shallow copy of the complete configuration."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file, discarding in-memory overrides."""
        self._load_config()

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next access reloads from disk."""
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


__all__ = ['ConfigurationManager', 'get_config']
