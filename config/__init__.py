"""
Configuration Module for the Invoice Analysis Engine.

Settings are read from the bundled settings.yaml. A custom file (passed
explicitly or named by the INVOICE_ANALYZER_CONFIG environment variable)
only needs the keys it changes; it is merged over the bundled defaults.

Jurisdiction-dependent engine constants (VAT rate, date order, time zone)
live here so they can be overridden without code changes.
"""

import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_ENV_VAR = "INVOICE_ANALYZER_CONFIG"
DEFAULT_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"
PROJECT_ROOT = Path(__file__).parent.parent

# Keys holding file paths; relative values are anchored at the project root
_PATH_KEYS = ("logging.file.path",)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must hold a mapping, got {type(data).__name__}")
    return data


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigurationManager:
    """
    Process-wide settings for the analysis engine.

    Attributes:
        config_path (Optional[Path]): Custom file merged over the defaults.

    Example:
        >>> config = ConfigurationManager()
        >>> config.get("analysis.vat_rate")
        '0.17'
        >>> config.get_section("analysis.date")["day_first"]
        True
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
        Load settings once per process.

        Args:
            config_path: Custom settings file. Falls back to the
                        INVOICE_ANALYZER_CONFIG environment variable, then
                        to the bundled defaults alone.
        """
        if self._initialized:
            return

        config_path = config_path or os.environ.get(CONFIG_ENV_VAR)
        self.config_path = Path(config_path) if config_path else None

        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """
        Raises:
            FileNotFoundError: If a settings file doesn't exist.
            yaml.YAMLError: If a settings file is invalid.
        """
        config = _load_yaml(DEFAULT_SETTINGS_PATH)
        if self.config_path is not None:
            config = _merge(config, _load_yaml(self.config_path))
        self._config = config

        for key in _PATH_KEYS:
            value = self.get(key)
            if value and not Path(value).is_absolute():
                self._set(key, str(PROJECT_ROOT / value))

    def _set(self, key: str, value: Any) -> None:
        *parents, leaf = key.split('.')
        node = self._config
        for k in parents:
            node = node.setdefault(k, {})
        node[leaf] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Example:
            >>> config.get("analysis.date.timezone")
            'UTC'
            >>> config.get("nonexistent.key", "fallback")
            'fallback'
        """
        value = self._config
        try:
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def get_section(self, key: str) -> Dict[str, Any]:
        """Copy of a nested section; empty when the key is missing or not a mapping."""
        section = self.get(key, {})
        return deepcopy(section) if isinstance(section, dict) else {}

    def reload(self) -> None:
        self._load_config()

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded settings; the next access loads them again."""
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """Shortcut for ConfigurationManager().get(key, default)."""
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config', 'CONFIG_ENV_VAR']
