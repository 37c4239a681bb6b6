#!/usr/bin/env python3
"""
Configuration Manager

Handles TOML configuration loading and typed lookups by dotted path.

Created: 2026-10-19
Author: Manuel Ziel
License: MIT
"""

################################################################################
# IMPORTS & DEPENDENCIES
################################################################################

# Standard library imports
import os
import tomllib
from typing import Any, Callable, Dict, List, Optional, TypeVar

# Internal imports
from .exceptions import ConfigError, ValidationError

T = TypeVar("T")

DEFAULT_CONFIG_PATH = "/etc/simpleddns/config.toml"

_MISSING = object()

################################################################################
# CONFIGURATION MANAGER CLASS - TOML Configuration with Typed Decoding
################################################################################

class ConfigManager:
    """Configuration handler for the TOML config file."""

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH) -> None:
        """Load TOML config and the [debug] section."""
        self.config_path = os.path.abspath(config_path)
        self.config = self.load_config(self.config_path)

        self._load_debug_config()

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: str = ".") -> "ConfigManager":
        """Build a configuration from an already parsed mapping (no file access)."""
        config = cls.__new__(cls)
        config.config_path = os.path.join(os.path.abspath(base_dir), "config.toml")
        config.config = data
        config._load_debug_config()
        return config

    ################################################################################
    # PUBLIC INTERFACE - Configuration Loading
    ################################################################################

    def load_config(self, path: str) -> Dict[str, Any]:
        """Load configuration from TOML file."""
        try:
            with open(path, "rb") as f:
                config = tomllib.load(f)
            return config
        except FileNotFoundError:
            raise ConfigError(f"Configuration file not found: {path}")
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML syntax in {path}: {e}")
        except OSError as e:
            raise ConfigError(f"Error loading configuration from {path}: {e}")

    def resolve_path(self, path: str) -> str:
        """Resolve a configured file path relative to the config file directory."""
        path = os.path.expanduser(path)
        if os.path.isabs(path):
            return path
        return os.path.join(os.path.dirname(self.config_path), path)

    ################################################################################
    # PUBLIC INTERFACE - Typed Decoding by Dotted Path
    ################################################################################

    def lookup(self, path: str, default: Any = _MISSING) -> Any:
        """Return the raw value at a dotted path like 'ddns.storage.sqlite.db'."""
        node: Any = self.config
        for part in path.split("."):
            if isinstance(node, dict) and part in node:
                node = node[part]
            elif default is not _MISSING:
                return default
            else:
                raise ConfigError(f"Missing configuration key: {path}")
        return node

    def decode_str(self, path: str, default: Any = _MISSING) -> str:
        value = self.lookup(path, default)
        if not isinstance(value, str):
            raise ConfigError(f"Configuration key {path} must be a string, got {type(value).__name__}")
        return value

    def decode_optional_str(self, path: str) -> Optional[str]:
        """Like decode_str, but a missing key yields None."""
        if self.lookup(path, None) is None:
            return None
        return self.decode_str(path)

    def decode_int(self, path: str, default: Any = _MISSING) -> int:
        value = self.lookup(path, default)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"Configuration key {path} must be an integer, got {type(value).__name__}")
        return value

    def decode_float(self, path: str, default: Any = _MISSING) -> float:
        value = self.lookup(path, default)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"Configuration key {path} must be a number, got {type(value).__name__}")
        return float(value)

    def decode_record(self, path: str, factory: Callable[[Dict[str, Any]], T]) -> T:
        """Decode the table at path with factory. Factory errors become ConfigError."""
        value = self.lookup(path)
        if not isinstance(value, dict):
            raise ConfigError(f"Configuration key {path} must be a table, got {type(value).__name__}")
        return self._build(path, factory, value)

    def decode_records(self, path: str, factory: Callable[[Dict[str, Any]], T]) -> List[T]:
        """Decode the array of tables at path with factory."""
        value = self.lookup(path)
        if not isinstance(value, list):
            raise ConfigError(f"Configuration key {path} must be an array of tables, got {type(value).__name__}")

        items = []
        for index, item in enumerate(value):
            if not isinstance(item, dict):
                raise ConfigError(f"Configuration key {path}[{index}] must be a table")
            items.append(self._build(f"{path}[{index}]", factory, item))
        return items

    ################################################################################
    # PRIVATE METHODS - Internal Implementation
    ################################################################################

    def _build(self, path: str, factory: Callable[[Dict[str, Any]], T], value: Dict[str, Any]) -> T:
        try:
            return factory(value)
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise ConfigError(f"Invalid configuration at {path}: {e}") from e

    def _load_debug_config(self) -> None:
        """Load debug config from [debug] section."""
        self.log_level = str(self.config.get("debug", {}).get("level", "INFO")).upper()
