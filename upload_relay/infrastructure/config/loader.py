"""
Configuration loading.

Configuration is read from an optional YAML or JSON file and then
overridden by ``UPLOAD_RELAY_*`` environment variables. ``init-config``
writes the defaults back out as YAML.
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import yaml

from ...core.exceptions import ConfigError
from .models import ApplicationConfig

_READERS: Dict[str, Callable[[str], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.loads,
}


def _parse_bool(value: str) -> bool:
    return value.lower() in ('true', '1', 'yes', 'on', 'enabled')


# Environment variable suffix -> (section, key, converter); a None section
# addresses a top-level key.
ENV_OVERRIDES: Dict[str, Tuple[Optional[str], str, Callable[[str], Any]]] = {
    "DEBUG": (None, "debug", _parse_bool),
    "ENVIRONMENT": (None, "environment", str),
    "HOST": ("server", "host", str),
    "PORT": ("server", "port", int),
    "STORAGE_ROOT": ("upload", "storage_root", str),
    "RATE_LIMIT_MS": ("upload", "rate_limit_interval_ms", float),
    "MAX_QUEUED_CHUNKS": ("upload", "max_queued_chunks", int),
    "LOG_LEVEL": ("logging", "level", str),
    "LOG_DIR": ("logging", "log_directory", str),
    "LOG_FILE_ENABLED": ("logging", "file_enabled", _parse_bool),
}


class ConfigLoader:
    """Builds an ApplicationConfig from a file and the environment."""

    def __init__(self, env_prefix: str = "UPLOAD_RELAY_") -> None:
        self._env_prefix = env_prefix

    def load_config(self, config_file: Optional[str] = None) -> ApplicationConfig:
        """
        Load configuration from file and environment variables.

        Args:
            config_file: Path to configuration file (optional)

        Returns:
            Loaded and validated configuration

        Raises:
            FileNotFoundError: If ``config_file`` does not exist
            ConfigError: If the file or an override is invalid
        """
        data = self._read_file(config_file) if config_file else {}
        data = self._merge_configs(data, self._read_environment())

        config = ApplicationConfig.from_dict(data)
        config.config_file_path = config_file
        return config

    def write_defaults(self, file_path: str) -> None:
        """Write a default configuration as YAML."""
        data = ApplicationConfig().to_dict()
        data.pop('config_file_path', None)

        try:
            Path(file_path).write_text(
                yaml.safe_dump(data, default_flow_style=False, sort_keys=False),
                encoding='utf-8')
        except OSError as e:
            raise ConfigError(f"Error writing {file_path}: {e}")

    def _read_file(self, file_path: str) -> Dict[str, Any]:
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        reader = _READERS.get(path.suffix.lower())
        if reader is None:
            raise ConfigError(f"Unsupported configuration file format: {path.suffix}")

        try:
            data = reader(path.read_text(encoding='utf-8'))
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            kind = "JSON" if path.suffix.lower() == ".json" else "YAML"
            raise ConfigError(f"Invalid {kind} in {file_path}: {e}")
        except OSError as e:
            raise ConfigError(f"Error reading {file_path}: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration in {file_path} must be a mapping")
        return data

    def _read_environment(self) -> Dict[str, Any]:
        """Collect overrides from ``<prefix><SUFFIX>`` environment variables."""
        overrides: Dict[str, Any] = {}

        for suffix, (section, key, convert) in ENV_OVERRIDES.items():
            name = self._env_prefix + suffix
            raw = os.getenv(name)
            if raw is None:
                continue

            try:
                value = convert(raw)
            except ValueError as e:
                raise ConfigError(f"Invalid value for {name}: {raw} ({e})")

            target = overrides if section is None else overrides.setdefault(section, {})
            target[key] = value

        return overrides

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge two configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result
