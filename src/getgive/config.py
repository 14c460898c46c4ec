"""Configuration loading and validation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

LOGGER = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GETGIVE_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/getgive/config.yaml")
DEFAULT_LOG_LEVEL = "warning"
DEFAULT_ENCODING = "utf-8"
LOG_LEVELS = ("debug", "info", "warning", "warn", "error", "critical")


class ConfigError(ValueError):
    """Raised when configuration is invalid or missing."""


@dataclass(frozen=True)
class LoggingConfig:
    """Logging-related configuration."""

    level: str = DEFAULT_LOG_LEVEL
    file: Path | None = None


@dataclass(frozen=True)
class LoaderConfig:
    """Options applied to the execution context of a run."""

    encoding: str = DEFAULT_ENCODING
    cache: bool = False
    detect_cycles: bool = False


@dataclass(frozen=True)
class Config:
    """Fully parsed configuration."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    loader: LoaderConfig = field(default_factory=LoaderConfig)
    globals: dict[str, Any] = field(default_factory=dict)
    source: Path | None = None


def load_config(path: Path | str | None = None) -> Config:
    """Load configuration from YAML, falling back to defaults.

    An explicit ``path`` (or ``$GETGIVE_CONFIG``) must exist. The default
    location is optional.
    """

    config_path, explicit = _resolve_config_path(path)
    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        LOGGER.debug("No config file at %s, using defaults", config_path)
        return Config()

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Configuration root must be a mapping.")

    return _parse_config(raw, config_path)


def _resolve_config_path(explicit: Path | str | None) -> tuple[Path, bool]:
    if explicit:
        return Path(explicit).expanduser(), True
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser(), True
    return DEFAULT_CONFIG_PATH.expanduser(), False


def _parse_config(raw: dict[str, Any], source: Path | None = None) -> Config:
    unknown = sorted(set(raw) - {"logging", "loader", "globals"})
    if unknown:
        LOGGER.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))
    return Config(
        logging=_parse_logging(raw.get("logging")),
        loader=_parse_loader(raw.get("loader")),
        globals=_parse_globals(raw.get("globals")),
        source=source,
    )


def _parse_logging(value: Any) -> LoggingConfig:
    if value is None:
        return LoggingConfig()
    if not isinstance(value, dict):
        raise ConfigError("logging must be a mapping.")

    level = value.get("level", DEFAULT_LOG_LEVEL)
    if not isinstance(level, str) or level.strip().lower() not in LOG_LEVELS:
        raise ConfigError(f"Unknown log level: {level}")

    file_value = value.get("file")
    if file_value is None:
        log_file = None
    elif isinstance(file_value, str) and file_value.strip():
        log_file = Path(file_value).expanduser()
    else:
        raise ConfigError("logging.file must be a non-empty string path.")

    return LoggingConfig(level=level.strip().lower(), file=log_file)


def _parse_loader(value: Any) -> LoaderConfig:
    if value is None:
        return LoaderConfig()
    if not isinstance(value, dict):
        raise ConfigError("loader must be a mapping.")

    encoding = value.get("encoding", DEFAULT_ENCODING)
    if not isinstance(encoding, str) or not encoding.strip():
        raise ConfigError("loader.encoding must be a non-empty string.")

    return LoaderConfig(
        encoding=encoding.strip(),
        cache=_parse_bool(value.get("cache"), "loader.cache"),
        detect_cycles=_parse_bool(value.get("detect_cycles"), "loader.detect_cycles"),
    )


def _parse_bool(value: Any, field_name: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigError(f"{field_name} must be true or false.")
    return value


def _parse_globals(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError("globals must be a mapping.")

    shared: dict[str, Any] = {}
    for name, item in value.items():
        if not isinstance(name, str) or not name.isidentifier():
            raise ConfigError(f"globals key {name!r} must be a Python identifier.")
        if name.startswith("__"):
            raise ConfigError(f"globals key '{name}' is reserved.")
        shared[name] = item
    return shared


__all__ = ["Config", "ConfigError", "LoaderConfig", "LoggingConfig", "load_config"]
