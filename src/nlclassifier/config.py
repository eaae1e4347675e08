"""Configuration loading and validation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

LOGGER = logging.getLogger(__name__)

CONFIG_ENV_VAR = "NLCLASSIFIER_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/nlclassifier/config.yaml")
DEFAULT_ROOT_DIR = Path("~/.local/share/nlclassifier")
DEFAULT_LOG_LEVEL = "info"
LOG_LEVELS = ("debug", "info", "warning", "warn", "error", "critical")


class ConfigError(ValueError):
    """Raised when configuration is invalid or missing."""


@dataclass(frozen=True)
class LoggingConfig:
    """Logging-related configuration."""

    level: str = DEFAULT_LOG_LEVEL
    debug_file: bool = False


@dataclass(frozen=True)
class Config:
    """Fully parsed configuration."""

    root_dir: Path = field(default_factory=lambda: DEFAULT_ROOT_DIR.expanduser())
    asset_dirs: list[Path] = field(default_factory=list)
    model: str | None = None
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: Path | str | None = None) -> Config:
    """Load configuration from YAML.

    An explicitly requested file (argument or environment variable) must
    exist; a missing default file yields the default configuration.
    """

    config_path, explicit = _resolve_config_path(path)
    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        LOGGER.debug("No config file at %s; using defaults.", config_path)
        return Config()

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file {config_path} is not valid YAML: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Configuration root must be a mapping.")

    return _parse_config(raw, base_dir=config_path.parent)


def _resolve_config_path(explicit: Path | str | None) -> tuple[Path, bool]:
    if explicit:
        return Path(explicit).expanduser(), True
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser(), True
    return DEFAULT_CONFIG_PATH.expanduser(), False


def _parse_config(raw: dict[str, Any], *, base_dir: Path) -> Config:
    root_value = raw.get("root_dir") or DEFAULT_ROOT_DIR
    return Config(
        root_dir=Path(root_value).expanduser(),
        asset_dirs=_parse_asset_dirs(raw.get("asset_dirs"), base_dir),
        model=_parse_model(raw.get("model")),
        logging=_parse_logging(raw.get("logging")),
    )


def _parse_asset_dirs(value: Any, base_dir: Path) -> list[Path]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError("asset_dirs must be a list.")

    paths: list[Path] = []
    for idx, entry in enumerate(value, start=1):
        if not isinstance(entry, (str, Path)):
            raise ConfigError(f"asset_dirs[{idx}] must be a string path.")
        path = Path(entry).expanduser()
        if not path.is_absolute():
            path = base_dir / path
        if not path.is_dir():
            LOGGER.warning("Asset directory does not exist: %s", path)
        paths.append(path)
    return paths


def _parse_model(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError("model must be a string.")
    text = value.strip()
    if not text:
        raise ConfigError("model cannot be empty.")
    return text


def _parse_logging(value: Any) -> LoggingConfig:
    if value is None:
        return LoggingConfig()
    if not isinstance(value, dict):
        raise ConfigError("logging must be a mapping.")
    level = str(value.get("level", DEFAULT_LOG_LEVEL)).strip().lower()
    if level not in LOG_LEVELS:
        raise ConfigError(f"Unknown log level: {level}")
    debug_file = bool(value.get("debug_file", False))
    return LoggingConfig(level=level, debug_file=debug_file)


__all__ = [
    "CONFIG_ENV_VAR",
    "Config",
    "ConfigError",
    "LoggingConfig",
    "load_config",
]
