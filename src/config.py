"""Unified configuration loaded from .prayerlog.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".prayerlog.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG = Path.home() / ".config" / "prayerlog" / "config.toml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class StorageConfig(BaseModel):
    """[storage] section."""

    data_dir: str = "~/.local/share/prayerlog"

    @property
    def path(self) -> Path:
        return Path(self.data_dir).expanduser()


class HistoryConfig(BaseModel):
    """[history] section."""

    recent_days: int = Field(default=30, ge=0)


class NovenaConfig(BaseModel):
    """[novena] section."""

    cleanup_after_days: int = Field(default=30, ge=0)


class LoggingConfig(BaseModel):
    """[logging] section."""

    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}")
        return level


class PrayerlogConfig(BaseModel):
    """Top-level configuration model."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    novena: NovenaConfig = Field(default_factory=NovenaConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: str | Path | None = None) -> PrayerlogConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .prayerlog.toml in CWD
    3. ~/.config/prayerlog/config.toml

    Then overlay environment variables.  A file that fails validation
    is logged and ignored.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG.exists():
            data = _load_toml(GLOBAL_CONFIG)
            logger.info("Loaded config from %s", GLOBAL_CONFIG)

    config = PrayerlogConfig()
    if data:
        try:
            config = PrayerlogConfig.model_validate(data)
        except ValidationError as exc:
            logger.warning("Invalid configuration, using defaults: %s", exc)

    return _apply_env_vars(config)


def merge_cli_overrides(config: PrayerlogConfig, **cli_kwargs: object) -> PrayerlogConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).  Unknown keys are ignored.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "data_dir": ("storage", "data_dir"),
        "log_level": ("logging", "level"),
        "recent_days": ("history", "recent_days"),
        "cleanup_after_days": ("novena", "cleanup_after_days"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = str(value) if isinstance(value, Path) else value

    return PrayerlogConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: PrayerlogConfig) -> PrayerlogConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "PRAYERLOG_DATA_DIR": ("storage", "data_dir"),
        "PRAYERLOG_LOG_LEVEL": ("logging", "level"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    days_raw = os.environ.get("PRAYERLOG_RECENT_DAYS")
    if days_raw is not None:
        try:
            data["history"]["recent_days"] = int(days_raw)
        except ValueError:
            logger.warning("Ignoring non-integer PRAYERLOG_RECENT_DAYS=%r", days_raw)

    try:
        return PrayerlogConfig.model_validate(data)
    except ValidationError as exc:
        logger.warning("Ignoring invalid environment overrides: %s", exc)
        return config
