"""Environment-driven settings for sqlchain.

Defaults for ``Database.open()``, the sanitizer and logging come from
``SQLCHAIN_*`` environment variables or a ``.env`` file, validated by
pydantic-settings.

Examples:
    >>> import os
    >>> os.environ["SQLCHAIN_DATABASE_PATH"] = "chinook.db"
    >>> reset_settings()
    >>> get_settings().database_path
    'chinook.db'

Tags:
    settings, configuration, pydantic, environment, sqlchain

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sqlchain.core.errors import ConfigError
from sqlchain.core.types import OpenMode


class SqlChainSettings(BaseSettings):
    """sqlchain configuration.

    Fields
    ──────
    database_path  : File opened by ``Database.open()`` when no path is given
    open_mode      : ro | rw | rwc | memory
    timeout        : Seconds to wait on a locked database
    log_level      : Structlog log level
    json_logs      : JSON log output (None = auto-detect from tty)
    text_quoting   : double (no escaping) | single (escaped SQL literal)
    strict_numbers : Reject unparseable numeric values instead of emitting NaN
    """

    model_config = SettingsConfigDict(
        env_prefix="SQLCHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_path: str = ":memory:"
    open_mode: OpenMode = OpenMode.READWRITE_CREATE
    timeout: float = Field(default=5.0, gt=0)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    # ── Sanitizer ────────────────────────────────────────────────
    text_quoting: Literal["double", "single"] = "double"
    strict_numbers: bool = False

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level


_settings: SqlChainSettings | None = None


def get_settings() -> SqlChainSettings:
    """Load, validate, and cache the settings."""
    global _settings
    if _settings is None:
        try:
            _settings = SqlChainSettings()
        except ValidationError as e:
            raise ConfigError(f"Invalid sqlchain settings: {e}", cause=e) from e
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next ``get_settings()`` re-reads the environment."""
    global _settings
    _settings = None


__all__ = [
    "SqlChainSettings",
    "get_settings",
    "reset_settings",
]
