"""Centralized settings for dyncall.

One validated, cached settings object holds the defaults the call engine
falls back to when an executor or client is not configured explicitly.

All fields can be set via ``DYNCALL_*`` environment variables (e.g.
``DYNCALL_ERROR_MAX_RETRIES=5``) or through a ``.env`` file.

Examples:
    >>> from dyncall.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.retry_short_delay
    0.2
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DynCallSettings(BaseSettings):
    """dyncall configuration.

    Fields
    ──────
    log_level                  : Structlog log level
    log_format                 : ``console`` or ``json``
    error_max_retries          : Default retry budget of HTTP executors
    retry_short_delay          : Backoff (seconds) while few errors are recorded
    retry_long_delay           : Backoff (seconds) once errors pile up
    retry_short_delay_errors   : Number of recorded errors using the short delay
    http_timeout               : Default httpx timeout (seconds)
    warn_missing_pattern_values: Log a warning for unresolved ``{{var}}``
    """

    model_config = SettingsConfigDict(
        env_prefix="DYNCALL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = "console"

    # ── Retry ────────────────────────────────────────────────────
    error_max_retries: int = Field(default=3, ge=0)
    retry_short_delay: float = Field(default=0.2, ge=0)
    retry_long_delay: float = Field(default=0.5, ge=0)
    retry_short_delay_errors: int = Field(default=2, ge=0)

    # ── Transport ────────────────────────────────────────────────
    http_timeout: float = Field(default=30.0, gt=0)

    # ── Patterns ─────────────────────────────────────────────────
    warn_missing_pattern_values: bool = True


_settings_cache: dict[str, DynCallSettings] = {}


def get_settings(*, _force_reload: bool = False) -> DynCallSettings:
    """Load, validate, and cache a :class:`DynCallSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = DynCallSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Drop the cached settings (for testing)."""
    _settings_cache.clear()


__all__ = ["DynCallSettings", "get_settings", "clear_settings_cache"]
