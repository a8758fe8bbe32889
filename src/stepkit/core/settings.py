"""Runtime settings for stepkit.

Configuration is read from ``STEPKIT_*`` environment variables (and a local
``.env`` file) through pydantic-settings, validated once, and cached.

Fields
──────
log_level            : Structlog log level used by ``configure_logging``
json_logs            : JSON output (True), console output (False), auto (None)
service_name         : ``service.name`` stamped on every log line
warn_unknown_fields  : Log keys dropped by ``assign_attributes`` at WARNING
                       instead of DEBUG (useful for catching typos)

Examples:
    >>> from stepkit.core.settings import get_settings
    >>> get_settings().log_level
    'INFO'

Tags:
    settings, configuration, pydantic, environment, stepkit
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StepkitSettings(BaseSettings):
    """Settings shared by every stepkit module."""

    model_config = SettingsConfigDict(
        env_prefix="STEPKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None
    service_name: str = "stepkit"

    # ── Context behaviour ────────────────────────────────────────
    warn_unknown_fields: bool = Field(
        default=False,
        description="Log dropped keys from assign_attributes at WARNING level",
    )


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, StepkitSettings] = {}


def get_settings(*, _force_reload: bool = False) -> StepkitSettings:
    """Load, validate, and cache a :class:`StepkitSettings` instance.

    Parameters
    ----------
    _force_reload:
        Bypass cache and re-read the environment.
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = StepkitSettings()
    _settings_cache["default"] = settings
    return settings


def reset_settings() -> None:
    """Drop the cached settings (for tests)."""
    _settings_cache.clear()


__all__ = ["StepkitSettings", "get_settings", "reset_settings"]
