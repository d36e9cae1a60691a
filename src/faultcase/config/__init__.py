"""Configuration management using pydantic-settings."""

from .settings import (
    FaultcaseSettings,
    GenerationSettings,
    LoggingSettings,
    PayloadSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "FaultcaseSettings",
    "GenerationSettings",
    "LoggingSettings",
    "PayloadSettings",
    "clear_settings_cache",
    "get_settings",
]
