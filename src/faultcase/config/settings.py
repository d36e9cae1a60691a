"""Environment-based configuration using pydantic-settings.

Example:
    >>> from faultcase.config import get_settings
    >>> settings = get_settings()
    >>> settings.generation.samples
    100

    # Or with environment variables:
    # FAULTCASE_LOG_LEVEL=DEBUG
    # FAULTCASE_GENERATION_VALIDATE_WEIGHTS=false
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, NonNegativeInt, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration.

    Applied on the first log call unless configure_logging() ran before;
    configure_from_settings() re-applies it after the cache is cleared.
    """

    model_config = SettingsConfigDict(
        env_prefix="FAULTCASE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class PayloadSettings(BaseSettings):
    """Failure payload checking."""

    model_config = SettingsConfigDict(
        env_prefix="FAULTCASE_PAYLOAD_",
        extra="ignore",
    )

    check_types: bool = Field(
        default=True,
        description="Check failure payloads against their declared types on construction",
    )


class GenerationSettings(BaseSettings):
    """Random generation defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FAULTCASE_GENERATION_",
        extra="ignore",
    )

    validate_weights: bool = Field(
        default=True,
        description="Reject negative, non-finite, or all-zero weights in weighted tables",
    )
    seed: NonNegativeInt = Field(default=0, description="Default seed for sample()")
    samples: PositiveInt = Field(default=100, description="Default sample size for sample()")


class FaultcaseSettings(BaseSettings):
    """Root settings for faultcase.

    Example environment variables:
        FAULTCASE_LOG_LEVEL=DEBUG
        FAULTCASE_LOG_FORMAT=json
        FAULTCASE_PAYLOAD_CHECK_TYPES=false
        FAULTCASE_GENERATION_SEED=1234
    """

    model_config = SettingsConfigDict(
        env_prefix="FAULTCASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    payload: PayloadSettings = Field(default_factory=PayloadSettings)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)


@lru_cache(maxsize=1)
def get_settings() -> FaultcaseSettings:
    """Get the global settings instance (cached)."""
    return FaultcaseSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
