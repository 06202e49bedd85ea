"""
SOC Wall configuration.

Nothing is required at startup: every setting has a default that matches
the monitoring wall's layout (five rows per indicator table, five anomaly
spotlights, ten detections per page). Override through environment
variables or a .env file.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------
    indicator_limit: int = Field(default=5, ge=1)       # rows per IP / geo table
    spotlight_limit: int = Field(default=5, ge=1)
    detections_page_size: int = Field(default=10, ge=1)

    # ------------------------------------------------------------------
    # Service
    # ------------------------------------------------------------------
    service_name: str = "SOC Wall"
    service_version: str = "1.0.0"
    log_level: str = "INFO"
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(
                f"Unknown log level '{value}'. Known levels: {', '.join(_LOG_LEVELS)}"
            )
        return level

    def configure_logging(self) -> None:
        logging.basicConfig(level=getattr(logging, self.log_level))


@lru_cache
def get_settings() -> Settings:
    """Return the cached application settings singleton.

    In tests, clear the cache with get_settings.cache_clear() after
    patching environment variables, or instantiate Settings() directly
    with _env_file=None to avoid reading the .env file.
    """
    return Settings()
