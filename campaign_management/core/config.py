"""
Core configuration settings for the campaign management service.

Uses Pydantic Settings for environment-based configuration management.
"""

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application Info
    PROJECT_NAME: str = "Campaign Management Service"
    VERSION: str = "0.1.0"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    @field_validator("DEBUG", mode="before")
    @classmethod
    def parse_debug(cls, v):
        """Parse debug flag from environment."""
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes", "on")
        return v

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {v}")
        return level

    # Money
    DEFAULT_CURRENCY: str = "EUR"

    @field_validator("DEFAULT_CURRENCY")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        code = v.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError("DEFAULT_CURRENCY must be a 3-letter currency code")
        return code

    # Alert thresholds
    BUDGET_ALERT_THRESHOLD: float = 0.9
    LOW_CTR_THRESHOLD: float = 1.0
    LOW_CTR_MIN_IMPRESSIONS: int = 1000
    LOW_CONVERSION_THRESHOLD: float = 2.0
    LOW_CONVERSION_MIN_CLICKS: int = 100

    @field_validator("BUDGET_ALERT_THRESHOLD")
    @classmethod
    def validate_budget_threshold(cls, v: float) -> float:
        if not 0 < v <= 1:
            raise ValueError("BUDGET_ALERT_THRESHOLD must be in (0, 1]")
        return v

    # Collaborator timeouts
    EVENT_PUBLISH_TIMEOUT_SECONDS: float = 5.0
    NOTIFICATION_TIMEOUT_SECONDS: float = 5.0

    @field_validator("EVENT_PUBLISH_TIMEOUT_SECONDS", "NOTIFICATION_TIMEOUT_SECONDS")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be positive")
        return v

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    @field_validator("DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("page sizes must be at least 1")
        return v

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get settings instance - useful for dependency injection."""
    return settings
