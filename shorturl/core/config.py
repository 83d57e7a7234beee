"""Application configuration module.

This module contains settings for the short URL service,
loaded from environment variables with appropriate defaults.
"""

from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Set up basic logger for config module
logger = logging.getLogger(__name__)

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent


class EnvironmentType(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Application settings loaded from environment variables with defaults.

    Settings are loaded from environment variables, with fallback to
    values in .env file if present, and finally to the default values
    specified here. The instance is frozen once loaded.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Environment setting
    ENVIRONMENT: EnvironmentType = EnvironmentType.DEVELOPMENT

    # App Information
    APP_NAME: str = "Short URL Service"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "A simple URL shortener service"
    DEBUG: bool = False
    DOCS_URL: str = "/api-docs"

    # Authorization: comma-separated allow-list, required
    API_KEYS: Union[List[str], str]

    # HTTP listener
    HOST: str = "localhost"
    PORT: int = 3000

    # Used for generating short URLs
    PUBLIC_URL: str = "http://localhost:3000"

    # Database settings
    DATABASE_URL: Optional[str] = None  # Full async URL, overrides POSTGRES_* below
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "short_urls"

    # PostgreSQL pool settings
    POSTGRES_POOL_SIZE: int = 20
    POSTGRES_POOL_MAX_OVERFLOW: int = 10
    POSTGRES_POOL_TIMEOUT: int = 30
    POSTGRES_POOL_RECYCLE: int = 300
    DB_ECHO: bool = False

    # Logging configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {name} | {message}"
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "logs"
    LOG_FILENAME: str = "app.log"
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "7 days"
    LOG_JSON: bool = True
    REQUEST_LOGGING_ENABLED: bool = True

    # Expired URL sweep, runs once a day at CLEANUP_HOUR:CLEANUP_MINUTE
    CLEANUP_ENABLED: bool = True
    CLEANUP_HOUR: int = 0
    CLEANUP_MINUTE: int = 0
    SCHEDULER_TIMEZONE: Optional[str] = None  # None means the server's local zone
    SCHEDULER_MISFIRE_GRACE_TIME: int = 15 * 60  # Seconds to still run misfired job after scheduled time

    # Validators
    @field_validator("API_KEYS")
    def validate_api_keys(cls, v: Union[List[str], str]) -> List[str]:
        """Split a comma-separated string into the allow-list and reject an empty one.

        Keys are kept verbatim, surrounding whitespace included, and matched exactly.
        """
        if isinstance(v, str):
            v = v.split(",")
        keys = [item for item in v if item]
        if not keys:
            raise ValueError("API_KEYS must contain at least one key")
        return keys

    @field_validator("PUBLIC_URL")
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("CLEANUP_HOUR")
    def validate_cleanup_hour(cls, v: int) -> int:
        if not 0 <= v <= 23:
            raise ValueError("CLEANUP_HOUR must be between 0 and 23")
        return v

    @field_validator("CLEANUP_MINUTE")
    def validate_cleanup_minute(cls, v: int) -> int:
        if not 0 <= v <= 59:
            raise ValueError("CLEANUP_MINUTE must be between 0 and 59")
        return v

    @field_validator("SCHEDULER_TIMEZONE", "DATABASE_URL", mode="before")
    def empty_string_to_none(cls, v):
        if v == "":
            return None
        return v

    # Computed fields
    @computed_field
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Construct the SQLAlchemy database URI from settings or use override."""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"


@lru_cache()
def get_settings() -> Settings:
    """Load settings once per process.

    Raises:
        pydantic.ValidationError: If required settings such as API_KEYS are missing
    """
    return Settings()
