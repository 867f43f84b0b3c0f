"""
Application configuration settings using Pydantic Settings.

This module provides centralized configuration management with
environment variable support, validation, and type safety.
"""

import secrets
from typing import List, Optional
from enum import Enum
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    """Application environment options."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Environment Configuration
    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment"
    )
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Server Configuration
    HOST: str = Field(
        default="0.0.0.0",
        description="Server host address"
    )
    PORT: int = Field(
        default=4000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # Logging Configuration
    LOG_LEVEL: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level"
    )
    LOG_FORMAT: str = Field(
        default="json",
        pattern=r"^(json|text)$",
        description="Log output format"
    )

    # Database Configuration
    MONGODB_URI: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DATABASE: str = Field(
        default="voidbox",
        min_length=1,
        max_length=64,
        description="MongoDB database name"
    )
    MONGODB_MAX_CONNECTIONS: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="MongoDB maximum connections"
    )
    MONGODB_MIN_CONNECTIONS: int = Field(
        default=5,
        ge=0,
        le=100,
        description="MongoDB minimum connections"
    )

    # Redis Configuration
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL used for rate limit counters"
    )
    REDIS_MAX_CONNECTIONS: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Redis maximum connections"
    )
    REDIS_SOCKET_TIMEOUT: float = Field(
        default=5.0,
        gt=0,
        le=60,
        description="Redis socket timeout in seconds"
    )

    # Security Configuration
    JWT_SECRET_KEY: str = Field(
        default_factory=lambda: secrets.token_urlsafe(32),
        min_length=32,
        description="JWT signing secret key"
    )
    JWT_ALGORITHM: str = Field(
        default="HS256",
        pattern=r"^(HS256|HS384|HS512)$",
        description="JWT signing algorithm"
    )
    SESSION_TOKEN_EXPIRE_DAYS: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Lifetime of the session token issued after login"
    )
    PENDING_LOGIN_EXPIRE_MINUTES: int = Field(
        default=10,
        ge=1,
        le=60,
        description="Lifetime of the temporary token between login steps"
    )

    # Telegram Configuration
    TG_API_ID: int = Field(
        default=0,
        ge=0,
        description="Telegram application api_id"
    )
    TG_API_HASH: str = Field(
        default="",
        description="Telegram application api_hash"
    )
    TG_CONNECTION_RETRIES: int = Field(
        default=3,
        ge=0,
        le=20,
        description="Telegram client connection retries"
    )
    DRIVE_CHANNEL_TITLE: str = Field(
        default="VoidBox Drive",
        min_length=1,
        max_length=128,
        description="Title of the per-user storage channel"
    )
    DRIVE_CHANNEL_ABOUT: str = Field(
        default="Personal cloud storage powered by VoidBox",
        max_length=255,
        description="Description of the per-user storage channel"
    )

    # Upload Configuration
    MAX_UPLOAD_SIZE_MB: int = Field(
        default=2048,
        ge=1,
        le=4096,
        description="Maximum file upload size in MB"
    )

    # Rate Limiting Configuration
    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Enable rate limiting"
    )
    GLOBAL_RATE_LIMIT: int = Field(
        default=100,
        ge=1,
        description="Requests per client IP per global window"
    )
    GLOBAL_RATE_WINDOW_SECONDS: int = Field(
        default=900,
        ge=1,
        description="Global rate limit window in seconds"
    )
    API_RATE_LIMIT: int = Field(
        default=30,
        ge=1,
        description="Requests per client IP per window on file routes"
    )
    API_RATE_WINDOW_SECONDS: int = Field(
        default=60,
        ge=1,
        description="File route rate limit window in seconds"
    )

    # Background Jobs
    CLEANUP_INTERVAL_SECONDS: int = Field(
        default=0,
        ge=0,
        description="Interval of the in-process expired file cleanup, 0 disables it"
    )

    # CORS Configuration
    ALLOWED_ORIGINS: List[str] = Field(
        default=["*"],
        description="CORS allowed origins"
    )

    # Frontend
    STATIC_DIR: Optional[str] = Field(
        default=None,
        description="Directory with the built single-page application"
    )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        validate_assignment = True
        extra = "ignore"

    @model_validator(mode='after')
    def validate_environment_consistency(self):
        """Validate environment-specific consistency."""
        if self.ENVIRONMENT == Environment.PRODUCTION:
            if self.DEBUG:
                raise ValueError("Debug mode should not be enabled in production")

            if "*" in self.ALLOWED_ORIGINS:
                raise ValueError("Wildcard CORS origins not allowed in production")

        if self.MONGODB_MIN_CONNECTIONS > self.MONGODB_MAX_CONNECTIONS:
            raise ValueError("MongoDB min connections cannot exceed max connections")

        return self

    @property
    def max_upload_size_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    def has_telegram_credentials(self) -> bool:
        """Check if the Telegram application credentials are configured."""
        return bool(self.TG_API_ID and self.TG_API_HASH)

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT == Environment.DEVELOPMENT


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached singleton).

    Returns:
        Settings: Configured application settings instance

    Note:
        Settings are cached using functools.lru_cache to avoid
        re-parsing environment variables on every call.
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Force reload of application settings.

    Returns:
        Settings: New settings instance
    """
    get_settings.cache_clear()
    return get_settings()
