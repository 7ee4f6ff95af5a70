"""Centralized configuration management using pydantic-settings.

Configuration is loaded from environment variables with sensible defaults.
All settings can be overridden via environment variables or a .env file.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Override via environment variables (prefixed with RECON_) or .env file.

    Examples:
        RECON_API_URL=https://functions.example.com
        RECON_AUTO_CONFIRM_THRESHOLD=95
        RECON_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="RECON_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Reconcile Runner"
    app_version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = Field(default=False, description="Enable debug mode")

    # Remote callables and document store
    api_url: str = Field(
        default="http://localhost:5001",
        description="Base URL of the callable-function gateway",
    )
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    user_id: str | None = Field(
        default=None, description="Signed-in user for headless commands"
    )

    # Run loop
    auto_confirm_threshold: int = Field(
        default=93,
        ge=0,
        le=100,
        description="Confidence at or above which the matcher may auto-confirm",
    )
    batch_delay_seconds: float = Field(
        default=0.5, ge=0, description="Pause between consecutive batch calls"
    )
    batch_timeout_seconds: float = Field(
        default=540.0, gt=0, description="Timeout for a single batch call"
    )

    # Progress subscription
    progress_grace_seconds: float = Field(
        default=2.0,
        ge=0,
        description="Delay before releasing the progress subscription after a run",
    )
    progress_poll_interval_seconds: float = Field(default=1.0, gt=0)
    elapsed_tick_seconds: float = Field(default=0.1, gt=0)

    # Live collections
    page_size: int = Field(default=200, ge=1, le=1000)
    refresh_interval_seconds: float = Field(default=10.0, gt=0)

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format: 'json' for production, 'console' for development",
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    @field_validator("debug", mode="before")
    @classmethod
    def set_debug_from_environment(cls, v: bool, info) -> bool:
        """Auto-enable debug in development environment."""
        if info.data.get("environment") == Environment.DEVELOPMENT:
            return True
        return v

    @field_validator("log_format", mode="before")
    @classmethod
    def set_log_format_from_environment(cls, v: str, info) -> str:
        """Default to JSON logging in production."""
        if v is None:
            env = info.data.get("environment")
            if env == Environment.PRODUCTION:
                return "json"
        return v or "console"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == Environment.TESTING


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings.

    Returns:
        Configured Settings instance.
    """
    return Settings()
