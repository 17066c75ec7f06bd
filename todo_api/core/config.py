"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment."""

    return AppSettings()


def _build_database_settings() -> "DatabaseSettings":
    """Build database settings from environment."""

    return DatabaseSettings()


def _build_log_settings() -> "LogSettings":
    """Build logging settings from environment."""

    return LogSettings()


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    cors_allow_origins: str = Field(
        "*",
        description="Comma-separated list of origins allowed by CORS ('*' for any)",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client request throttling",
    )
    rate_limit_requests: int = Field(
        100,
        description="Maximum number of requests admitted per window (per client)",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        3600,
        description="Sliding window length in seconds",
        ge=1,
    )
    rate_limit_forwarded_header: str = Field(
        "X-Forwarded-For",
        description="Header carrying the original client address behind a proxy",
    )
    rate_limit_exempt_paths: str = Field(
        "/health",
        description="Comma-separated request paths that bypass throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class DatabaseSettings(BaseSettings):
    """Relational storage configuration."""

    url: str = Field(
        "sqlite:///./todo.db",
        description="SQLAlchemy database URL for the tasks table",
    )
    echo: bool = Field(
        False,
        description="Echo emitted SQL statements to the log",
    )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: 'json' or 'plain'")
    output: str = Field("stdout", description="Log destination: 'stdout' or 'file'")
    file_path: str | None = Field(
        None,
        description="Log file path when output is 'file' (default logs/app.log)",
    )
    max_bytes: int = Field(
        10_485_760,
        description="Rotate the log file after this many bytes",
        ge=1,
    )
    backup_count: int = Field(5, description="Number of rotated files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to receive and propagate the request id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are invalid.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    database: DatabaseSettings = Field(default_factory=_build_database_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


def split_csv(value: str | None) -> list[str]:
    """Split a comma-separated setting into trimmed, non-empty items.

    Examples:
        >>> split_csv("/health, /metrics")
        ['/health', '/metrics']
        >>> split_csv(None)
        []
    """
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


# Global settings instance - composed from domain-specific settings
settings = Settings()
