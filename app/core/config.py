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

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    However, static type checkers often treat required fields as required
    constructor arguments, which is not how BaseSettings is intended to be used.
    """

    return AppSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    """Build log settings from environment."""

    return LogSettings()  # type: ignore[call-arg]


def _build_rate_limit_settings() -> "RateLimitSettings":
    """Build rate limit settings from environment."""

    return RateLimitSettings()  # type: ignore[call-arg]


def _build_session_settings() -> "SessionSettings":
    """Build session settings from environment."""

    return SessionSettings()  # type: ignore[call-arg]


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    name: str = Field(
        "Storefront Gateway",
        description="Service name reported in OpenAPI metadata and health checks",
    )
    version: str = Field(
        "1.0.0",
        description="Service version reported by health and uptime endpoints",
    )
    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    reporter: str = Field(
        "none",
        description="Alert reporter backend: 'none' (no-op) or 'log'",
    )
    alert_error_threshold: int = Field(
        10,
        description="Errors per endpoint before an alert is escalated to the reporter",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: 'json' or 'plain'")
    output: str = Field("stdout", description="Log output: 'stdout' or 'file'")
    file_path: str | None = Field(
        None,
        description="Log file path when output is 'file'",
    )
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Number of rotated log files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read and echo the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class RateLimitSettings(BaseSettings):
    """Fixed-window rate limiter configuration, one pair per route class."""

    enabled: bool = Field(
        True,
        description="Enable rate limiting for all route classes",
    )
    include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* headers on responses",
    )

    general_requests: int = Field(
        200,
        description="Requests allowed per window for general traffic",
        ge=1,
    )
    general_window_seconds: int = Field(
        60,
        description="Window size in seconds for general traffic",
        ge=1,
    )
    api_requests: int = Field(
        100,
        description="Requests allowed per window for API routes",
        ge=1,
    )
    api_window_seconds: int = Field(
        60,
        description="Window size in seconds for API routes",
        ge=1,
    )
    auth_requests: int = Field(
        5,
        description="Requests allowed per window for authentication routes",
        ge=1,
    )
    auth_window_seconds: int = Field(
        60,
        description="Window size in seconds for authentication routes",
        ge=1,
    )

    sweep_interval_seconds: float = Field(
        300.0,
        description="Interval between sweeps that drop elapsed rate limit records",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )

    def limits(self) -> dict[str, tuple[int, int]]:
        """Return configured (requests, window_seconds) pairs keyed by limiter name."""

        return {
            "general": (self.general_requests, self.general_window_seconds),
            "api": (self.api_requests, self.api_window_seconds),
            "auth": (self.auth_requests, self.auth_window_seconds),
        }


class SessionSettings(BaseSettings):
    """Session store and cookie configuration."""

    ttl_seconds: int = Field(
        60 * 60 * 24 * 7,
        description="Session lifetime in seconds (also the cookie Max-Age)",
        ge=1,
    )
    cookie_name: str = Field(
        "auth_session",
        description="Name of the session cookie",
    )
    cookie_secure: bool | None = Field(
        None,
        description="Append 'Secure' to the session cookie (defaults to true in production)",
    )
    sweep_interval_seconds: float = Field(
        3600.0,
        description="Interval between sweeps that drop expired sessions",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if required settings are invalid.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)
    rate_limit: RateLimitSettings = Field(default_factory=_build_rate_limit_settings)
    session: SessionSettings = Field(default_factory=_build_session_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )

    @property
    def session_cookie_secure(self) -> bool:
        """Whether the session cookie carries the Secure attribute."""

        if self.session.cookie_secure is not None:
            return self.session.cookie_secure
        return self.app_env == "production"


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
