"""Settings for the buyer leads API, read from the environment.

``APP_ENV`` (development, testing, staging, production) picks the
``.env.<APP_ENV>`` file at the project root. The file is optional; values
already exported in the environment are overridden by it when present.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENVIRONMENTS = ("development", "testing", "staging", "production")

APP_ENV = os.getenv("APP_ENV", "development")

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _env_file_for(app_env: str) -> Path | None:
    name = app_env if app_env in ENVIRONMENTS else "development"
    path = PROJECT_ROOT / f".env.{name}"
    return path if path.is_file() else None


# Nested BaseSettings do not inherit env_file, so load it into os.environ
_env_file = _env_file_for(APP_ENV)
if _env_file is not None:
    load_dotenv(_env_file, override=True)


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field(
        "INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR)",
    )
    format: str = Field(
        "json",
        description="Log format: 'json' for structured logs, 'plain' for humans",
    )
    output: str = Field(
        "stdout",
        description="Log destination: 'stdout' or 'file'",
    )
    file_path: str | None = Field(
        None,
        description="Log file path when output is 'file'",
    )
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(
        5,
        description="Number of rotated log files to keep",
        ge=0,
    )
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to accept and propagate request correlation ids",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    api_key_required: bool = Field(
        True,
        description="Whether API key authentication is required",
    )
    api_keys: str | None = Field(
        None,
        description="Comma-separated list of 'user_id:api_key' pairs",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client, per-route rate limiting",
    )
    rate_limit_disable_in_development: bool = Field(
        True,
        description="Skip rate limiting entirely when APP_ENV=development",
    )
    rate_limit_read_requests: int = Field(
        100,
        description="Maximum read requests per window (per client and route)",
        ge=1,
    )
    rate_limit_write_requests: int = Field(
        20,
        description="Maximum create/update/delete requests per window (per client and route)",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        60,
        description="Rate limit window size in seconds",
        ge=1,
    )
    rate_limit_sweep_interval_seconds: int = Field(
        60,
        description="How often expired rate limit entries are purged",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    max_upload_size_mb: int = Field(
        5,
        description="Maximum CSV import upload size in megabytes",
        ge=1,
    )
    max_import_rows: int = Field(
        1000,
        description="Maximum number of data rows accepted in one CSV import",
        ge=1,
    )
    default_page_size: int = Field(
        10,
        description="Default number of buyers per page",
        ge=1,
    )
    max_page_size: int = Field(
        100,
        description="Upper bound for the 'limit' query parameter",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """All settings of one deployment.

    Invalid values (e.g. a zero rate limit) fail at import time rather than
    on the first request.
    """

    app_env: str = APP_ENV
    log: LogSettings = Field(default_factory=LogSettings)
    app: AppSettings = Field(default_factory=AppSettings)

    model_config = SettingsConfigDict(case_sensitive=False)


def rate_limiting_active(cfg: Settings) -> bool:
    """Return whether requests should be rate limited for this deployment."""

    if not cfg.app.rate_limit_enabled:
        return False
    if cfg.app_env == "development" and cfg.app.rate_limit_disable_in_development:
        return False
    return True


settings = Settings()
