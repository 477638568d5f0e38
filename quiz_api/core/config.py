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


# Nested BaseSettings don't inherit env_file, so populate os.environ first.
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment.

    Pydantic Settings populates values from environment variables; the
    factory keeps static type checkers from demanding constructor arguments.
    """

    return AppSettings()  # type: ignore[call-arg]


def _build_render_settings() -> "RenderSettings":
    return RenderSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    base_path: str = Field(
        "/",
        description="Base path the host application mounts its static assets at",
    )
    readiness_root: str | None = Field(
        None,
        description="Directory the readiness probe resolves data folders against (default: cwd)",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class RenderSettings(BaseSettings):
    """Animation render endpoint configuration.

    The rate limit defaults are deliberately tight: every accepted request
    spawns a full render on the remote service.
    """

    enabled: bool = Field(
        True,
        description="Whether animation rendering is enabled at all",
    )
    service_url: str | None = Field(
        None,
        description="Base URL of the remote animation render service",
    )
    timeout_seconds: float = Field(
        60.0,
        description="Timeout for a single render request in seconds",
        gt=0,
    )
    rate_limit_requests: int = Field(
        2,
        description="Maximum render requests per client address per window",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        60,
        description="Render rate limit window size in seconds",
        ge=1,
    )
    rate_limit_cleanup_interval_seconds: float = Field(
        300.0,
        description="How often stale rate limit entries are swept",
        gt=0,
    )
    rate_limit_cleanup_grace_seconds: float = Field(
        60.0,
        description="How long an expired entry is kept before it is swept",
        ge=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="RENDER_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log destination: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(10 * 1024 * 1024, description="Rotate log file after this size (0 disables)")
    backup_count: int = Field(5, description="Number of rotated log files to keep")
    request_id_header: str = Field("X-Request-ID", description="Header carrying the request id")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.

    Environments:
    - development: Local development
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    render: RenderSettings = Field(default_factory=_build_render_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"


# Global settings instance - composed from domain-specific settings
settings = Settings()
