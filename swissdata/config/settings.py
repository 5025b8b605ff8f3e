"""swissdata settings loaded from environment variables."""

from datetime import timedelta
from enum import StrEnum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    """Deployment environment."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Settings loaded from ``SWISSDATA_*`` environment variables / .env file."""

    model_config = SettingsConfigDict(
        env_prefix="SWISSDATA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Cache ---
    CACHE_DIR: Path = Field(
        default_factory=lambda: Path.home() / ".cache",
        description="Platform cache directory; the app namespace is appended.",
    )
    APP_NAMESPACE: str = Field(
        default="swissdata",
        description="Sub-directory of CACHE_DIR owned by this package.",
    )
    CACHE_VALIDITY_HOURS: float = Field(
        default=24.0,
        gt=0,
        description="How long a downloaded file is served without refetching.",
    )

    # --- HTTP ---
    HTTP_TIMEOUT_SECONDS: float = Field(
        default=60.0,
        gt=0,
        description="Timeout applied to every download request.",
    )

    # --- Logging ---
    LOG_LEVEL: LogLevel = Field(
        default=LogLevel.INFO,
        description="Log level used by the command line scripts.",
    )

    # --- Environment ---
    ENVIRONMENT: Environment = Field(
        default=Environment.DEV,
        description="Deployment environment (dev/staging/prod).",
    )

    @property
    def cache_root(self) -> Path:
        """Directory holding the cached downloads."""
        return self.CACHE_DIR.expanduser() / self.APP_NAMESPACE

    @property
    def cache_validity(self) -> timedelta:
        return timedelta(hours=self.CACHE_VALIDITY_HOURS)


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
