# bulletin_archiver/config.py
"""
Centralized configuration with validation.

Uses pydantic-settings to load and validate all environment variables at startup.
Fail fast with clear error messages if required config is missing.
"""

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from apscheduler.triggers.cron import CronTrigger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = Field(
        ...,
        description="Connection URL for the bulletin database (PostgreSQL or MySQL)",
    )

    # Authentication
    ADMIN_API_KEY: str | None = Field(
        default=None,
        description="API key for archival control endpoints (endpoints fail closed when unset)",
    )

    # Archival scheduling
    ARCHIVAL_ENABLED: bool = Field(
        default=True,
        description="Start the archival scheduler when the application starts",
    )
    ARCHIVAL_SCHEDULE: str = Field(
        default="*/5 * * * *",
        description="Cron expression for the recurring archival run",
    )
    ARCHIVAL_TIMEZONE: str = Field(
        default="Asia/Manila",
        description="IANA time zone used for scheduling and expiry comparisons",
    )
    ARCHIVAL_INITIAL_DELAY_SECONDS: int = Field(
        default=5,
        ge=0,
        description="Delay before the expedited first run after the scheduler starts",
    )

    # Health thresholds
    ARCHIVAL_STALE_AFTER_MINUTES: int = Field(
        default=10,
        ge=1,
        description="A last run older than this many minutes is reported as a warning",
    )
    ARCHIVAL_ERROR_RATE_THRESHOLD: float = Field(
        default=10.0,
        ge=0,
        le=100,
        description="Cumulative error rate (percent) above which health degrades to warning",
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR",
    )
    LOG_FORMAT: str = Field(
        default="json",
        description="Log format: json (one object per line) or text",
    )

    # Application
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def fix_database_url(cls, v: str) -> str:
        """Hosting providers hand out bare scheme URLs; SQLAlchemy needs the driver name."""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+psycopg2://", 1)
        if v.startswith("mysql://"):
            return v.replace("mysql://", "mysql+pymysql://", 1)
        return v

    @field_validator("ARCHIVAL_SCHEDULE")
    @classmethod
    def validate_schedule(cls, v: str) -> str:
        try:
            CronTrigger.from_crontab(v)
        except ValueError as e:
            raise ValueError(f"Invalid cron expression '{v}': {e}") from e
        return v

    @field_validator("ARCHIVAL_TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone '{v}'") from e
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings. Call at startup to validate config."""
    return Settings()
