# tests/unit/test_archival/test_config.py
"""Unit tests for settings validation."""

import pytest
from pydantic import ValidationError


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        """Should default to a five-minute schedule in Asia/Manila."""
        from bulletin_archiver.config import Settings

        settings = Settings(DATABASE_URL="sqlite://")

        assert settings.ARCHIVAL_SCHEDULE == "*/5 * * * *"
        assert settings.ARCHIVAL_TIMEZONE == "Asia/Manila"
        assert settings.ARCHIVAL_STALE_AFTER_MINUTES == 10
        assert settings.ARCHIVAL_ERROR_RATE_THRESHOLD == 10.0

    def test_rewrites_bare_postgres_url(self):
        """Should add the psycopg2 driver to postgresql:// URLs."""
        from bulletin_archiver.config import Settings

        settings = Settings(DATABASE_URL="postgresql://u:p@db/bulletin")

        assert settings.DATABASE_URL == "postgresql+psycopg2://u:p@db/bulletin"

    def test_rewrites_bare_mysql_url(self):
        """Should add the PyMySQL driver to mysql:// URLs."""
        from bulletin_archiver.config import Settings

        settings = Settings(DATABASE_URL="mysql://u:p@db/bulletin")

        assert settings.DATABASE_URL == "mysql+pymysql://u:p@db/bulletin"

    def test_rejects_invalid_schedule(self):
        """Should fail fast on a malformed cron expression."""
        from bulletin_archiver.config import Settings

        with pytest.raises(ValidationError, match="Invalid cron expression"):
            Settings(DATABASE_URL="sqlite://", ARCHIVAL_SCHEDULE="every five minutes")

    def test_rejects_unknown_timezone(self):
        """Should fail fast on an unknown time zone."""
        from bulletin_archiver.config import Settings

        with pytest.raises(ValidationError, match="Unknown time zone"):
            Settings(DATABASE_URL="sqlite://", ARCHIVAL_TIMEZONE="Mars/Olympus_Mons")

    def test_rejects_unknown_log_format(self):
        """Should only accept json or text log formats."""
        from bulletin_archiver.config import Settings

        with pytest.raises(ValidationError):
            Settings(DATABASE_URL="sqlite://", LOG_FORMAT="xml")
