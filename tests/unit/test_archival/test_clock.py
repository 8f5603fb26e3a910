# tests/unit/test_archival/test_clock.py
"""Unit tests for the archival clock."""

from datetime import UTC, date, datetime


class TestArchivalClock:
    """Tests for ArchivalClock."""

    def test_now_is_aware_in_configured_zone(self):
        """Should return an aware datetime in Asia/Manila."""
        from bulletin_archiver.clock import ArchivalClock

        now = ArchivalClock("Asia/Manila").now()

        assert now.tzinfo is not None
        assert now.utcoffset().total_seconds() == 8 * 3600

    def test_to_database_converts_utc_to_local_wall_clock(self):
        """Should render an instant as naive Manila time."""
        from bulletin_archiver.clock import ArchivalClock

        clock = ArchivalClock("Asia/Manila")

        local = clock.to_database(datetime(2023, 12, 31, 16, 30, 15, 999, tzinfo=UTC))

        assert local == datetime(2024, 1, 1, 0, 30, 15)
        assert local.tzinfo is None

    def test_format_for_database(self):
        """Should format as YYYY-MM-DD HH:MM:SS."""
        from bulletin_archiver.clock import ArchivalClock

        clock = ArchivalClock("Asia/Manila")

        assert clock.format_for_database(datetime(2024, 3, 5, 1, 2, 3, tzinfo=UTC)) == "2024-03-05 09:02:03"


class TestFixedClock:
    """Tests for FixedClock."""

    def test_naive_moment_is_local_time(self):
        """Should interpret a naive moment as local wall-clock time."""
        from bulletin_archiver.clock import FixedClock

        clock = FixedClock(datetime(2024, 1, 1, 0, 0, 0))

        assert clock.db_now() == datetime(2024, 1, 1, 0, 0, 0)
        assert clock.today() == date(2024, 1, 1)

    def test_aware_moment_is_converted(self):
        """Should convert an aware moment into the configured zone."""
        from bulletin_archiver.clock import FixedClock

        clock = FixedClock(datetime(2024, 1, 1, 20, 0, 0, tzinfo=UTC))

        assert clock.db_now() == datetime(2024, 1, 2, 4, 0, 0)
        assert clock.today() == date(2024, 1, 2)
