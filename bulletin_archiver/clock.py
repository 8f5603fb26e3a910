# bulletin_archiver/clock.py
"""
Local time source for archival.

Expiry columns are stored as naive local timestamps in the school's time
zone, so every comparison against them must use "now" rendered the same way.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

DATABASE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DATABASE_DATE_FORMAT = "%Y-%m-%d"


class ArchivalClock:
    """Stateless clock pinned to one IANA time zone."""

    def __init__(self, timezone_name: str = "Asia/Manila"):
        self.timezone_name = timezone_name
        self.timezone = ZoneInfo(timezone_name)

    def now(self) -> datetime:
        """Current time as an aware datetime in the configured zone."""
        return datetime.now(self.timezone)

    def db_now(self) -> datetime:
        """Current local wall-clock time as a naive datetime, truncated to seconds."""
        return self.to_database(self.now())

    def today(self) -> date:
        return self.now().date()

    def to_database(self, moment: datetime) -> datetime:
        """Convert to the naive local representation the bulletin tables use."""
        if moment.tzinfo is not None:
            moment = moment.astimezone(self.timezone).replace(tzinfo=None)
        return moment.replace(microsecond=0)

    def format_for_database(self, moment: datetime | None = None) -> str:
        """Render a timestamp as YYYY-MM-DD HH:MM:SS local time."""
        moment = self.now() if moment is None else moment
        return self.to_database(moment).strftime(DATABASE_TIMESTAMP_FORMAT)


class FixedClock(ArchivalClock):
    """Clock frozen at a given local time. Used by the CLI's --as-of and in tests."""

    def __init__(self, moment: datetime, timezone_name: str = "Asia/Manila"):
        super().__init__(timezone_name)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=self.timezone)
        self._moment = moment

    def now(self) -> datetime:
        return self._moment.astimezone(self.timezone)
