# tests/conftest.py
"""
Pytest configuration and fixtures.
"""

import os
from datetime import date, datetime

import pytest
from sqlalchemy import create_engine, event, insert, select
from sqlalchemy.pool import StaticPool

# Set test environment
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")


@pytest.fixture
def engine():
    """
    In-memory SQLite shared by every connection, with working SAVEPOINTs.

    pysqlite's own transaction handling breaks SAVEPOINT, so BEGIN is emitted
    by SQLAlchemy instead (recipe from the SQLAlchemy SQLite dialect docs).
    """
    from bulletin_archiver.database import init_db

    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def gateway(engine):
    from bulletin_archiver.services.archival.gateway import StorageGateway

    gw = StorageGateway(engine=engine)
    gw.connect()
    yield gw
    gw.close()


@pytest.fixture
def clock():
    """Clock frozen at 2024-01-01 08:00:00 Asia/Manila."""
    from bulletin_archiver.clock import FixedClock

    return FixedClock(datetime(2024, 1, 1, 8, 0, 0))


@pytest.fixture
def paused_apscheduler():
    """Real BackgroundScheduler that never fires jobs."""
    from apscheduler.schedulers.background import BackgroundScheduler

    scheduler = BackgroundScheduler(timezone="Asia/Manila")
    scheduler.start(paused=True)
    yield scheduler
    if scheduler.running:
        scheduler.shutdown(wait=False)


@pytest.fixture
def settings():
    from bulletin_archiver.config import Settings

    return Settings(DATABASE_URL="sqlite://", ADMIN_API_KEY="test-admin-key")


# -----------------------------------------------------------------------------
# Row helpers
# -----------------------------------------------------------------------------


class BulletinRows:
    """Seed and read back bulletin rows outside the archiver's connection."""

    def __init__(self, engine):
        self.engine = engine

    def add_announcement(self, **values) -> int:
        from bulletin_archiver.models import Announcement

        values.setdefault("title", "Announcement")
        values.setdefault("status", "published")
        with self.engine.begin() as conn:
            result = conn.execute(insert(Announcement).values(**values))
            return result.inserted_primary_key[0]

    def announcement(self, announcement_id: int):
        from bulletin_archiver.models import Announcement

        with self.engine.begin() as conn:
            return conn.execute(
                select(Announcement.__table__).where(
                    Announcement.announcement_id == announcement_id
                )
            ).one()

    def add_calendar_event(self, **values) -> int:
        from bulletin_archiver.models import CalendarEvent

        values.setdefault("title", "Calendar event")
        values.setdefault("is_active", True)
        values.setdefault("event_date", date(2023, 12, 1))
        with self.engine.begin() as conn:
            result = conn.execute(insert(CalendarEvent).values(**values))
            return result.inserted_primary_key[0]

    def calendar_event(self, calendar_id: int):
        from bulletin_archiver.models import CalendarEvent

        with self.engine.begin() as conn:
            return conn.execute(
                select(CalendarEvent.__table__).where(CalendarEvent.calendar_id == calendar_id)
            ).one()

    def block_updates(self, table: str, id_column: str, record_id: int) -> None:
        """Make UPDATEs of one row fail at the database level."""
        with self.engine.begin() as conn:
            conn.exec_driver_sql(
                f"CREATE TRIGGER block_{table}_{int(record_id)} BEFORE UPDATE ON {table} "
                f"WHEN OLD.{id_column} = {int(record_id)} "
                f"BEGIN SELECT RAISE(ABORT, 'update blocked'); END"
            )


@pytest.fixture
def rows(engine):
    return BulletinRows(engine)


@pytest.fixture
def archival_service(settings, gateway, clock, paused_apscheduler):
    """ArchivalService on the test database with a scheduler that never fires."""
    from bulletin_archiver.services.archival import ArchivalScheduler, ArchivalService

    service = ArchivalService(settings, gateway=gateway, clock=clock)
    service.scheduler = ArchivalScheduler(
        run_callback=service.run_scheduled,
        schedule=settings.ARCHIVAL_SCHEDULE,
        timezone=settings.ARCHIVAL_TIMEZONE,
        scheduler=paused_apscheduler,
    )
    yield service
    service.cleanup()
