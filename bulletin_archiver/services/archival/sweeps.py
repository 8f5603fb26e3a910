# bulletin_archiver/services/archival/sweeps.py
"""
Sweep operations: one pass over one collection.

Each sweep is a single transaction:
1. Locking read of every expired, non-terminal, non-deleted record
2. One guarded UPDATE per candidate, each inside its own SAVEPOINT
3. Commit once after the loop

A failing candidate is counted and skipped. A failure outside the per-item
boundary (the locking read, a dropped connection, the commit) rolls back the
whole sweep and propagates to the coordinator.
"""

import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from bulletin_archiver.logging_config import log_sweep
from bulletin_archiver.models import (
    SYSTEM_ACTOR,
    Announcement,
    AnnouncementStatus,
    CalendarEvent,
    ContentCollection,
)
from bulletin_archiver.services.archival.gateway import StorageGateway
from bulletin_archiver.services.archival.statistics import SweepCounters

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Announcements
# -----------------------------------------------------------------------------


def find_expired_announcements_stmt(now: datetime):
    """Candidates: visibility window closed, not archived, not soft-deleted."""
    return (
        select(
            Announcement.announcement_id,
            Announcement.title,
            Announcement.visibility_end_at,
        )
        .where(
            Announcement.visibility_end_at.isnot(None),
            Announcement.visibility_end_at <= now,
            Announcement.status != AnnouncementStatus.ARCHIVED.value,
            Announcement.deleted_at.is_(None),
        )
        .with_for_update()
    )


def archive_announcement_stmt(announcement_id: int, now: datetime):
    """Guarded transition; matches nothing once the row is archived or deleted."""
    return (
        update(Announcement)
        .where(
            Announcement.announcement_id == announcement_id,
            Announcement.status != AnnouncementStatus.ARCHIVED.value,
            Announcement.deleted_at.is_(None),
        )
        .values(
            status=AnnouncementStatus.ARCHIVED.value,
            archived_at=now,
            archived_by=SYSTEM_ACTOR,
            updated_at=now,
        )
    )


def archive_expired_announcements(
    gateway: StorageGateway,
    now: datetime,
    counters: SweepCounters,
) -> None:
    """
    Archive every announcement whose visibility_end_at has passed.

    Args:
        gateway: Connected storage gateway
        now: Local "now" as a naive timestamp; also written to archived_at
        counters: Run-scoped counters for announcements, filled in place

    Raises:
        SQLAlchemyError: If the sweep as a whole fails (rolled back first)
    """
    with log_sweep(ContentCollection.ANNOUNCEMENTS.value):
        with gateway.transaction():
            candidates = gateway.execute(find_expired_announcements_stmt(now)).all()
            counters.processed = len(candidates)

            if not candidates:
                logger.debug("No expired announcements found to archive")
                return

            logger.info(f"Found {len(candidates)} expired announcements to archive")

            for row in candidates:
                _apply_transition(
                    gateway,
                    archive_announcement_stmt(row.announcement_id, now),
                    counters,
                    kind="announcement",
                    record_id=row.announcement_id,
                    title=row.title,
                    expired_at=row.visibility_end_at,
                    archived_at=now,
                )

    logger.info(
        "Announcement archival completed",
        extra={
            "event": "announcements_archived",
            "processed": counters.processed,
            "archived": counters.archived,
            "errors": counters.errors,
        },
    )


# -----------------------------------------------------------------------------
# Calendar events
# -----------------------------------------------------------------------------


def find_expired_calendar_events_stmt(today):
    """Candidates: end date reached, still active, not soft-deleted."""
    return (
        select(
            CalendarEvent.calendar_id,
            CalendarEvent.title,
            CalendarEvent.end_date,
        )
        .where(
            CalendarEvent.end_date.isnot(None),
            CalendarEvent.end_date <= today,
            CalendarEvent.is_active.is_(True),
            CalendarEvent.deleted_at.is_(None),
        )
        .with_for_update()
    )


def deactivate_calendar_event_stmt(calendar_id: int, now: datetime):
    """
    Guarded transition for calendar events.

    Expired events are deactivated, not soft-deleted, so an administrator can
    still reactivate them.
    """
    return (
        update(CalendarEvent)
        .where(
            CalendarEvent.calendar_id == calendar_id,
            CalendarEvent.is_active.is_(True),
            CalendarEvent.deleted_at.is_(None),
        )
        .values(is_active=False, updated_at=now)
    )


def archive_expired_calendar_events(
    gateway: StorageGateway,
    now: datetime,
    counters: SweepCounters,
) -> None:
    """
    Deactivate every calendar event whose end_date is today or earlier.

    Comparison is by calendar day in the archiver's time zone.

    Raises:
        SQLAlchemyError: If the sweep as a whole fails (rolled back first)
    """
    with log_sweep(ContentCollection.CALENDAR.value):
        with gateway.transaction():
            candidates = gateway.execute(find_expired_calendar_events_stmt(now.date())).all()
            counters.processed = len(candidates)

            if not candidates:
                logger.debug("No expired calendar events found to archive")
                return

            logger.info(f"Found {len(candidates)} expired calendar events to archive")

            for row in candidates:
                _apply_transition(
                    gateway,
                    deactivate_calendar_event_stmt(row.calendar_id, now),
                    counters,
                    kind="calendar event",
                    record_id=row.calendar_id,
                    title=row.title,
                    expired_at=row.end_date,
                    archived_at=now,
                )

    logger.info(
        "Calendar event archival completed",
        extra={
            "event": "calendar_archived",
            "processed": counters.processed,
            "archived": counters.archived,
            "errors": counters.errors,
        },
    )


# -----------------------------------------------------------------------------
# Per-item transition
# -----------------------------------------------------------------------------


def _apply_transition(
    gateway: StorageGateway,
    statement,
    counters: SweepCounters,
    *,
    kind: str,
    record_id: int,
    title: str,
    expired_at,
    archived_at: datetime,
) -> None:
    """Run one guarded update and count the outcome. Never aborts the sweep."""
    try:
        with gateway.savepoint():
            result = gateway.execute(statement)
    except SQLAlchemyError as e:
        if isinstance(e, DBAPIError) and e.connection_invalidated:
            # Connection is gone; nothing else in this sweep can succeed
            raise
        counters.errors += 1
        logger.error(
            f"Failed to archive {kind} {record_id}: {e}",
            extra={"event": "archive_failed", "record_id": record_id, "error": str(e)},
        )
        return

    if result.rowcount > 0:
        counters.archived += 1
        logger.info(
            f"Archived expired {kind}",
            extra={
                "event": "record_archived",
                "record_id": record_id,
                "title": title,
                "expired_at": expired_at,
                "archived_at": archived_at,
            },
        )
    else:
        counters.errors += 1
        logger.warning(
            f"Skipped {kind} {record_id}: no longer eligible when updated",
            extra={"event": "archive_skipped", "record_id": record_id},
        )
