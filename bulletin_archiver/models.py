# bulletin_archiver/models.py
"""
Bulletin content tables touched by the archiver.

Only the columns that take part in archival are mapped; the tables
themselves are owned by the bulletin application.

Tables:
- Announcement: bulletin posts with a visibility window
- CalendarEvent: school calendar entries with an optional end date
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    String,
)

from bulletin_archiver.database import Base


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class AnnouncementStatus(str, Enum):
    """Announcement lifecycle. ARCHIVED is terminal for the sweep."""
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ContentCollection(str, Enum):
    """Collections swept by the archiver, in sweep order."""
    ANNOUNCEMENTS = "announcements"
    CALENDAR = "calendar"


SYSTEM_ACTOR = "system"


# -----------------------------------------------------------------------------
# Announcement
# -----------------------------------------------------------------------------

class Announcement(Base):
    """Bulletin announcement (archival-relevant columns only)."""
    __tablename__ = "announcements"

    announcement_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    status = Column(
        String(20),
        default=AnnouncementStatus.DRAFT.value,
        nullable=False,
    )

    # NULL means the announcement never expires
    visibility_end_at = Column(DateTime, nullable=True)

    archived_at = Column(DateTime, nullable=True)
    archived_by = Column(String(64), nullable=True)
    deleted_at = Column(DateTime, nullable=True)  # soft delete

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_announcements_status_visibility_end", "status", "visibility_end_at"),
        Index("ix_announcements_deleted_at", "deleted_at"),
    )


# -----------------------------------------------------------------------------
# Calendar
# -----------------------------------------------------------------------------

class CalendarEvent(Base):
    """School calendar entry (archival-relevant columns only)."""
    __tablename__ = "school_calendar"

    calendar_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    event_date = Column(Date, nullable=False)

    # NULL means a single-day or open-ended event; never archived automatically
    end_date = Column(Date, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    deleted_at = Column(DateTime, nullable=True)  # soft delete

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_school_calendar_active_end_date", "is_active", "end_date"),
    )
