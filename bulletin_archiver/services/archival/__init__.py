# bulletin_archiver/services/archival/__init__.py
"""
Automatic content lifecycle archiver.

Periodically archives announcements whose visibility window has closed and
deactivates calendar events whose end date has passed.

Modules:
- gateway: the archiver's single database connection
- sweeps: one transactional pass per collection
- coordinator: one run = both sweeps + statistics, overlap-guarded
- scheduler: APScheduler cron wiring
- reporting: status, statistics, health and log-summary views
- service: facade used by the API, CLI and app lifespan
"""

from bulletin_archiver.services.archival.coordinator import ArchivalCoordinator, RunResult
from bulletin_archiver.services.archival.gateway import StorageGateway
from bulletin_archiver.services.archival.reporting import HealthLevel, evaluate_health
from bulletin_archiver.services.archival.scheduler import ArchivalScheduler
from bulletin_archiver.services.archival.service import ArchivalService, get_archival_service
from bulletin_archiver.services.archival.statistics import RunStatistics, SweepCounters
from bulletin_archiver.services.archival.sweeps import (
    archive_expired_announcements,
    archive_expired_calendar_events,
)

__all__ = [
    # Storage
    "StorageGateway",
    # Sweeps
    "archive_expired_announcements",
    "archive_expired_calendar_events",
    # Runs
    "ArchivalCoordinator",
    "RunResult",
    "RunStatistics",
    "SweepCounters",
    # Scheduling
    "ArchivalScheduler",
    # Reporting
    "HealthLevel",
    "evaluate_health",
    # Facade
    "ArchivalService",
    "get_archival_service",
]
