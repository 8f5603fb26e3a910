# bulletin_archiver/services/archival/service.py
"""
Archival service facade.

Wires clock, storage gateway, coordinator and scheduler together and exposes
the control operations used by the HTTP router, the CLI and app lifespan.
"""

import logging
from datetime import timedelta
from functools import lru_cache

from bulletin_archiver.clock import ArchivalClock
from bulletin_archiver.config import Settings, get_settings
from bulletin_archiver.services.archival.coordinator import ArchivalCoordinator, RunResult
from bulletin_archiver.services.archival.gateway import StorageGateway
from bulletin_archiver.services.archival.reporting import (
    build_health,
    build_log_summary,
    build_statistics,
    build_status,
)
from bulletin_archiver.services.archival.scheduler import ArchivalScheduler

logger = logging.getLogger(__name__)


class ArchivalService:
    """
    Automatically archives expired announcements and calendar events.

    Runs inside the API process on a cron schedule. One instance per process.
    """

    def __init__(
        self,
        settings: Settings,
        gateway: StorageGateway | None = None,
        clock: ArchivalClock | None = None,
        scheduler: ArchivalScheduler | None = None,
    ):
        self.settings = settings
        self.clock = clock or ArchivalClock(settings.ARCHIVAL_TIMEZONE)
        self.gateway = gateway or StorageGateway(settings.DATABASE_URL)
        self.coordinator = ArchivalCoordinator(self.gateway, self.clock)
        self.scheduler = scheduler or ArchivalScheduler(
            run_callback=self.run_scheduled,
            schedule=settings.ARCHIVAL_SCHEDULE,
            timezone=settings.ARCHIVAL_TIMEZONE,
            initial_delay_seconds=settings.ARCHIVAL_INITIAL_DELAY_SECONDS,
        )

    @property
    def statistics(self):
        return self.coordinator.statistics

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def initialize(self) -> None:
        """
        Connect to the database and register the recurring job.

        Raises:
            SQLAlchemyError: If the initial connection fails
        """
        logger.info("Initializing archival service", extra={"event": "service_initializing"})
        self.gateway.connect()
        self.scheduler.initialize()
        logger.info(
            f"Archival service initialized, scheduled {self.settings.ARCHIVAL_SCHEDULE} "
            f"({self.settings.ARCHIVAL_TIMEZONE})",
            extra={"event": "service_initialized"},
        )

    def start(self) -> bool:
        """Arm the scheduler. Returns False if it was already running or never initialized."""
        return self.scheduler.start()

    def stop(self) -> bool:
        """Disarm the scheduler. Returns False if it was not running."""
        return self.scheduler.stop()

    def cleanup(self) -> None:
        """Stop scheduling and close the connection. An in-flight run is not awaited."""
        self.scheduler.shutdown()
        self.gateway.close()
        logger.info("Archival service cleaned up", extra={"event": "service_cleaned_up"})

    # -------------------------------------------------------------------------
    # Runs
    # -------------------------------------------------------------------------

    def run_scheduled(self, trigger: str = "scheduler") -> RunResult:
        """Scheduler callback."""
        return self.coordinator.run_archival(trigger=trigger)

    def manual_run(self) -> dict:
        """Run archival once, outside the schedule, and report the resulting status."""
        logger.info("Manual archival run triggered", extra={"event": "manual_run", "trigger": "manual"})
        result = self.coordinator.run_archival(trigger="manual")
        return {"status": self.get_status(), "run": summarize_run(result)}

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def get_status(self) -> dict:
        return build_status(
            is_initialized=self.scheduler.is_initialized,
            is_running=self.scheduler.is_running,
            is_processing=self.coordinator.is_processing,
            next_run=self.scheduler.next_run,
            statistics=self.statistics,
            schedule=self.settings.ARCHIVAL_SCHEDULE,
            timezone=self.settings.ARCHIVAL_TIMEZONE,
        )

    def get_statistics(self) -> dict:
        return build_statistics(self.get_status(), self.statistics)

    def health_check(self) -> dict:
        return build_health(
            self.get_status(),
            self.statistics,
            now=self.clock.now(),
            stale_after=timedelta(minutes=self.settings.ARCHIVAL_STALE_AFTER_MINUTES),
            error_rate_threshold=self.settings.ARCHIVAL_ERROR_RATE_THRESHOLD,
        )

    def get_logs(self) -> dict:
        return build_log_summary(self.statistics)


def summarize_run(result: RunResult) -> dict:
    return {
        "run_id": result.run_id,
        "success": result.success,
        "skipped": result.skipped,
        "duration_ms": result.duration_ms,
        "processed": result.total_processed,
        "archived": result.total_archived,
        "errors": result.total_errors,
        "messages": result.errors,
    }


@lru_cache(maxsize=1)
def get_archival_service() -> ArchivalService:
    """Process-wide archival service. FastAPI dependency."""
    return ArchivalService(get_settings())
