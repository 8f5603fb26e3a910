# bulletin_archiver/services/archival/coordinator.py
"""
Run coordinator: one archival run = both sweeps + statistics bookkeeping.

Failures are contained at three levels:
- per item (inside each sweep)
- per sweep (here, so one collection failing never skips the other)
- per run (here, so nothing ever propagates to the scheduler)
"""

import logging
import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from bulletin_archiver.clock import ArchivalClock
from bulletin_archiver.logging_config import log_run
from bulletin_archiver.models import ContentCollection
from bulletin_archiver.services.archival.gateway import StorageGateway
from bulletin_archiver.services.archival.statistics import RunStatistics, SweepCounters
from bulletin_archiver.services.archival.sweeps import (
    archive_expired_announcements,
    archive_expired_calendar_events,
)

logger = logging.getLogger(__name__)

SweepFn = Callable[[StorageGateway, datetime, SweepCounters], None]


@dataclass
class RunResult:
    """Result of one run_archival() call."""

    run_id: str
    success: bool = True
    skipped: bool = False
    started_at: datetime | None = None
    duration_ms: int = 0
    stats: dict[ContentCollection, SweepCounters] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return sum(s.processed for s in self.stats.values())

    @property
    def total_archived(self) -> int:
        return sum(s.archived for s in self.stats.values())

    @property
    def total_errors(self) -> int:
        return sum(s.errors for s in self.stats.values())


class ArchivalCoordinator:
    """
    Runs archival sweeps one run at a time.

    The coordinator owns the statistics; everything else reads them.
    run_archival() never raises.
    """

    def __init__(
        self,
        gateway: StorageGateway,
        clock: ArchivalClock,
        statistics: RunStatistics | None = None,
    ):
        self.gateway = gateway
        self.clock = clock
        self.statistics = statistics or RunStatistics()
        self._run_lock = threading.Lock()
        # Fixed sweep order within a run
        self._sweeps: list[tuple[ContentCollection, SweepFn]] = [
            (ContentCollection.ANNOUNCEMENTS, archive_expired_announcements),
            (ContentCollection.CALENDAR, archive_expired_calendar_events),
        ]

    @property
    def is_processing(self) -> bool:
        return self._run_lock.locked()

    def run_archival(self, trigger: str = "scheduler") -> RunResult:
        """
        Execute one full archival run unless one is already in progress.

        Args:
            trigger: What started the run (scheduler, initial, manual, cli)

        Returns:
            RunResult; skipped=True when another run held the guard
        """
        run_id = str(uuid.uuid4())

        if not self._run_lock.acquire(blocking=False):
            logger.warning(
                "Archival process already running, skipping",
                extra={"event": "run_skipped", "trigger": trigger},
            )
            return RunResult(run_id=run_id, success=False, skipped=True)

        try:
            with log_run(run_id):
                return self._run(run_id, trigger)
        finally:
            self._run_lock.release()

    def _run(self, run_id: str, trigger: str) -> RunResult:
        start_time = time.time()
        result = RunResult(run_id=run_id, started_at=self.clock.now())
        run_stats = self.statistics.begin_run()
        result.stats = run_stats

        logger.info("Starting automatic content archival", extra={"event": "run_start", "trigger": trigger})

        try:
            self.gateway.ensure_connected()
            now = self.clock.db_now()

            for collection, sweep in self._sweeps:
                try:
                    sweep(self.gateway, now, run_stats[collection])
                except Exception as e:
                    # Sweep already rolled back and logged; keep going with the next collection
                    result.success = False
                    result.errors.append(f"{collection.value}: {e}")
                    logger.error(
                        f"{collection.value} archival failed: {e}",
                        extra={"event": "sweep_aborted", "error": str(e)},
                    )
        except Exception as e:
            result.success = False
            result.errors.append(f"run: {e}")
            logger.exception(f"Archival process failed: {e}")

        self.statistics.complete_run(self.clock.now())
        result.duration_ms = int((time.time() - start_time) * 1000)

        logger.info(
            "Automatic content archival completed",
            extra={
                "event": "run_complete",
                "trigger": trigger,
                "duration_ms": result.duration_ms,
                "total_processed": result.total_processed,
                "total_archived": result.total_archived,
                "total_errors": result.total_errors,
                "run_number": self.statistics.total_runs,
            },
        )
        return result
