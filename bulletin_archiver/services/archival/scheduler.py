# bulletin_archiver/services/archival/scheduler.py
"""
APScheduler wiring for recurring archival runs.

The recurring job is registered paused at initialize(); start() and stop()
resume and pause it. The scheduler never does archival work itself, it only
calls the run callback, which is expected not to raise.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from apscheduler.job import Job
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger

logger = logging.getLogger(__name__)

RECURRING_JOB_ID = "archival-recurring"
INITIAL_JOB_ID = "archival-initial"


class ArchivalScheduler:
    """
    Recurring trigger for the run coordinator.

    Args:
        run_callback: Called with the trigger name ("scheduler" or "initial")
        schedule: Cron expression (5 fields)
        timezone: IANA zone the cron expression is evaluated in
        initial_delay_seconds: Delay of the expedited first run after start()
        scheduler: Injected APScheduler instance (a BackgroundScheduler by default)
    """

    def __init__(
        self,
        run_callback: Callable[[str], object],
        schedule: str = "*/5 * * * *",
        timezone: str = "Asia/Manila",
        initial_delay_seconds: int = 5,
        scheduler: BaseScheduler | None = None,
    ):
        self.run_callback = run_callback
        self.schedule = schedule
        self.timezone = timezone
        self.initial_delay_seconds = initial_delay_seconds
        self._scheduler = scheduler
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def is_running(self) -> bool:
        """True while the recurring job is armed."""
        job = self._recurring_job()
        return job is not None and job.next_run_time is not None

    @property
    def next_run(self) -> datetime | None:
        job = self._recurring_job()
        return job.next_run_time if job is not None else None

    def initialize(self) -> None:
        """Create the scheduler and register the recurring job, disarmed."""
        if self._initialized:
            return

        if self._scheduler is None:
            self._scheduler = BackgroundScheduler(timezone=self.timezone)

        self._scheduler.add_job(
            self.run_callback,
            CronTrigger.from_crontab(self.schedule, timezone=self.timezone),
            args=["scheduler"],
            id=RECURRING_JOB_ID,
            name="Automatic content archival",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            next_run_time=None,  # added paused
        )

        if not self._scheduler.running:
            self._scheduler.start()

        self._initialized = True
        logger.info(
            f"Archival scheduler initialized ({self.schedule}, {self.timezone})",
            extra={"event": "scheduler_initialized", "schedule": self.schedule, "timezone": self.timezone},
        )

    def start(self) -> bool:
        """
        Arm the recurring job and queue an expedited first run.

        Returns:
            True if the job was newly armed, False if already running or not initialized
        """
        if not self._initialized or self.is_running:
            return False

        self._scheduler.resume_job(RECURRING_JOB_ID)

        run_date = datetime.now(self._scheduler.timezone) + timedelta(seconds=self.initial_delay_seconds)
        self._scheduler.add_job(
            self.run_callback,
            "date",
            run_date=run_date,
            args=["initial"],
            id=INITIAL_JOB_ID,
            name="Initial archival check",
            replace_existing=True,
        )

        logger.info(
            "Archival scheduler started",
            extra={"event": "scheduler_started", "schedule": self.schedule, "timezone": self.timezone},
        )
        return True

    def stop(self) -> bool:
        """
        Disarm the recurring job.

        Returns:
            True if it was running, False otherwise
        """
        if not self._initialized or not self.is_running:
            return False

        self._scheduler.pause_job(RECURRING_JOB_ID)
        if self._scheduler.get_job(INITIAL_JOB_ID) is not None:
            self._scheduler.remove_job(INITIAL_JOB_ID)

        logger.info("Archival scheduler stopped", extra={"event": "scheduler_stopped"})
        return True

    def shutdown(self) -> None:
        """Tear the scheduler down without waiting for an in-flight run."""
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._initialized = False

    def _recurring_job(self) -> Job | None:
        if not self._initialized or self._scheduler is None:
            return None
        return self._scheduler.get_job(RECURRING_JOB_ID)
