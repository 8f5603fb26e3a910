# tests/unit/test_archival/test_scheduler.py
"""Unit tests for the APScheduler wiring."""

from unittest.mock import MagicMock

import pytest


@pytest.fixture
def archival_scheduler(paused_apscheduler):
    from bulletin_archiver.services.archival.scheduler import ArchivalScheduler

    return ArchivalScheduler(
        run_callback=MagicMock(),
        schedule="*/5 * * * *",
        timezone="Asia/Manila",
        initial_delay_seconds=5,
        scheduler=paused_apscheduler,
    )


class TestInitialize:
    """Tests for ArchivalScheduler.initialize()."""

    def test_not_initialized_before_initialize(self, archival_scheduler):
        """Should report nothing until initialize() is called."""
        assert archival_scheduler.is_initialized is False
        assert archival_scheduler.is_running is False
        assert archival_scheduler.next_run is None

    def test_registers_recurring_job_disarmed(self, archival_scheduler, paused_apscheduler):
        """Should add the cron job paused."""
        from bulletin_archiver.services.archival.scheduler import RECURRING_JOB_ID

        archival_scheduler.initialize()

        job = paused_apscheduler.get_job(RECURRING_JOB_ID)
        assert job is not None
        assert job.next_run_time is None
        assert job.args == ("scheduler",)
        assert job.max_instances == 1
        assert archival_scheduler.is_initialized is True
        assert archival_scheduler.is_running is False

    def test_initialize_is_idempotent(self, archival_scheduler, paused_apscheduler):
        """Should not register a second recurring job."""
        archival_scheduler.initialize()
        archival_scheduler.initialize()

        assert len(paused_apscheduler.get_jobs()) == 1

    def test_rejects_invalid_cron(self, paused_apscheduler):
        """Should fail on an invalid cron expression."""
        from bulletin_archiver.services.archival.scheduler import ArchivalScheduler

        scheduler = ArchivalScheduler(MagicMock(), schedule="not a cron", scheduler=paused_apscheduler)

        with pytest.raises(ValueError):
            scheduler.initialize()


class TestStartStop:
    """Tests for ArchivalScheduler.start() / stop()."""

    def test_start_before_initialize_is_noop(self, archival_scheduler):
        """Should refuse to start an uninitialized scheduler."""
        assert archival_scheduler.start() is False

    def test_start_arms_job_and_queues_initial_run(self, archival_scheduler, paused_apscheduler):
        """Should resume the cron job and add an expedited first run."""
        from bulletin_archiver.services.archival.scheduler import INITIAL_JOB_ID

        archival_scheduler.initialize()

        assert archival_scheduler.start() is True
        assert archival_scheduler.is_running is True
        assert archival_scheduler.next_run is not None

        initial = paused_apscheduler.get_job(INITIAL_JOB_ID)
        assert initial is not None
        assert initial.args == ("initial",)

    def test_start_twice_reports_no_change(self, archival_scheduler):
        """Should return False when already running."""
        archival_scheduler.initialize()
        archival_scheduler.start()

        assert archival_scheduler.start() is False
        assert archival_scheduler.is_running is True

    def test_stop_disarms_job(self, archival_scheduler, paused_apscheduler):
        """Should pause the cron job and drop a pending initial run."""
        from bulletin_archiver.services.archival.scheduler import INITIAL_JOB_ID, RECURRING_JOB_ID

        archival_scheduler.initialize()
        archival_scheduler.start()

        assert archival_scheduler.stop() is True
        assert archival_scheduler.is_running is False
        assert archival_scheduler.next_run is None
        assert paused_apscheduler.get_job(INITIAL_JOB_ID) is None
        assert paused_apscheduler.get_job(RECURRING_JOB_ID) is not None

    def test_stop_when_stopped_reports_no_change(self, archival_scheduler):
        """Should return False when not running."""
        archival_scheduler.initialize()

        assert archival_scheduler.stop() is False

    def test_restart_after_stop(self, archival_scheduler):
        """Should be able to start again after stopping."""
        archival_scheduler.initialize()
        archival_scheduler.start()
        archival_scheduler.stop()

        assert archival_scheduler.start() is True
        assert archival_scheduler.is_running is True


class TestShutdown:
    """Tests for ArchivalScheduler.shutdown()."""

    def test_shutdown_stops_scheduler(self, archival_scheduler, paused_apscheduler):
        """Should shut APScheduler down and report uninitialized."""
        archival_scheduler.initialize()
        archival_scheduler.start()

        archival_scheduler.shutdown()

        assert paused_apscheduler.running is False
        assert archival_scheduler.is_initialized is False
        assert archival_scheduler.is_running is False

    def test_shutdown_without_initialize(self, archival_scheduler):
        """Should be safe to call before initialize()."""
        archival_scheduler.shutdown()

        assert archival_scheduler.is_initialized is False
