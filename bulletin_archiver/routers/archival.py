# bulletin_archiver/routers/archival.py
"""
Control endpoints for the automatic archival service.

GET  /v1/archival/health     - Health classification (public)
GET  /v1/archival/status     - Scheduler state and counters (public)
GET  /v1/archival/statistics - Success rates per collection
GET  /v1/archival/logs       - Last-run and all-time counters
POST /v1/archival/run        - Trigger a manual archival run
POST /v1/archival/start      - Arm the scheduler
POST /v1/archival/stop       - Disarm the scheduler
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from bulletin_archiver.auth import require_admin_key
from bulletin_archiver.services.archival import ArchivalService, get_archival_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/archival", tags=["archival"])


# -----------------------------------------------------------------------------
# Response Models
# -----------------------------------------------------------------------------


class CollectionCounters(BaseModel):
    """Counters for one collection."""

    processed: int
    archived: int
    errors: int


class CollectionStatistics(CollectionCounters):
    """Cumulative counters plus success rate (percent)."""

    success_rate: float


class CountersByCollection(BaseModel):
    announcements: CollectionCounters
    calendar: CollectionCounters


class StatsSnapshot(BaseModel):
    total_runs: int
    last_run_stats: CountersByCollection
    all_time_stats: CountersByCollection


class StatusResponse(BaseModel):
    """Archival service status."""

    is_initialized: bool
    is_running: bool
    is_processing: bool
    last_run: datetime | None
    next_run: datetime | None
    schedule: str
    timezone: str
    stats: StatsSnapshot


class StatisticsSummary(BaseModel):
    total_runs: int
    total_processed: int
    total_archived: int
    total_errors: int
    overall_success_rate: float
    last_run: datetime | None
    next_run: datetime | None


class StatisticsResponse(BaseModel):
    """Derived success-rate view."""

    summary: StatisticsSummary
    announcements: CollectionStatistics
    calendar: CollectionStatistics
    last_run_stats: CountersByCollection


class RunSummary(BaseModel):
    run_id: str
    success: bool
    skipped: bool
    duration_ms: int
    processed: int
    archived: int
    errors: int
    messages: list[str]


class ManualRunResponse(BaseModel):
    """Manual run outcome."""

    status: StatusResponse
    run: RunSummary


class ServiceToggleResponse(BaseModel):
    """Start/stop outcome. changed is False when the requested state already held."""

    changed: bool
    message: str
    status: StatusResponse


class HealthStatus(BaseModel):
    is_initialized: bool
    is_running: bool
    is_processing: bool
    last_run: datetime | None
    next_run: datetime | None
    total_runs: int


class HealthResponse(BaseModel):
    """Health classification: healthy, warning or unhealthy."""

    health: str
    issues: list[str]
    status: HealthStatus
    uptime: str
    schedule: str


class LogSummaryResponse(BaseModel):
    """In-memory activity summary (not a log file reader)."""

    last_run: datetime | None
    last_run_stats: CountersByCollection
    total_runs: int
    all_time_stats: CountersByCollection
    note: str


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse)
def archival_health(
    service: ArchivalService = Depends(get_archival_service),
) -> HealthResponse:
    """
    Get archival service health.

    Always answers 200; problems are reported through `health` and `issues`.
    """
    return HealthResponse(**service.health_check())


@router.get("/status", response_model=StatusResponse)
def archival_status(
    service: ArchivalService = Depends(get_archival_service),
) -> StatusResponse:
    """Get scheduler state, last/next run and raw counters."""
    return StatusResponse(**service.get_status())


@router.get("/statistics", response_model=StatisticsResponse)
def archival_statistics(
    service: ArchivalService = Depends(get_archival_service),
    _: None = Depends(require_admin_key),
) -> StatisticsResponse:
    """Get cumulative counters and success rates per collection."""
    return StatisticsResponse(**service.get_statistics())


@router.get("/logs", response_model=LogSummaryResponse)
def archival_logs(
    service: ArchivalService = Depends(get_archival_service),
    _: None = Depends(require_admin_key),
) -> LogSummaryResponse:
    """Get the last-run and all-time counters as an activity summary."""
    return LogSummaryResponse(**service.get_logs())


@router.post("/run", response_model=ManualRunResponse)
def trigger_archival_run(
    service: ArchivalService = Depends(get_archival_service),
    _: None = Depends(require_admin_key),
) -> ManualRunResponse:
    """
    Run archival once, outside the schedule.

    If a run is already in progress the request does not start another one;
    the response has `run.skipped = true`.
    """
    try:
        result = service.manual_run()
    except Exception as e:
        logger.exception(f"Manual archival run failed: {e}")
        raise HTTPException(status_code=500, detail=f"Manual archival run failed: {e}")

    return ManualRunResponse(**result)


@router.post("/start", response_model=ServiceToggleResponse)
def start_archival(
    service: ArchivalService = Depends(get_archival_service),
    _: None = Depends(require_admin_key),
) -> ServiceToggleResponse:
    """Arm the archival scheduler."""
    changed = service.start()
    message = (
        "Archival service started"
        if changed
        else "Archival service is already running or not initialized"
    )
    logger.info(message, extra={"event": "control_start"})
    return ServiceToggleResponse(changed=changed, message=message, status=StatusResponse(**service.get_status()))


@router.post("/stop", response_model=ServiceToggleResponse)
def stop_archival(
    service: ArchivalService = Depends(get_archival_service),
    _: None = Depends(require_admin_key),
) -> ServiceToggleResponse:
    """Disarm the archival scheduler."""
    changed = service.stop()
    message = (
        "Archival service stopped"
        if changed
        else "Archival service is not running or not initialized"
    )
    logger.info(message, extra={"event": "control_stop"})
    return ServiceToggleResponse(changed=changed, message=message, status=StatusResponse(**service.get_status()))
