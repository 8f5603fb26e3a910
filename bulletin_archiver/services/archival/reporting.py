# bulletin_archiver/services/archival/reporting.py
"""
Read-only views over archival state: status, statistics, health, log summary.

Everything here is derived on demand from the coordinator's statistics and
the scheduler's state; nothing is stored.
"""

from datetime import datetime, timedelta
from enum import Enum

from bulletin_archiver.models import ContentCollection
from bulletin_archiver.services.archival.statistics import RunStatistics


class HealthLevel(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    UNHEALTHY = "unhealthy"


def build_status(
    *,
    is_initialized: bool,
    is_running: bool,
    is_processing: bool,
    next_run: datetime | None,
    statistics: RunStatistics,
    schedule: str,
    timezone: str,
) -> dict:
    """Snapshot of scheduler state plus raw counters."""
    return {
        "is_initialized": is_initialized,
        "is_running": is_running,
        "is_processing": is_processing,
        "last_run": statistics.last_run,
        "next_run": next_run,
        "schedule": schedule,
        "timezone": timezone,
        "stats": statistics.to_dict(),
    }


def build_statistics(status: dict, statistics: RunStatistics) -> dict:
    """
    Success-rate view over the cumulative counters.

    Rates are percentages rounded to two decimals; 0.0 when nothing was processed.
    """
    totals = statistics.all_time_totals()

    view = {
        "summary": {
            "total_runs": statistics.total_runs,
            "total_processed": totals.processed,
            "total_archived": totals.archived,
            "total_errors": totals.errors,
            "overall_success_rate": totals.success_rate,
            "last_run": status["last_run"],
            "next_run": status["next_run"],
        },
        "last_run_stats": {
            c.value: s.to_dict() for c, s in statistics.last_run_stats.items()
        },
    }
    for collection in ContentCollection:
        counters = statistics.all_time_stats[collection]
        view[collection.value] = {**counters.to_dict(), "success_rate": counters.success_rate}
    return view


def evaluate_health(
    status: dict,
    statistics: RunStatistics,
    now: datetime,
    stale_after: timedelta = timedelta(minutes=10),
    error_rate_threshold: float = 10.0,
) -> tuple[HealthLevel, list[str]]:
    """
    Classify archiver health.

    - unhealthy: scheduler never initialized
    - warning: scheduler not running, last run older than stale_after,
      or cumulative error rate above error_rate_threshold percent
    - healthy: otherwise

    Returns:
        (level, issues) where issues are human-readable explanations
    """
    issues: list[str] = []
    level = HealthLevel.HEALTHY

    def degrade(to: HealthLevel) -> None:
        nonlocal level
        if level != HealthLevel.UNHEALTHY:
            level = to

    if not status["is_initialized"]:
        level = HealthLevel.UNHEALTHY
        issues.append("Service not initialized")

    if not status["is_running"]:
        degrade(HealthLevel.WARNING)
        issues.append("Service not running (scheduler stopped)")

    last_run = status["last_run"]
    if last_run is not None:
        since_last_run = now - last_run
        if since_last_run > stale_after:
            degrade(HealthLevel.WARNING)
            issues.append(f"Last run was {round(since_last_run.total_seconds() / 60)} minutes ago")
    else:
        issues.append("No runs recorded yet")

    error_rate = statistics.error_rate
    if error_rate > error_rate_threshold:
        degrade(HealthLevel.WARNING)
        issues.append(f"High error rate: {error_rate:.2f}%")

    return level, issues


def build_health(
    status: dict,
    statistics: RunStatistics,
    now: datetime,
    stale_after: timedelta = timedelta(minutes=10),
    error_rate_threshold: float = 10.0,
) -> dict:
    level, issues = evaluate_health(status, statistics, now, stale_after, error_rate_threshold)
    last_run = status["last_run"]
    return {
        "health": level.value,
        "issues": issues,
        "status": {
            "is_initialized": status["is_initialized"],
            "is_running": status["is_running"],
            "is_processing": status["is_processing"],
            "last_run": last_run,
            "next_run": status["next_run"],
            "total_runs": statistics.total_runs,
        },
        "uptime": f"Last active: {last_run.isoformat()}" if last_run else "Never run",
        "schedule": f"{status['schedule']} ({status['timezone']})",
    }


def build_log_summary(statistics: RunStatistics) -> dict:
    """In-memory counters presented as a recent-activity summary."""
    counters = statistics.to_dict()
    return {
        "last_run": statistics.last_run,
        "last_run_stats": counters["last_run_stats"],
        "total_runs": counters["total_runs"],
        "all_time_stats": counters["all_time_stats"],
        "note": "Detailed logs are written to stdout as JSON; correlate the lines of one run by run_id",
    }
