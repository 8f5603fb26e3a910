"""
Structured JSON logging for archival observability.

Provides structured logging with run IDs for correlating the log lines of a
single archival run, plus a context manager that times each collection sweep.
"""

import json
import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime

# Context variables for run correlation
run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)
collection_var: ContextVar[str | None] = ContextVar("collection", default=None)

# Extra fields copied from log records into the JSON payload
EXTRA_FIELDS = (
    "event",
    "duration_ms",
    "record_id",
    "title",
    "expired_at",
    "archived_at",
    "processed",
    "archived",
    "errors",
    "total_processed",
    "total_archived",
    "total_errors",
    "run_number",
    "schedule",
    "timezone",
    "trigger",
    "error",
)


# -----------------------------------------------------------------------------
# JSON Formatter
# -----------------------------------------------------------------------------


class JSONFormatter(logging.Formatter):
    """
    Format log records as single-line JSON.

    Output format:
    {"timestamp": "...", "level": "INFO", "message": "...", "run_id": "...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add run context if available
        run_id = run_id_var.get()
        if run_id:
            log_data["run_id"] = run_id

        collection = collection_var.get()
        if collection:
            log_data["collection"] = collection

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data, default=str)


def configure_logging(json_format: bool = True, level: str = "INFO") -> None:
    """
    Configure logging for deployment or local development.

    Args:
        json_format: If True, use JSON format. If False, use human-readable format.
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper()))

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# -----------------------------------------------------------------------------
# Context Managers
# -----------------------------------------------------------------------------


@contextmanager
def log_run(run_id: str):
    """Bind a run ID to every log line emitted inside the block."""
    token = run_id_var.set(run_id)
    try:
        yield
    finally:
        run_id_var.reset(token)


@contextmanager
def log_sweep(collection: str):
    """
    Context manager for sweep-level logging.

    Logs sweep start and end with duration, automatically tracks timing.

    Usage:
        with log_sweep("announcements"):
            # ... sweep logic ...
    """
    token = collection_var.set(collection)

    start_time = time.time()
    logger = logging.getLogger("archival.sweep")

    logger.debug(f"Sweep {collection} started", extra={"event": "sweep_start"})

    try:
        yield
        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"Sweep {collection} completed",
            extra={"event": "sweep_complete", "duration_ms": duration_ms},
        )
    except Exception as e:
        duration_ms = int((time.time() - start_time) * 1000)
        logger.error(
            f"Sweep {collection} failed: {e}",
            extra={"event": "sweep_failed", "duration_ms": duration_ms},
            exc_info=True,
        )
        raise
    finally:
        collection_var.reset(token)
