# bulletin_archiver/main.py

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from bulletin_archiver.config import get_settings
from bulletin_archiver.logging_config import configure_logging
from bulletin_archiver.routers import archival_router
from bulletin_archiver.services.archival import get_archival_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(json_format=settings.LOG_FORMAT == "json", level=settings.LOG_LEVEL)

    service = get_archival_service()
    try:
        service.initialize()
    except SQLAlchemyError as e:
        # Keep serving; health reports the archiver as unhealthy
        logger.error(f"Failed to initialize archival service: {e}", extra={"event": "service_init_failed"})
    else:
        if settings.ARCHIVAL_ENABLED:
            service.start()
        else:
            logger.info("Archival scheduler disabled by ARCHIVAL_ENABLED=false")

    yield

    service.cleanup()


app = FastAPI(title="Bulletin Content Archiver", lifespan=lifespan)

app.include_router(archival_router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@app.get("/health")
def health() -> dict:
    return {"status": "ok", "service": "bulletin-archiver"}
