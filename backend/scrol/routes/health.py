"""
Scrol Backend — Health Check Route
===================================

What:  GET /health for load balancer and container probes.
How:   Runs SELECT 1 against the store and checks the blob root is usable.
       Either failing reports the service as "unhealthy"; the probe itself
       always answers 200.
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text

from scrol import __version__
from scrol.database import engine
from scrol.schemas.common import HealthResponse
from scrol.services.blob_store import blob_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check() -> HealthResponse:
    db_status = "connected"
    blob_status = "available"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    try:
        if not await blob_store.health_check():
            blob_status = "unavailable"
            overall = "unhealthy"
    except Exception as e:
        blob_status = "unavailable"
        overall = "unhealthy"
        logger.warning("Health check: blob store unusable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        blob_store=blob_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
