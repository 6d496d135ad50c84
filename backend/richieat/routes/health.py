"""
RICHIEAT Backend — Health Check Route
=======================================

What:  GET / — liveness/readiness check.
How:   Runs SELECT 1 against the database and reports process uptime. The
       endpoint always answers 200 while the process is up; the `database`
       field tells monitors whether the store is reachable.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter

from richieat import __version__
from richieat.config import settings
from richieat.database import ping
from richieat.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_model=HealthResponse, summary="Service health check")
async def health_check() -> HealthResponse:
    connected = await ping()
    logger.debug("Health check requested")
    return HealthResponse(
        message="RICHIEAT Backend API is running!",
        version=__version__,
        status="active",
        timestamp=datetime.now(timezone.utc),
        environment=settings.environment,
        database="connected" if connected else "disconnected",
        uptime=round(time.time() - _start_time, 2),
    )
