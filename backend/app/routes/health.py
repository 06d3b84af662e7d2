"""
SVG Holder Backend — Health Check Route
=========================================

What:  Liveness endpoint for monitoring and container health checks.
How:   Always answers 200 while the process is up; the payload reports
       whether the database currently answers a SELECT 1.
Who:   Called by Docker health checks, load balancers and SvgApiClient.check_health().

Status levels:
    - healthy:   process up, database reachable
    - degraded:  process up, database unreachable (still HTTP 200)
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from app import __version__
from app.schemas.svg import HealthEnvelope, HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthEnvelope,
    response_model_exclude_none=True,
    summary="Service health check",
)
@router.get(
    "/api/health",
    response_model=HealthEnvelope,
    response_model_exclude_none=True,
    include_in_schema=False,
)
async def health_check(request: Request) -> HealthEnvelope:
    database = request.app.state.database
    db_ok = await database.ping()
    if not db_ok:
        logger.warning("Health check: database unreachable")

    return HealthEnvelope(
        success=True,
        message="SVG Holder API is running",
        data=HealthStatus(
            status="healthy" if db_ok else "degraded",
            version=__version__,
            database="connected" if db_ok else "disconnected",
            timestamp=datetime.now(timezone.utc),
            uptime_seconds=round(time.time() - _start_time, 2),
        ),
    )
