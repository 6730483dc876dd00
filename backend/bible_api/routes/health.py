"""
Telugu Bible API — Health Check Route
=======================================

What:  Health check endpoint for monitoring and load balancer probes.
Why:   Every verse endpoint needs the database; if it is unreachable the
       instance should be taken out of rotation.
How:   Runs SELECT 1 through the application's session factory.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable or slow (HTTP 503)
"""

import asyncio
import logging
import time

from fastapi import APIRouter, Request, Response
from sqlalchemy import text

from bible_api import __version__
from bible_api.config import settings
from bible_api.schemas.envelope import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with request.app.state.session_factory() as session:
            await asyncio.wait_for(
                session.execute(text("SELECT 1")),
                timeout=settings.store_timeout_seconds,
            )
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
