"""
ImageVault Backend — Health Check Route
=========================================

What:  Health check endpoint for container probes and load balancers.
How:   Sends MongoDB's `ping` admin command through the shared client.

Status levels:
    - healthy:   store reachable (HTTP 200)
    - unhealthy: store unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response
from pymongo import AsyncMongoClient

from imagevault import __version__
from imagevault.database import get_mongo_client
from imagevault.schemas.image import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    response: Response,
    client: AsyncMongoClient = Depends(get_mongo_client),
) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        await client.admin.command("ping")
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
