"""
Jotter Backend: Health Check Route
===================================

What:  Liveness endpoint for monitoring and load balancer probes.
How:   Answers from process state only; it never calls the key-value store or
       the auth provider, so it stays green while a dependency is down.
Who:   Docker health checks, load balancers, the client's connectivity check.
"""

import time

from fastapi import APIRouter

from jotter import __version__
from jotter.schemas.common import HealthResponse

router = APIRouter(tags=["Health"])

# Service start time for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
