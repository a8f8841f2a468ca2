"""
Jotter Backend: Request Logging Middleware
===========================================

What:  One access-log line per HTTP request on the `jotter.access` logger.
How:   Times the request and logs once the response is ready. The level
       follows the status class (5xx ERROR, 4xx WARNING, otherwise INFO).

Line format:
    PUT /notes/{note_id} 404 3.2ms [a1b2c3d4] from 10.0.0.7

    The matched route template is logged instead of the concrete URL, so
    note ids stay out of access logs. Unmatched paths are logged as-is.

Never logged: request bodies, Authorization headers, tokens, passwords.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from jotter.middleware.request_id import request_id_var

logger = logging.getLogger("jotter.access")

# Probes run every few seconds and would drown the useful lines
QUIET_PATH_SUFFIXES = ("/health",)


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def route_template(request: Request) -> str:
    """`/notes/{note_id}` for a matched route, the raw path otherwise."""
    route = request.scope.get("route")
    template = getattr(route, "path_format", None) or getattr(route, "path", None)
    return template or request.url.path


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path.endswith(QUIET_PATH_SUFFIXES):
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        # Routing fills scope["route"] on the shared scope during call_next
        path = route_template(request)
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        logger.log(
            level_for_status(response.status_code),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            response.status_code,
            elapsed_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "route": path,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
