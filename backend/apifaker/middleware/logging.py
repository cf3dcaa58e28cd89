"""
API Faker — Request Logging Middleware
========================================

What:  One access-log line per request: method, path, status, duration,
       request ID and client address.
Why:   A fake API is mostly used while developing a client; seeing every
       call and its status at a glance is the main debugging aid.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

Level by status class:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Request bodies are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from apifaker.middleware.request_id import request_id_var

logger = logging.getLogger("apifaker.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request once its response is ready."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        # request.client is None under some test transports
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        path = request.url.path

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = request_id_var.get("")

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
