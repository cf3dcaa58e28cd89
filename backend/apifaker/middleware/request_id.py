"""
API Faker — Request ID Middleware
===================================

What:  Assigns a short correlation ID to each request and returns it in
       the X-Request-ID response header.
Why:   Access-log lines, content-type warnings and storage rejections for
       one request can be tied together in the logs.
How:   Reuses a client-supplied X-Request-ID, else generates one; stores it
       in a ContextVar that loggers and handlers read.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Adds X-Request-ID to every response, honouring one sent by the client."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
