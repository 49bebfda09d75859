"""
Quillboard Backend: Request ID Middleware
==========================================

What:  Assigns a short correlation ID to each request and echoes it back.
How:   Uses the client's X-Request-ID header when present, otherwise a new
       8-character UUID prefix. The value is stored in a ContextVar so log
       calls and exception handlers anywhere in the request can read it, and
       it is returned as `requestId` in every error body.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_CLIENT_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Sets request_id_var and request.state.request_id; adds X-Request-ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", "").strip()[:MAX_CLIENT_ID_LENGTH]
        if not rid:
            rid = str(uuid.uuid4())[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
