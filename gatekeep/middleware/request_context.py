"""Request context middleware: assigns a unique ID to every request.

The ID is read from ``X-Request-ID`` when the client sends one, otherwise
a uuid4 is generated.  It is stored in a ContextVar so every log line
emitted while handling the request carries it, and echoed back on the
response for client-side correlation.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from gatekeep.core.logging import request_id_var
from gatekeep.middleware.security_context import SECURITY_CONTEXT_KEY

logger = logging.getLogger(__name__)


def _principal_name(request: Request) -> str:
    context = request.scope.get(SECURITY_CONTEXT_KEY)
    if context is None or context.authentication is None:
        return "-"
    return context.authentication.name


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assigns a request ID, times the request and logs one summary line."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        token = request_id_var.set(req_id)

        start = time.monotonic()
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        logger.info(
            "%s %s → %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "principal": _principal_name(request),
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Request-ID"] = req_id
        return response
