"""Request logging middleware."""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("bubbling_audit.requests")

# Writes are the requests that can move audit timestamps.
WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with method, path, status and duration.

    Successful writes are logged at INFO, reads at DEBUG, failures at
    WARNING (4xx) or ERROR (5xx).
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - start) * 1000

        status = response.status_code
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"

        if status >= 500:
            log = logger.error
        elif status >= 400:
            log = logger.warning
        elif request.method in WRITE_METHODS:
            log = logger.info
        else:
            log = logger.debug
        log("%s %s → %d (%.0fms)", request.method, path, status, duration_ms)
        return response
