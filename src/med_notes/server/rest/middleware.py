"""Request timing middleware."""

from __future__ import annotations

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Log every request with its duration; warn when it is too slow to type against."""

    def __init__(self, app: ASGIApp, slow_ms: float = 250.0) -> None:
        super().__init__(app)
        self._slow_ms = slow_ms

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        elapsed = (time.monotonic() - start) * 1000
        response.headers["X-Elapsed-Ms"] = f"{elapsed:.1f}"
        level = logging.WARNING if elapsed > self._slow_ms else logging.INFO
        logger.log(
            level,
            "%s %s → %d (%.1fms, session=%s)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
            request.headers.get("x-session-id", "default"),
        )
        return response
