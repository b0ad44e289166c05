"""
Request middleware — correlation IDs and per-request timing.

Every request gets an X-Request-ID (echoed from the client when supplied)
and an X-Process-Time header. The request id is pushed into the logging
context so engine log lines emitted while building a climatology carry it.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from backend.app.core.logging_config import set_request_context

logger = logging.getLogger(__name__)

_QUIET_PREFIXES = ("/docs", "/redoc", "/openapi", "/favicon", "/health")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Attach a correlation id and log method, path, status and duration."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:16]
        path = request.url.path
        request_bytes = int(request.headers.get("content-length") or 0)

        set_request_context(request_id=request_id, endpoint=path, method=request.method)
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            logger.exception(
                "%s %s failed after %.1fms", request.method, path, elapsed,
                extra={"duration_ms": elapsed, "status_code": 500},
            )
            raise

        elapsed = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.1f}ms"

        if not path.startswith(_QUIET_PREFIXES):
            level = logging.WARNING if response.status_code >= 400 else logging.INFO
            logger.log(
                level,
                "%s %s → %d (%.1fms, %d bytes in)",
                request.method, path, response.status_code, elapsed, request_bytes,
                extra={
                    "duration_ms": elapsed,
                    "status_code": response.status_code,
                    "endpoint": path,
                    "request_bytes": request_bytes,
                },
            )

        set_request_context()
        return response
