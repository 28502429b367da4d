"""
HTTP request logging middleware.

Assigns each HTTP request a correlation id (honouring an incoming
x-correlation-id header) and logs method, path, status and latency.
WebSocket traffic is not HTTP-scoped and passes straight through; the
realtime gateway assigns ids per operation instead.

Dependencies: fastapi, starlette, researchly.observability
System role: Request/response observability injection
"""

import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from researchly.observability.correlation import clear_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "x-correlation-id"
QUIET_PATH_PREFIXES = ("/api/v1/health",)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests with timing and echo the correlation id."""

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        started = time.perf_counter()
        path = request.url.path
        # Probes hit health endpoints constantly
        level = logging.DEBUG if path.startswith(QUIET_PATH_PREFIXES) else logging.INFO

        try:
            response: Response = await call_next(request)
        except Exception as e:
            logger.exception(
                f"{request.method} {path} - unhandled {type(e).__name__}",
                extra={
                    "method": request.method,
                    "path": path,
                    "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
            raise
        finally:
            clear_correlation_id()

        logger.log(
            level,
            f"{request.method} {path} - {response.status_code}",
            extra={
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
