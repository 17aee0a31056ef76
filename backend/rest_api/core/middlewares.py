"""
HTTP middlewares for the FastAPI application.
Request logging and correlation IDs.
"""

import time

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from shared.config.logging import get_logger
from shared.infrastructure.correlation import CorrelationIdMiddleware

logger = get_logger("rest_api.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log one line per request: method, path, status and duration.

    Runs inside CorrelationIdMiddleware so the line carries the request ID.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)

        log_fn = logger.warning if response.status_code >= 500 else logger.info
        log_fn(
            "HTTP request",
            method=request.method,
            path=request.url.path,
            query=str(request.url.query) or None,
            status=response.status_code,
            duration_ms=duration_ms,
            client=request.client.host if request.client else None,
        )
        return response


def register_middlewares(app: FastAPI) -> None:
    """
    Register request middlewares on the FastAPI application.

    Order matters: middlewares are executed in reverse order of registration.
    CorrelationId runs first, then RequestLogging.
    """
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)
