"""
HTTP request logging middleware for Order Query Service.

Assigns each request a correlation ID (taken from ``X-Correlation-ID`` when
the caller sends one), stores it on ``request.state`` for the error handler,
echoes it in the response headers and logs request completion with timing.
"""

import time
import uuid
from typing import Awaitable, Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ...utils.logging import get_logger

logger = get_logger("request_logging")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = (
            request.headers.get("X-Correlation-ID")
            or request.headers.get("x-request-id")
            or str(uuid.uuid4())
        )
        request.state.correlation_id = correlation_id
        start_time = time.time()

        response = await call_next(request)

        duration_ms = round((time.time() - start_time) * 1000, 2)
        if response.status_code >= 500:
            log = logger.error
        elif response.status_code >= 400 or duration_ms > 5000:
            log = logger.warning
        else:
            log = logger.info

        log(
            "HTTP request completed",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "path": request.url.path,
                "query_params": dict(request.query_params),
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "event_type": "http_request_complete",
            },
        )

        response.headers["X-Correlation-ID"] = correlation_id
        return response


def setup_request_logging(app: FastAPI) -> None:
    app.add_middleware(RequestLoggingMiddleware)
