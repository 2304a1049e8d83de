"""Request tracing middleware for the store API.

Every request gets a request id (taken from ``X-Request-ID`` or generated),
bound to the logging context for the lifetime of the request and echoed back
on the response. Start and finish are logged with status and duration; probe
paths are not logged.
"""

import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
QUIET_PATHS = frozenset({"/health"})


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds request id, method and path to log records and times the request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get(REQUEST_ID_HEADER),
            path=request.url.path,
            method=request.method,
        )
        quiet = request.url.path in QUIET_PATHS
        started = time.perf_counter()

        try:
            if not quiet:
                client = request.client.host if request.client else None
                logger.info(
                    "Request started",
                    extra={"extra_fields": {"client": client, "query": request.url.query or None}},
                )

            try:
                response = await call_next(request)
            except Exception:
                logger.exception(
                    "Request failed",
                    extra={"extra_fields": {"duration_ms": _elapsed_ms(started)}},
                )
                raise

            if not quiet:
                if response.status_code >= 500:
                    level = "error"
                elif response.status_code >= 400:
                    level = "warning"
                else:
                    level = "info"
                getattr(logger, level)(
                    "Request completed",
                    extra={"extra_fields": {
                        "status_code": response.status_code,
                        "duration_ms": _elapsed_ms(started),
                    }},
                )

            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_request_context()


def add_observability_middleware(app: FastAPI) -> None:
    """Configure logging and install the request context middleware."""
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
    logger.info("Request tracing enabled")
