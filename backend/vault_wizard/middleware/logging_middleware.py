"""Request logging middleware."""

import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..utils.logging import log_performance

REQUEST_ID_HEADER = "X-Request-ID"
QUIET_PATHS = frozenset({"/health"})


class LoggingMiddleware(BaseHTTPMiddleware):
    """Binds a request ID into the log context and logs each request once.

    Only the path is logged. Query strings and bodies may carry Vault
    credentials.
    """

    def __init__(self, app, logger_name: str = "http"):
        super().__init__(app)
        self.logger = structlog.get_logger(logger_name)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception as e:
                self.logger.error(
                    "Request failed",
                    error_type=type(e).__name__,
                    duration_seconds=round(time.perf_counter() - start, 4),
                    exc_info=e
                )
                raise

            duration = time.perf_counter() - start
            if request.url.path not in QUIET_PATHS:
                log = self.logger.warning if response.status_code >= 400 else self.logger.info
                log("Request handled", status_code=response.status_code, duration_seconds=round(duration, 4))
                log_performance("http_request", duration, status_code=response.status_code)

            response.headers[REQUEST_ID_HEADER] = request_id
            response.headers["X-Process-Time"] = f"{duration:.4f}"
            return response
        finally:
            structlog.contextvars.clear_contextvars()
