"""
Request logging and HTTP metrics middleware.

Every request gets a correlation id (taken from ``X-Correlation-ID`` or
generated), bound into the structlog context for the duration of the
request and echoed back on the response.
"""

import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from agriloop_shared.logging import bind_context, clear_context
from agriloop_shared.metrics import get_http_metrics

logger = structlog.get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def _endpoint_label(request: Request) -> str:
    # route template keeps label cardinality bounded (/api/waste/{listing_id})
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request logging and metrics."""

    def __init__(self, app, metrics_enabled: bool = True):
        super().__init__(app)
        self.metrics = get_http_metrics() if metrics_enabled else None

    async def dispatch(self, request: Request, call_next):
        """Process request and log details."""
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())

        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"

        clear_context()
        bind_context(correlation_id=correlation_id)

        if self.metrics:
            self.metrics.requests_in_progress.labels(method=method, endpoint=path).inc()

        start_time = time.perf_counter()

        logger.info(
            "request_started",
            method=method,
            path=path,
            client_ip=client_ip
        )

        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time

            if self.metrics:
                endpoint = _endpoint_label(request)
                self.metrics.requests_total.labels(
                    method=method,
                    endpoint=endpoint,
                    status=response.status_code
                ).inc()
                self.metrics.request_duration.labels(
                    method=method,
                    endpoint=endpoint
                ).observe(duration)

            logger.info(
                "request_completed",
                method=method,
                path=path,
                status_code=response.status_code,
                duration=f"{duration:.3f}s"
            )

            response.headers[CORRELATION_HEADER] = correlation_id
            return response

        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.error(
                "request_failed",
                method=method,
                path=path,
                error=str(e),
                duration=f"{duration:.3f}s",
                exc_info=True
            )
            raise

        finally:
            if self.metrics:
                self.metrics.requests_in_progress.labels(method=method, endpoint=path).dec()
            clear_context()
