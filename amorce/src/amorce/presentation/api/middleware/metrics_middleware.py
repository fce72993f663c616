"""
Prometheus metrics middleware for FastAPI.
"""

import time
from typing import Callable, Iterable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from amorce.infrastructure.monitoring.metrics import HttpMetrics


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware to collect HTTP metrics.

    Records:
    - Request count by method/endpoint/status
    - Request duration by method/endpoint/status
    - In-flight requests by method/endpoint
    - Error count by method/endpoint/type

    Requests to ignored paths (the scrape endpoint) are not recorded.
    """

    def __init__(
        self,
        app: ASGIApp,
        metrics: HttpMetrics,
        ignore_paths: Iterable[str] = ("/metrics",),
    ) -> None:
        super().__init__(app)
        self.metrics = metrics
        self.ignore_paths = frozenset(ignore_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request and collect metrics.

        Args:
            request: FastAPI request
            call_next: Next middleware/handler

        Returns:
            Response from handler
        """
        endpoint = request.url.path
        if endpoint in self.ignore_paths:
            return await call_next(request)

        method = request.method
        pending = self.metrics.requests_pending.labels(
            method=method, endpoint=endpoint
        )

        pending.inc()
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            self._observe(method, endpoint, "500", start_time)
            self.metrics.errors_total.labels(
                method=method,
                endpoint=endpoint,
                error_type=type(e).__name__,
            ).inc()
            raise
        finally:
            pending.dec()

        status = str(response.status_code)
        self._observe(method, endpoint, status, start_time)

        if response.status_code >= 400:
            error_type = "client_error" if response.status_code < 500 else "server_error"
            self.metrics.errors_total.labels(
                method=method,
                endpoint=endpoint,
                error_type=error_type,
            ).inc()

        return response

    def _observe(self, method: str, endpoint: str, status: str, start: float) -> None:
        duration = time.perf_counter() - start
        self.metrics.request_duration_seconds.labels(
            method=method, endpoint=endpoint, status=status
        ).observe(duration)
        self.metrics.requests_total.labels(
            method=method, endpoint=endpoint, status=status
        ).inc()
