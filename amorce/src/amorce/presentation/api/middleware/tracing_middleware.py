"""
Request tracing middleware.

Logs each request and its outcome, and tags it with a request ID.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from amorce.infrastructure.monitoring.logger import (
    get_logger,
    get_request_id,
    set_request_id,
)

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class TracingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to trace requests.

    Log levels:
    - request started: INFO
    - response sent: INFO
    - failure (exception or 5xx): ERROR

    Adds X-Request-ID header to responses.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        method = request.method
        path = request.url.path

        logger.info(
            f"started processing request {method} {path}",
            extra={"method": method, "path": path},
        )
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            latency_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"request failed {method} {path} after {latency_ms:.0f} ms: {e}",
                extra={"method": method, "path": path, "latency_ms": round(latency_ms)},
            )
            raise

        latency_ms = (time.perf_counter() - start_time) * 1000
        fields = {
            "method": method,
            "path": path,
            "status": response.status_code,
            "latency_ms": round(latency_ms),
        }

        if response.status_code >= 500:
            logger.error(
                f"response failed {method} {path} "
                f"status={response.status_code} latency={latency_ms:.0f} ms",
                extra=fields,
            )
        else:
            logger.info(
                f"finished processing request {method} {path} "
                f"status={response.status_code} latency={latency_ms:.0f} ms",
                extra=fields,
            )

        response.headers[REQUEST_ID_HEADER] = get_request_id() or request_id
        return response
