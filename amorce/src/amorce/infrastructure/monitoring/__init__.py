"""
Monitoring infrastructure: logging and Prometheus metrics.
"""

from amorce.infrastructure.monitoring.logger import (
    get_logger,
    get_request_id,
    set_request_id,
    setup_logging,
)
from amorce.infrastructure.monitoring.metrics import (
    HttpMetrics,
    create_http_metrics,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "set_request_id",
    "get_request_id",
    "HttpMetrics",
    "create_http_metrics",
]
