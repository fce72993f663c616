"""
API middleware.
"""

from amorce.presentation.api.middleware.metrics_middleware import (
    MetricsMiddleware,
)
from amorce.presentation.api.middleware.tracing_middleware import (
    TracingMiddleware,
)

__all__ = ["MetricsMiddleware", "TracingMiddleware"]
