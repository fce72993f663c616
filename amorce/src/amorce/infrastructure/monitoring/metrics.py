"""
Prometheus metrics collection.

Collectors are created per registry so tests and embedding code can
build several applications in one process.
"""

from dataclasses import dataclass

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    PlatformCollector,
    ProcessCollector,
)

DEFAULT_PREFIX = "app"

DURATION_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


@dataclass(frozen=True)
class HttpMetrics:
    """HTTP collectors bound to one registry."""

    registry: CollectorRegistry
    requests_total: Counter
    request_duration_seconds: Histogram
    requests_pending: Gauge
    errors_total: Counter


def create_http_metrics(
    prefix: str = DEFAULT_PREFIX,
    registry: CollectorRegistry | None = None,
) -> HttpMetrics:
    """
    Create HTTP collectors plus default process metrics.

    Args:
        prefix: Metric name prefix
        registry: Target registry (a fresh one if None)

    Returns:
        HttpMetrics bundle
    """
    if registry is None:
        registry = CollectorRegistry()
        ProcessCollector(registry=registry)
        PlatformCollector(registry=registry)

    return HttpMetrics(
        registry=registry,
        requests_total=Counter(
            f"{prefix}_http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status"],
            registry=registry,
        ),
        request_duration_seconds=Histogram(
            f"{prefix}_http_requests_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint", "status"],
            buckets=DURATION_BUCKETS,
            registry=registry,
        ),
        requests_pending=Gauge(
            f"{prefix}_http_requests_pending",
            "HTTP requests currently in flight",
            ["method", "endpoint"],
            registry=registry,
        ),
        errors_total=Counter(
            f"{prefix}_http_errors_total",
            "Total HTTP errors",
            ["method", "endpoint", "error_type"],
            registry=registry,
        ),
    )
