"""
FastAPI application factory.
"""

from typing import Optional

from fastapi import FastAPI

from amorce import __version__
from amorce.config.settings import Settings
from amorce.infrastructure.monitoring.logger import get_logger
from amorce.infrastructure.monitoring.metrics import HttpMetrics, create_http_metrics
from amorce.presentation.api.middleware import MetricsMiddleware, TracingMiddleware
from amorce.presentation.api.routes import health_router, metrics_router

logger = get_logger(__name__)


def create_app(
    settings: Settings,
    metrics: Optional[HttpMetrics] = None,
) -> FastAPI:
    """
    Application factory - creates and configures the FastAPI app.

    Args:
        settings: Application settings
        metrics: Optional collectors (created from settings if None)

    Returns:
        Configured FastAPI application
    """
    docs_enabled = settings.DOCS_ENABLED

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="HTTP service bootstrap",
        version=__version__,
        docs_url=settings.DOCS_URL if docs_enabled else None,
        openapi_url=settings.OPENAPI_URL if docs_enabled else None,
        redoc_url=None,
    )

    app.include_router(health_router)

    # Middleware chain: the last one added runs first
    app.add_middleware(TracingMiddleware)

    if settings.METRICS_ENABLED:
        if metrics is None:
            metrics = create_http_metrics(prefix=settings.METRICS_PREFIX)
        app.state.metrics = metrics
        app.include_router(metrics_router)
        app.add_middleware(MetricsMiddleware, metrics=metrics)

    logger.debug(
        f"Application created (metrics={settings.METRICS_ENABLED}, "
        f"docs={docs_enabled})"
    )
    return app
