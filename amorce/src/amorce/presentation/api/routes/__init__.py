"""
API routes.
"""

from amorce.presentation.api.routes.health import router as health_router
from amorce.presentation.api.routes.metrics import router as metrics_router

__all__ = ["health_router", "metrics_router"]
