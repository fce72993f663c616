"""
HTTP API: application factory, routes and middleware.
"""

from amorce.presentation.api.app import create_app

__all__ = ["create_app"]
