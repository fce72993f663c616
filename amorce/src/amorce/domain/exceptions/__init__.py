"""
Domain exceptions package.
"""

from amorce.domain.exceptions.base import AmorceException
from amorce.domain.exceptions.startup import (
    DatabaseConnectionError,
    FatalInfrastructureError,
    ListenerBindError,
    MissingConfigurationError,
    ServerError,
    SignalHandlerInstallError,
    StartupAbortError,
)

__all__ = [
    "AmorceException",
    "StartupAbortError",
    "MissingConfigurationError",
    "DatabaseConnectionError",
    "FatalInfrastructureError",
    "ListenerBindError",
    "SignalHandlerInstallError",
    "ServerError",
]
