"""
Startup and serving exceptions.

Families:
- startup-abort: configuration or database problems detected before
  any listener is bound
- fatal-infrastructure: the runtime environment cannot host the server
- server errors: serving stopped without a shutdown request
"""

from typing import Iterable

from amorce.domain.exceptions.base import AmorceException


class StartupAbortError(AmorceException):
    """Base for conditions that abort startup before binding."""

    pass


class MissingConfigurationError(StartupAbortError):
    """Raised when required environment variables are not present."""

    def __init__(self, missing: Iterable[str]):
        """
        Initialize MissingConfigurationError.

        Args:
            missing: Names of the variables that were not present
        """
        self.missing = tuple(missing)
        message = "environment variable not present: " + ", ".join(self.missing)
        super().__init__(message, code="MISSING_CONFIGURATION")


class DatabaseConnectionError(StartupAbortError):
    """Raised when the database cannot be reached."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            f"not able to connect to database: {reason}",
            code="DATABASE_CONNECTION",
        )


class FatalInfrastructureError(AmorceException):
    """Base for unusable runtime environment conditions."""

    pass


class ListenerBindError(FatalInfrastructureError):
    """Raised when the listen address cannot be bound."""

    def __init__(self, endpoint: str, reason: str):
        """
        Initialize ListenerBindError.

        Args:
            endpoint: The "host:port" endpoint that failed to bind
            reason: Underlying error text
        """
        self.endpoint = endpoint
        self.reason = reason
        super().__init__(
            f"Error binding on {endpoint}: {reason}",
            code="LISTENER_BIND",
        )


class SignalHandlerInstallError(FatalInfrastructureError):
    """Raised when a required signal handler cannot be installed."""

    def __init__(self, signal_name: str, reason: str):
        self.signal_name = signal_name
        self.reason = reason
        super().__init__(
            f"Error installing {signal_name} handler: {reason}",
            code="SIGNAL_HANDLER_INSTALL",
        )


class ServerError(AmorceException):
    """Raised when the HTTP server stops for any reason but shutdown."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Server error: {reason}", code="SERVER_ERROR")
