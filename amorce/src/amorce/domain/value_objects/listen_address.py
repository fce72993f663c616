"""
ListenAddress value object - host/port pair a server binds to.
"""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class ListenAddress:
    """
    Host and port the HTTP listener binds to.

    Both parts are kept as strings exactly as read from the
    environment. Validation happens when the socket is bound.
    """

    host: str
    port: str

    DEFAULT_HOST: ClassVar[str] = "127.0.0.1"
    DEFAULT_PORT: ClassVar[str] = "8080"

    @property
    def endpoint(self) -> str:
        """Get the combined "host:port" endpoint string."""
        return f"{self.host}:{self.port}"

    def __str__(self) -> str:
        return self.endpoint
