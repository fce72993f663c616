"""
Environment-driven configuration resolution.

Turns environment variables into typed configuration without ever
aborting the process: fallbacks are logged and substituted, missing
required values are reported as a value the caller must check.
"""

import os
from typing import List, Mapping, Optional

from amorce.domain.value_objects import (
    ConfigOutcome,
    ConnectionDescriptor,
    ListenAddress,
    Resolved,
    Unresolved,
)
from amorce.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)

SERVER_HOST = "SERVER_HOST"
SERVER_PORT = "SERVER_PORT"

POSTGRES_DB = "POSTGRES_DB"
POSTGRES_USER = "POSTGRES_USER"
POSTGRES_PASSWORD = "POSTGRES_PASSWORD"
DB_HOST = "DB_HOST"

DATABASE_VARIABLES = (POSTGRES_DB, POSTGRES_USER, POSTGRES_PASSWORD, DB_HOST)


class ConfigResolver:
    """
    Resolves listen address and database credentials from an environment.

    The environment is any string mapping and defaults to os.environ.
    It is read on every call; nothing is cached, so a variable changed
    between two calls is seen by the second one.

    Example:
        resolver = ConfigResolver({"SERVER_PORT": "9090"})
        resolver.resolve_listen_address().endpoint  # "127.0.0.1:9090"
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """
        Initialize resolver.

        Args:
            environ: Environment lookup (default: os.environ)
        """
        self.environ = os.environ if environ is None else environ

    def _read(self, name: str) -> Optional[str]:
        """
        Read one variable.

        Returns None when the variable is absent or unreadable. A value
        is unreadable when it does not encode as UTF-8, which is how
        undecodable bytes from the OS show up in os.environ.
        """
        value = self.environ.get(name)
        if value is None:
            return None
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            return None
        return value

    def _read_or_default(self, name: str, default: str) -> str:
        value = self._read(name)
        if value is None:
            logger.warning(
                f"{name} is not set or unreadable, using fallback {default}"
            )
            return default
        return value

    def resolve_listen_address(self) -> ListenAddress:
        """
        Resolve the listen address from SERVER_HOST and SERVER_PORT.

        Never raises. Each missing variable falls back independently.

        Returns:
            ListenAddress (endpoint "host:port")
        """
        host = self._read_or_default(SERVER_HOST, ListenAddress.DEFAULT_HOST)
        port = self._read_or_default(SERVER_PORT, ListenAddress.DEFAULT_PORT)
        return ListenAddress(host=host, port=port)

    def resolve_connection_descriptor(self) -> ConfigOutcome:
        """
        Resolve database credentials.

        Checks every required variable before deciding, so the outcome
        lists all missing names, not just the first one.

        Returns:
            Resolved(descriptor) or Unresolved(missing names)
        """
        values = {}
        missing: List[str] = []

        for name in DATABASE_VARIABLES:
            value = self._read(name)
            if value is None:
                logger.info(f"Environment variable {name} is not present")
                missing.append(name)
            else:
                values[name] = value

        if missing:
            return Unresolved(missing=tuple(missing))

        return Resolved(
            ConnectionDescriptor(
                db_name=values[POSTGRES_DB],
                db_user=values[POSTGRES_USER],
                db_password=values[POSTGRES_PASSWORD],
                db_host=values[DB_HOST],
            )
        )
