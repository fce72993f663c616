"""
Amorce - HTTP service bootstrap

Startup sequence:
    logging -> .env -> listen address -> database -> router
    -> listener -> shutdown coordinator -> serve -> drain

Every startup failure is logged and turned into a non-zero exit code
before any listener is left open.
"""

import asyncio
import socket
import sys
from typing import Mapping, Optional

from fastapi import FastAPI
from pydantic import ValidationError

from amorce.config import ConfigResolver, Settings, load_config, load_env_file
from amorce.domain.exceptions import (
    DatabaseConnectionError,
    ListenerBindError,
    MissingConfigurationError,
    SignalHandlerInstallError,
)
from amorce.domain.value_objects import ListenAddress
from amorce.infrastructure.monitoring import get_logger, setup_logging
from amorce.infrastructure.persistence import Database
from amorce.infrastructure.server import bind_listener, create_server, serve
from amorce.infrastructure.shutdown import ShutdownCoordinator
from amorce.presentation.api import create_app

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


class AmorceApp:
    """
    Amorce application orchestrator.

    Responsibilities:
        - Resolve listen address and database credentials
        - Connect to the database (if enabled)
        - Build the FastAPI application
        - Bind the listener and arm the shutdown coordinator
        - Serve until shutdown, then drain and release resources
    """

    def __init__(
        self,
        settings: Settings,
        environ: Optional[Mapping[str, str]] = None,
        coordinator: Optional[ShutdownCoordinator] = None,
    ):
        """
        Initialize Amorce application.

        Args:
            settings: Application settings
            environ: Environment lookup for ConfigResolver (default: os.environ)
            coordinator: Shutdown coordinator (default: SIGINT + SIGTERM)
        """
        self.settings = settings
        self.resolver = ConfigResolver(environ)
        self.coordinator = coordinator

        self.listen_address: Optional[ListenAddress] = None
        self.database: Optional[Database] = None
        self.app: Optional[FastAPI] = None

    async def _connect_database(self) -> Database:
        """
        Resolve credentials and open the database.

        Raises:
            MissingConfigurationError: If a required variable is missing
            DatabaseConnectionError: If the database cannot be reached
        """
        descriptor = self.resolver.resolve_connection_descriptor().unwrap()

        database = Database(
            descriptor.connection_string,
            echo=self.settings.DATABASE_ECHO,
        )
        await database.connect()
        return database

    async def _startup(self) -> socket.socket:
        """
        Run every step that can abort startup, ending with the bind.

        Returns:
            Bound listening socket
        """
        self.listen_address = self.resolver.resolve_listen_address()

        if self.settings.DATABASE_ENABLED:
            self.database = await self._connect_database()

        self.app = create_app(self.settings)
        if self.database is not None:
            self.app.state.database = self.database

        return bind_listener(self.listen_address.endpoint)

    async def _release(self) -> None:
        if self.database is not None:
            await self.database.disconnect()
            self.database = None

    async def run(self) -> int:
        """
        Run the full lifecycle.

        Returns:
            Process exit code
        """
        try:
            sock = await self._startup()
        except MissingConfigurationError as e:
            logger.error(f"error setting up connection string: {e}")
            await self._release()
            return EXIT_FAILURE
        except DatabaseConnectionError as e:
            logger.error(str(e))
            await self._release()
            return EXIT_FAILURE
        except ListenerBindError as e:
            logger.critical(str(e), extra={"endpoint": e.endpoint})
            await self._release()
            return EXIT_FAILURE

        coordinator = self.coordinator or ShutdownCoordinator()

        try:
            coordinator.arm()
        except SignalHandlerInstallError as e:
            logger.critical(str(e))
            sock.close()
            await self._release()
            return EXIT_FAILURE

        server = create_server(self.app, shutdown_timeout=self.settings.SHUTDOWN_TIMEOUT)

        endpoint = self.listen_address.endpoint
        logger.info(f"Starting server on {endpoint}", extra={"endpoint": endpoint})
        try:
            await serve(server, sock, coordinator.wait())
        except Exception as e:
            logger.error(f"Server shutdown error: {e}", extra={"endpoint": endpoint})
            return EXIT_FAILURE
        finally:
            # Signal handlers outlive the drain; repeated signals are no-ops.
            coordinator.release()
            sock.close()
            await self._release()

        logger.info("Server shutdown successfully")
        return EXIT_OK

    def start(self) -> int:
        """
        Start Amorce.

        Blocks until the server is stopped.

        Returns:
            Process exit code
        """
        return asyncio.run(self.run())


def main() -> None:
    """
    Main entry point for Amorce.

    Loads configuration and starts the server.
    """
    env_loaded = load_env_file()

    try:
        settings = load_config()
    except ValidationError as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        sys.exit(EXIT_FAILURE)

    setup_logging(level=settings.LOG_LEVEL, json_logs=settings.use_json_logs)

    if not env_loaded:
        logger.warning("Failed to load .env file: file not found")

    app = AmorceApp(settings)

    try:
        code = app.start()
    except KeyboardInterrupt:
        # Ctrl+C before the coordinator is armed (e.g. a slow database
        # connect). Once armed, interrupts only request a graceful stop.
        logger.warning("Interrupted during startup, exiting immediately")
        code = EXIT_INTERRUPTED

    sys.exit(code)


if __name__ == "__main__":
    main()
