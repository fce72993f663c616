"""
HTTP server glue.

Binds the listen socket up front, then runs uvicorn on it until a
shutdown awaitable resolves. uvicorn's own signal capture is disabled:
the ShutdownCoordinator is the only thing that decides when to stop.
"""

import asyncio
import contextlib
import socket
from typing import Any, Awaitable, Generator, Optional, Tuple

import uvicorn

from amorce.domain.exceptions import ListenerBindError, ServerError
from amorce.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)

LISTEN_BACKLOG = 2048


def parse_endpoint(endpoint: str) -> Tuple[str, int]:
    """
    Split a "host:port" endpoint.

    IPv6 hosts may be written in brackets ("[::1]:8080").

    Raises:
        ValueError: If the port part is missing or not a valid port
    """
    host, sep, port = endpoint.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address {endpoint!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    port_number = int(port)
    if not 0 <= port_number <= 65535:
        raise ValueError(f"invalid port {port!r}")

    return host, port_number


def bind_listener(endpoint: str) -> socket.socket:
    """
    Bind a TCP listening socket.

    Args:
        endpoint: "host:port" string

    Returns:
        Bound, listening socket

    Raises:
        ListenerBindError: If the endpoint is malformed or cannot be bound
    """
    try:
        host, port = parse_endpoint(endpoint)
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.create_server(
            (host, port), family=family, backlog=LISTEN_BACKLOG
        )
    except (OSError, ValueError) as e:
        logger.error(f"Error binding on {endpoint}: {e}", extra={"endpoint": endpoint})
        raise ListenerBindError(endpoint, str(e)) from e

    return sock


class CoordinatedServer(uvicorn.Server):
    """uvicorn server that never installs signal handlers."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self) -> Generator[None, None, None]:
        yield


def create_server(
    app: Any,
    shutdown_timeout: Optional[int] = None,
) -> CoordinatedServer:
    """
    Create a uvicorn server for an ASGI app.

    Args:
        app: ASGI application
        shutdown_timeout: Seconds to wait for in-flight requests when
            stopping (None = wait for all of them)

    Returns:
        CoordinatedServer instance
    """
    config = uvicorn.Config(
        app,
        log_config=None,
        timeout_graceful_shutdown=shutdown_timeout,
    )
    return CoordinatedServer(config)


async def serve(
    server: uvicorn.Server,
    sock: socket.socket,
    shutdown: Awaitable[Any],
) -> None:
    """
    Serve on a bound socket until shutdown resolves.

    When shutdown resolves the server stops accepting connections and
    finishes in-flight requests before this returns.

    Args:
        server: uvicorn server
        sock: Bound listening socket
        shutdown: Awaitable that resolves when the server must stop

    Raises:
        ServerError: If the server stops before shutdown was requested
    """
    serve_task = asyncio.ensure_future(server.serve(sockets=[sock]))
    shutdown_task = asyncio.ensure_future(shutdown)

    try:
        done, _ = await asyncio.wait(
            {serve_task, shutdown_task}, return_when=asyncio.FIRST_COMPLETED
        )

        if shutdown_task in done:
            shutdown_task.result()
            logger.info("Draining in-flight requests")
            server.should_exit = True
            await serve_task
            return

        serve_task.result()
        raise ServerError("server stopped before shutdown was requested")

    finally:
        for task in (shutdown_task, serve_task):
            if not task.done():
                task.cancel()
        await asyncio.gather(shutdown_task, serve_task, return_exceptions=True)
