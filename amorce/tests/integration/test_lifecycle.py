"""
Integration tests for the full serve lifecycle.

Starts AmorceApp on a real local port with the database disabled,
issues HTTP requests, then stops it through the shutdown coordinator.

Usage:
    pytest amorce/tests/integration -m integration
"""

import asyncio
import os
import signal
import socket

import httpx
import pytest
from fastapi.responses import PlainTextResponse

from amorce import main as main_module
from amorce.config.settings import Settings
from amorce.infrastructure.shutdown import (
    PendingSource,
    ShutdownCoordinator,
    supports_termination_request,
)
from amorce.main import EXIT_OK, AmorceApp
from amorce.presentation.api import create_app

pytestmark = pytest.mark.integration


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def make_app(coordinator=None):
    port = free_port()
    app = AmorceApp(
        Settings(DATABASE_ENABLED=False, METRICS_ENABLED=True, SHUTDOWN_TIMEOUT=5),
        environ={"SERVER_HOST": "127.0.0.1", "SERVER_PORT": str(port)},
        coordinator=coordinator,
    )
    return app, f"http://127.0.0.1:{port}"


async def wait_healthy(base_url: str, run_task: asyncio.Task) -> httpx.Response:
    async with httpx.AsyncClient(base_url=base_url) as client:
        for _ in range(500):
            if run_task.done():
                raise AssertionError(f"server exited early: {run_task.result()}")
            try:
                return await client.get("/healthcheck")
            except httpx.TransportError:
                await asyncio.sleep(0.01)
    raise AssertionError("server never became healthy")


async def wait_refusing(base_url: str) -> None:
    for _ in range(500):
        try:
            async with httpx.AsyncClient(base_url=base_url) as client:
                await client.get("/healthcheck")
        except httpx.ConnectError:
            return
        except httpx.TransportError:
            pass
        await asyncio.sleep(0.01)
    raise AssertionError("listener still accepting connections")


class TestLifecycle:
    """End-to-end serve and shutdown."""

    @pytest.mark.asyncio
    async def test_serve_then_trigger(self):
        """Test requests are served and a trigger exits cleanly."""
        coordinator = ShutdownCoordinator([PendingSource("SIGTERM")])
        app, base_url = make_app(coordinator)

        run_task = asyncio.create_task(app.run())
        try:
            response = await wait_healthy(base_url, run_task)
            assert response.status_code == 200
            assert response.text == "ok"

            async with httpx.AsyncClient(base_url=base_url) as client:
                metrics = await client.get("/metrics")
            assert "app_http_requests_total" in metrics.text
        finally:
            coordinator.trigger("test")

        assert await asyncio.wait_for(run_task, timeout=10.0) == EXIT_OK
        assert coordinator.fired_by == "test"

    @pytest.mark.skipif(
        not supports_termination_request(),
        reason="requires POSIX signal handling in the event loop",
    )
    @pytest.mark.asyncio
    async def test_sigterm_stops_server(self):
        """Test SIGTERM drains the server and restores default handlers."""
        coordinator = ShutdownCoordinator()
        app, base_url = make_app(coordinator)

        run_task = asyncio.create_task(app.run())
        await wait_healthy(base_url, run_task)
        os.kill(os.getpid(), signal.SIGTERM)

        assert await asyncio.wait_for(run_task, timeout=10.0) == EXIT_OK
        assert coordinator.fired_by == "SIGTERM"
        assert signal.getsignal(signal.SIGTERM) == signal.SIG_DFL

        with pytest.raises(httpx.TransportError):
            async with httpx.AsyncClient(base_url=base_url) as client:
                await client.get("/healthcheck")

    @pytest.mark.skipif(
        not supports_termination_request(),
        reason="requires POSIX signal handling in the event loop",
    )
    @pytest.mark.asyncio
    async def test_repeated_sigterm_during_drain(self, monkeypatch):
        """Test a second SIGTERM neither kills the process nor drops requests."""
        started = asyncio.Event()

        def create_app_with_slow_route(settings):
            app = create_app(settings)

            @app.get("/slow", response_class=PlainTextResponse)
            async def slow() -> str:
                started.set()
                await asyncio.sleep(2.0)
                return "done"

            return app

        monkeypatch.setattr(main_module, "create_app", create_app_with_slow_route)
        coordinator = ShutdownCoordinator()
        app, base_url = make_app(coordinator)

        run_task = asyncio.create_task(app.run())
        await wait_healthy(base_url, run_task)

        async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:
            in_flight = asyncio.create_task(client.get("/slow"))
            await asyncio.wait_for(started.wait(), timeout=5.0)

            os.kill(os.getpid(), signal.SIGTERM)
            await asyncio.sleep(0.2)
            os.kill(os.getpid(), signal.SIGTERM)

            await wait_refusing(base_url)
            assert not in_flight.done()

            response = await in_flight

        assert response.status_code == 200
        assert response.text == "done"
        assert await asyncio.wait_for(run_task, timeout=10.0) == EXIT_OK
        assert coordinator.fired_by == "SIGTERM"
        assert signal.getsignal(signal.SIGTERM) == signal.SIG_DFL
