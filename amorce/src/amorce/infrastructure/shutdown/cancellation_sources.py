"""
Cancellation sources for the shutdown coordinator.

A cancellation source is anything that can tell the process to stop
accepting work:
- InterruptSource: SIGINT (Ctrl+C)
- TerminationRequestSource: SIGTERM (Docker/K8s stop), POSIX only
- PendingSource: never fires; stands in for a missing OS primitive
- ManualSource: fired from code

Sources are installed once, awaited once, and released once.
"""

import asyncio
import os
import signal
from abc import ABC, abstractmethod
from typing import Any, Optional

from amorce.domain.exceptions import SignalHandlerInstallError
from amorce.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)


class CancellationSource(ABC):
    """Something the shutdown coordinator can wait on."""

    name: str = "unknown"

    @abstractmethod
    def install(self, loop: asyncio.AbstractEventLoop) -> None:
        """Register with the OS or loop. Called once, before wait()."""

    @abstractmethod
    async def wait(self) -> None:
        """Suspend until the source fires."""

    @abstractmethod
    def release(self) -> None:
        """Drop any registration. Safe to call more than once."""


class SignalSource(CancellationSource):
    """
    Fires when the process receives a given signal.

    Uses loop.add_signal_handler, so the handler runs inside the event
    loop and the event can be set directly.
    """

    def __init__(self, signum: int):
        """
        Initialize signal source.

        Args:
            signum: Signal number to listen for
        """
        self.signum = signum
        self.name = signal.Signals(signum).name
        self._event = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def install(self, loop: asyncio.AbstractEventLoop) -> None:
        try:
            loop.add_signal_handler(self.signum, self._event.set)
        except (NotImplementedError, RuntimeError, ValueError, OSError) as e:
            raise SignalHandlerInstallError(self.name, str(e)) from e
        self._loop = loop

    async def wait(self) -> None:
        await self._event.wait()

    def release(self) -> None:
        if self._loop is None:
            return
        if not self._loop.is_closed():
            self._loop.remove_signal_handler(self.signum)
        self._loop = None


class InterruptSource(SignalSource):
    """
    Fires on SIGINT.

    Falls back to signal.signal where the loop cannot install signal
    handlers itself (Windows). If both fail, the coordinator cannot
    guarantee a graceful shutdown and installation raises.
    """

    def __init__(self) -> None:
        super().__init__(signal.SIGINT)
        self._previous_handler: Any = None
        self._fallback_installed = False

    def install(self, loop: asyncio.AbstractEventLoop) -> None:
        try:
            super().install(loop)
            return
        except SignalHandlerInstallError as e:
            if not isinstance(e.__cause__, NotImplementedError):
                raise

        def _handle_signal(signum: int, frame: Any) -> None:
            loop.call_soon_threadsafe(self._event.set)

        try:
            self._previous_handler = signal.signal(self.signum, _handle_signal)
        except (ValueError, OSError) as e:
            raise SignalHandlerInstallError(self.name, str(e)) from e
        self._fallback_installed = True

    def release(self) -> None:
        if self._fallback_installed:
            signal.signal(self.signum, self._previous_handler)
            self._fallback_installed = False
            return
        super().release()


class TerminationRequestSource(SignalSource):
    """Fires on SIGTERM."""

    def __init__(self) -> None:
        super().__init__(signal.SIGTERM)


class PendingSource(CancellationSource):
    """Never fires. Used where the platform has no matching primitive."""

    def __init__(self, name: str = "pending"):
        self.name = name

    def install(self, loop: asyncio.AbstractEventLoop) -> None:
        pass

    async def wait(self) -> None:
        await asyncio.get_running_loop().create_future()

    def release(self) -> None:
        pass


class ManualSource(CancellationSource):
    """Fires when fire() is called."""

    def __init__(self, name: str = "manual"):
        self.name = name
        self._event = asyncio.Event()

    def fire(self, reason: Optional[str] = None) -> None:
        """
        Fire the source.

        Args:
            reason: Optional name reported instead of the source name
        """
        if self._event.is_set():
            return
        if reason:
            self.name = reason
        self._event.set()

    @property
    def fired(self) -> bool:
        return self._event.is_set()

    def install(self, loop: asyncio.AbstractEventLoop) -> None:
        pass

    async def wait(self) -> None:
        await self._event.wait()

    def release(self) -> None:
        pass


def supports_termination_request() -> bool:
    """Check whether the event loop can listen for SIGTERM."""
    return os.name == "posix" and hasattr(signal, "SIGTERM")


def termination_request_source() -> CancellationSource:
    """
    Create the termination-request source for this platform.

    Returns:
        TerminationRequestSource on POSIX, a PendingSource elsewhere
    """
    if supports_termination_request():
        return TerminationRequestSource()

    logger.debug("SIGTERM not supported on this platform, using interrupt only")
    return PendingSource("SIGTERM")
