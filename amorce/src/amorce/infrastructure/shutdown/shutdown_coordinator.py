"""
Graceful shutdown coordinator.

Handles:
- Arming interrupt and termination-request listeners
- Racing them so the first one to fire wins
- Keeping every listener installed until the server has drained
- Handing a single shutdown awaitable to the server
"""

import asyncio
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Sequence

from amorce.infrastructure.monitoring.logger import get_logger
from amorce.infrastructure.shutdown.cancellation_sources import (
    CancellationSource,
    InterruptSource,
    ManualSource,
    termination_request_source,
)

logger = get_logger(__name__)


class ShutdownState(Enum):
    """Shutdown state enum."""

    IDLE = "idle"
    ARMED = "armed"
    FIRED = "fired"


def default_sources() -> List[CancellationSource]:
    """Interrupt first, then the platform termination-request source."""
    return [InterruptSource(), termination_request_source()]


class ShutdownCoordinator:
    """
    Resolves once, the first time any cancellation source fires.

    Lifecycle:
        IDLE --arm()--> ARMED --first source fires--> FIRED

    There is no way back to ARMED. The race result can be consumed by
    exactly one waiter. Handlers stay installed after firing, so a
    repeated signal during the drain lands on an already-set event and
    has no effect; release() removes them once the server has stopped.

    Example:
        coordinator = ShutdownCoordinator()
        coordinator.arm()
        try:
            await serve(server, sock, coordinator.wait())
        finally:
            coordinator.release()

    Attributes:
        state: Current shutdown state
        fired_by: Name of the source that won the race
        fired_at: Timestamp when the race was decided
    """

    def __init__(self, sources: Optional[Sequence[CancellationSource]] = None):
        """
        Initialize shutdown coordinator.

        Args:
            sources: Cancellation sources to race (default: SIGINT plus
                the platform termination-request source)
        """
        if sources is None:
            sources = default_sources()

        self._manual = ManualSource()
        self.sources: List[CancellationSource] = [*sources, self._manual]

        self.state = ShutdownState.IDLE
        self.fired_by: Optional[str] = None
        self.fired_at: Optional[datetime] = None
        self._consumed = False
        self._released = False

    def is_armed(self) -> bool:
        return self.state == ShutdownState.ARMED

    def is_fired(self) -> bool:
        return self.state == ShutdownState.FIRED

    def arm(self) -> None:
        """
        Install every cancellation source.

        Must be called from a running event loop. If any source fails
        to install, the ones already installed are released and the
        error propagates; no race is started.

        Raises:
            SignalHandlerInstallError: If a signal listener cannot be installed
            RuntimeError: If already armed
        """
        if self.state != ShutdownState.IDLE:
            raise RuntimeError("Shutdown coordinator already armed")

        loop = asyncio.get_running_loop()
        installed: List[CancellationSource] = []

        try:
            for source in self.sources:
                source.install(loop)
                installed.append(source)
        except BaseException:
            for source in reversed(installed):
                source.release()
            raise

        self.state = ShutdownState.ARMED
        logger.debug(
            "Shutdown coordinator armed: "
            + ", ".join(source.name for source in self.sources)
        )

    def trigger(self, reason: str = "manual") -> None:
        """
        Request shutdown from code.

        No effect once the coordinator has fired.

        Args:
            reason: Name reported as the winning source
        """
        if self.state == ShutdownState.FIRED:
            return
        self._manual.fire(reason)

    async def wait(self) -> str:
        """
        Wait for the first cancellation source to fire.

        Arms the coordinator if needed. Losing listeners are cancelled;
        every handler stays installed until release(). If the wait itself
        is cancelled, handlers are released before the error propagates.

        Returns:
            Name of the source that fired

        Raises:
            RuntimeError: If the result was already consumed
        """
        if self._consumed:
            raise RuntimeError("Shutdown signal already consumed")
        self._consumed = True

        if self.state == ShutdownState.IDLE:
            self.arm()

        tasks: Dict[asyncio.Task, CancellationSource] = {
            asyncio.ensure_future(source.wait()): source for source in self.sources
        }

        try:
            done, _ = await asyncio.wait(
                tasks.keys(), return_when=asyncio.FIRST_COMPLETED
            )
        except BaseException:
            await self._cancel_listeners(tasks)
            self.release()
            raise

        await self._cancel_listeners(tasks)

        winner = next(iter(done))
        winner.result()

        self.state = ShutdownState.FIRED
        self.fired_by = tasks[winner].name
        self.fired_at = datetime.now(timezone.utc)

        logger.info(
            f"Shutdown signal received ({self.fired_by})",
            extra={"fired_by": self.fired_by},
        )
        return self.fired_by

    @staticmethod
    async def _cancel_listeners(tasks: Dict[asyncio.Task, CancellationSource]) -> None:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def release(self) -> None:
        """
        Remove every signal handler the coordinator installed.

        Call once the server has finished draining. Safe to call more
        than once and before arm().
        """
        if self._released or self.state == ShutdownState.IDLE:
            return
        for source in self.sources:
            source.release()
        self._released = True
        logger.debug("Shutdown handlers released")

    def get_shutdown_info(self) -> dict:
        """
        Get shutdown status information.

        Returns:
            Dictionary with shutdown status details
        """
        return {
            "state": self.state.value,
            "fired_by": self.fired_by,
            "fired_at": self.fired_at.isoformat() if self.fired_at else None,
            "consumed": self._consumed,
            "released": self._released,
        }
