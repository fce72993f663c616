"""
Graceful shutdown coordination.
"""

from amorce.infrastructure.shutdown.cancellation_sources import (
    CancellationSource,
    InterruptSource,
    ManualSource,
    PendingSource,
    SignalSource,
    TerminationRequestSource,
    supports_termination_request,
    termination_request_source,
)
from amorce.infrastructure.shutdown.shutdown_coordinator import (
    ShutdownCoordinator,
    ShutdownState,
    default_sources,
)

__all__ = [
    "CancellationSource",
    "SignalSource",
    "InterruptSource",
    "TerminationRequestSource",
    "PendingSource",
    "ManualSource",
    "supports_termination_request",
    "termination_request_source",
    "ShutdownCoordinator",
    "ShutdownState",
    "default_sources",
]
