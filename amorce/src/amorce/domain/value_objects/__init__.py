"""
Domain value objects.
"""

from amorce.domain.value_objects.config_outcome import (
    ConfigOutcome,
    Resolved,
    Unresolved,
)
from amorce.domain.value_objects.connection_descriptor import (
    ConnectionDescriptor,
)
from amorce.domain.value_objects.listen_address import ListenAddress

__all__ = [
    "ListenAddress",
    "ConnectionDescriptor",
    "ConfigOutcome",
    "Resolved",
    "Unresolved",
]
