"""
ConfigOutcome - result of resolving the database configuration.

Either Resolved (a complete ConnectionDescriptor) or Unresolved (the
names of every missing variable). A partial descriptor never exists.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from amorce.domain.exceptions import MissingConfigurationError
from amorce.domain.value_objects.connection_descriptor import (
    ConnectionDescriptor,
)


@dataclass(frozen=True)
class Resolved:
    """All required variables were present."""

    descriptor: ConnectionDescriptor

    @property
    def is_resolved(self) -> bool:
        return True

    def unwrap(self) -> ConnectionDescriptor:
        """Return the resolved descriptor."""
        return self.descriptor


@dataclass(frozen=True)
class Unresolved:
    """One or more required variables were missing."""

    missing: Tuple[str, ...]

    @property
    def is_resolved(self) -> bool:
        return False

    def unwrap(self) -> ConnectionDescriptor:
        """
        Fail with the list of missing variables.

        Raises:
            MissingConfigurationError: Always
        """
        raise MissingConfigurationError(self.missing)


ConfigOutcome = Union[Resolved, Unresolved]
