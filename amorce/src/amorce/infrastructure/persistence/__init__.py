"""
Persistence infrastructure.
"""

from amorce.infrastructure.persistence.database import Database, to_driver_url

__all__ = ["Database", "to_driver_url"]
