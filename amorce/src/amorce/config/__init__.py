"""
Configuration package.
"""

from amorce.config.resolver import ConfigResolver
from amorce.config.settings import (
    Settings,
    get_settings,
    load_config,
    load_env_file,
    override_settings,
    reset_settings,
)

__all__ = [
    "ConfigResolver",
    "Settings",
    "load_config",
    "load_env_file",
    "get_settings",
    "override_settings",
    "reset_settings",
]
