"""
Amorce - HTTP service bootstrap

Resolves configuration from the environment, starts an HTTP listener
and shuts it down gracefully on SIGINT/SIGTERM.
"""

__version__ = "0.1.0"
