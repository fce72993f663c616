"""
Domain layer.

Value objects and exceptions shared by configuration, infrastructure
and the startup sequence.
"""
