"""
Infrastructure layer.

Concrete implementations backed by external frameworks and libraries:
logging and metrics, PostgreSQL, uvicorn, and OS signal handling.
"""
