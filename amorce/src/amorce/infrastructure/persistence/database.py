"""
Database connection and session management.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from amorce.domain.exceptions import DatabaseConnectionError
from amorce.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)

DRIVER_SCHEME = "postgresql+asyncpg"
POSTGRES_SCHEMES = ("postgres", "postgresql")


def to_driver_url(connection_string: str) -> str:
    """
    Map a postgres:// connection string onto the asyncpg driver URL.

    Other schemes are returned unchanged.
    """
    scheme, sep, rest = connection_string.partition("://")
    if sep and scheme in POSTGRES_SCHEMES:
        return f"{DRIVER_SCHEME}://{rest}"
    return connection_string


class Database:
    """
    Async database connection manager using SQLAlchemy.

    Provides session factory and connection pooling.
    """

    def __init__(
        self,
        connection_string: str,
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
        connect_timeout: float = 10.0,
        application_name: str = "amorce",
    ):
        """
        Initialize database connection.

        Args:
            connection_string: PostgreSQL connection URI
            echo: Enable SQL query logging
            pool_size: Number of connections to maintain in pool
            max_overflow: Max connections beyond pool_size
            connect_timeout: Seconds to wait when opening a connection
            application_name: Name reported to the server
        """
        self.database_url = to_driver_url(connection_string)
        self.echo = echo
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.connect_timeout = connect_timeout
        self.application_name = application_name
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker | None = None

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    async def connect(self) -> None:
        """
        Create the engine and check that the server answers.

        Raises:
            DatabaseConnectionError: If the URL is invalid or the server
                cannot be reached
        """
        if self._engine is not None:
            return

        engine: AsyncEngine | None = None
        try:
            engine = create_async_engine(
                self.database_url,
                echo=self.echo,
                pool_size=self.pool_size,
                max_overflow=self.max_overflow,
                pool_pre_ping=True,
                connect_args={
                    "timeout": self.connect_timeout,
                    "server_settings": {
                        "application_name": self.application_name,
                    },
                },
            )
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            if engine is not None:
                await engine.dispose()
            raise DatabaseConnectionError(str(e)) from e

        self._engine = engine
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Database connection established")

    async def disconnect(self) -> None:
        """Close database connection and cleanup resources."""
        if self._engine is None:
            return

        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database connection closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide async database session context manager.

        Automatically commits on success, rolls back on exception.

        Usage:
            async with database.session() as session:
                result = await session.execute(query)

        Yields:
            AsyncSession: Database session with transaction management
        """
        if self._session_factory is None:
            raise RuntimeError("Database not connected. Call connect() first.")

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
