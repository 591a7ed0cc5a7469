"""Database configuration and session management.

This module provides the SQLAlchemy async engine and session lifecycle used
by the SQL storage adapter.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from codersdb.storage.base_model import Base


class DatabaseConfig:
    """Database configuration.

    Attributes:
        url: Async database connection URL
        echo: Whether to log SQL statements (default: False)
    """

    def __init__(
        self,
        url: str = "sqlite+aiosqlite:///./db.sqlite",
        echo: bool = False,
    ):
        self.url = url
        self.echo = echo


class Database:
    """Database connection and session manager.

    Each call to ``session()`` is an independent unit of work that commits
    on success and rolls back on error.

    Example:
        >>> db = Database(DatabaseConfig(url="sqlite+aiosqlite:///./test.db"))
        >>> await db.create_tables()
        >>> async with db.session() as session:
        ...     await session.execute(select(JsonEntryModel))
    """

    def __init__(self, config: DatabaseConfig):
        """Initialize database with configuration.

        Args:
            config: Database configuration
        """
        self.config = config
        self.engine = create_async_engine(config.url, echo=config.echo)
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def create_tables(self) -> None:
        """Create all tables defined in ORM models (no-op for existing tables)."""
        # Imported for side effects: registers JsonEntryModel on Base.metadata
        from codersdb.storage import models as _  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Create a new database session.

        Yields:
            Async database session
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self) -> None:
        """Close database engine and connections."""
        await self.engine.dispose()
