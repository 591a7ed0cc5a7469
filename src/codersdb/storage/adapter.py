"""SQL implementation of the storage backend.

This module maps the ``StorageBackend`` protocol onto the ``json`` table via
SQLAlchemy's async engine. Each method opens its own session, so every call
commits on its own.
"""

import asyncio
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from codersdb.observability.logging import get_logger
from codersdb.storage.database import Database, DatabaseConfig
from codersdb.storage.models import JsonEntryModel

logger = get_logger(__name__)


class SQLStorageAdapter:
    """Storage backend over an embedded SQLite table.

    The schema is created lazily before the first statement. Enumeration
    uses a plain ``SELECT`` without ``ORDER BY``, so row order is whatever
    SQLite returns.

    Example:
        >>> adapter = SQLStorageAdapter.from_url("sqlite+aiosqlite:///./db.sqlite")
        >>> await adapter.put("user1", '{"name": "Ada"}')
        >>> await adapter.get("user1")
        '{"name": "Ada"}'
    """

    def __init__(self, database: Database):
        """Initialize adapter with a database.

        Args:
            database: Database owning the engine and sessions
        """
        self.database = database
        self._schema_ready = False
        self._schema_lock = asyncio.Lock()
        self._closed = False

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> "SQLStorageAdapter":
        """Build an adapter from a SQLAlchemy async URL.

        Args:
            url: Database URL (e.g. ``sqlite+aiosqlite:///./db.sqlite``)
            echo: Whether to log SQL statements

        Returns:
            New adapter owning a fresh engine
        """
        return cls(Database(DatabaseConfig(url=url, echo=echo)))

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def ensure_schema(self) -> None:
        """Create the ``json`` table if it does not exist yet."""
        if self._schema_ready:
            return
        async with self._schema_lock:
            if not self._schema_ready:
                await self.database.create_tables()
                self._schema_ready = True
                logger.debug("schema_ready", url=self.database.config.url)

    async def get(self, entry_id: str) -> Optional[str]:
        await self.ensure_schema()
        async with self.database.session() as session:
            stmt = select(JsonEntryModel.json).where(JsonEntryModel.id == entry_id)
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def put(self, entry_id: str, raw: str) -> None:
        await self.ensure_schema()
        stmt = sqlite_insert(JsonEntryModel).values(id=entry_id, json=raw)
        stmt = stmt.on_conflict_do_update(
            index_elements=["ID"],
            set_={"json": stmt.excluded.json},
        )
        async with self.database.session() as session:
            await session.execute(stmt)

    async def delete(self, entry_id: str) -> None:
        await self.ensure_schema()
        async with self.database.session() as session:
            await session.execute(delete(JsonEntryModel).where(JsonEntryModel.id == entry_id))

    async def scan_all(self) -> list[tuple[str, str]]:
        await self.ensure_schema()
        async with self.database.session() as session:
            stmt = select(JsonEntryModel.id, JsonEntryModel.json).where(
                JsonEntryModel.id.is_not(None)
            )
            result = await session.execute(stmt)
            return [(entry_id, raw) for entry_id, raw in result.all()]

    async def clear(self) -> None:
        await self.ensure_schema()
        async with self.database.session() as session:
            await session.execute(delete(JsonEntryModel))

    async def close(self) -> None:
        """Dispose the engine. A second call only logs a warning."""
        if self._closed:
            logger.warning("adapter_already_closed", url=self.database.config.url)
            return
        self._closed = True
        await self.database.close()
