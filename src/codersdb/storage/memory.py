"""In-memory implementation of the storage backend.

This module provides a dictionary-based backend, suitable for development
and testing. It mirrors the SQL adapter's contract, including the
insertion-ordered enumeration a fresh SQLite table usually shows.
"""

import asyncio
from typing import Optional


class InMemoryStorageAdapter:
    """In-memory implementation of StorageBackend.

    Uses a dictionary for storage with an asyncio lock per call. The lock
    guards single calls only; nothing spans a read and a later write.

    Attributes:
        _rows: Dictionary mapping entry ID to raw JSON text
        _lock: Asyncio lock for individual operations
    """

    def __init__(self) -> None:
        """Initialize the in-memory backend."""
        self._rows: dict[str, str] = {}
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def ensure_schema(self) -> None:
        """No schema to create."""
        return None

    async def get(self, entry_id: str) -> Optional[str]:
        async with self._lock:
            return self._rows.get(entry_id)

    async def put(self, entry_id: str, raw: str) -> None:
        async with self._lock:
            self._rows[entry_id] = raw

    async def delete(self, entry_id: str) -> None:
        async with self._lock:
            self._rows.pop(entry_id, None)

    async def scan_all(self) -> list[tuple[str, str]]:
        async with self._lock:
            return list(self._rows.items())

    async def clear(self) -> None:
        async with self._lock:
            self._rows.clear()

    async def close(self) -> None:
        self._closed = True
