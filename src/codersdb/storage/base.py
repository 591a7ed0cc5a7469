"""Storage backend interface consumed by the value store.

A backend is a single keyed table of opaque JSON text. It knows nothing
about value semantics: serialization, validation and read-modify-write all
live in ``codersdb.store``.
"""

from typing import Optional, Protocol


class StorageBackend(Protocol):
    """Protocol for single-table keyed storage.

    Every method is an independent unit of work. Implementations must not
    wrap several calls in one transaction.
    """

    @property
    def is_closed(self) -> bool:
        """Whether ``close()`` has already released the backend."""
        ...

    async def ensure_schema(self) -> None:
        """Create the entry table if it does not exist (idempotent)."""
        ...

    async def get(self, entry_id: str) -> Optional[str]:
        """Retrieve the raw JSON text stored under an ID.

        Args:
            entry_id: Primary key to look up

        Returns:
            Stored text if found, None otherwise
        """
        ...

    async def put(self, entry_id: str, raw: str) -> None:
        """Insert or replace the text stored under an ID.

        Args:
            entry_id: Primary key to write
            raw: Serialized JSON text
        """
        ...

    async def delete(self, entry_id: str) -> None:
        """Delete an entry by ID. Missing IDs are not an error.

        Args:
            entry_id: Primary key to delete
        """
        ...

    async def scan_all(self) -> list[tuple[str, str]]:
        """Enumerate every entry.

        Returns:
            List of (ID, raw text) pairs in the backend's default order
        """
        ...

    async def clear(self) -> None:
        """Delete every entry."""
        ...

    async def close(self) -> None:
        """Release the underlying connection."""
        ...
