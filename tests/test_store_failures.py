"""Tests for the storage-failure tier and the non-atomic read-modify-write contract.

Storage errors are swallowed at the store boundary, so an unavailable backend
is observably the same as an empty one on read paths.
"""

import asyncio
from pathlib import Path
from typing import Any, Optional

import pytest

from codersdb import CodersDB, CodersDBConfig, InvalidKeyError, NotANumberError
from codersdb.storage import InMemoryStorageAdapter


class FailingStorageAdapter(InMemoryStorageAdapter):
    """Backend whose every data call raises an I/O error."""

    async def get(self, entry_id: str) -> Optional[str]:
        raise OSError("disk I/O error")

    async def put(self, entry_id: str, raw: str) -> None:
        raise OSError("disk I/O error")

    async def delete(self, entry_id: str) -> None:
        raise OSError("disk I/O error")

    async def scan_all(self) -> list[tuple[str, str]]:
        raise OSError("disk I/O error")

    async def clear(self) -> None:
        raise OSError("disk I/O error")


class YieldingStorageAdapter(InMemoryStorageAdapter):
    """Backend that suspends after each read, like a real engine round trip."""

    async def get(self, entry_id: str) -> Optional[str]:
        raw = await super().get(entry_id)
        await asyncio.sleep(0)
        return raw


@pytest.fixture
def failing_db(tmp_path: Path) -> CodersDB:
    """Store over a backend that always fails."""
    return CodersDB(
        config=CodersDBConfig(backup_dir=str(tmp_path)), adapter=FailingStorageAdapter()
    )


class TestStorageFailures:
    """Storage errors become benign defaults."""

    @pytest.mark.asyncio
    async def test_reads_return_absent(self, failing_db: CodersDB) -> None:
        """Reads look like missing data."""
        assert await failing_db.get("k") is None
        assert await failing_db.has("k") is False
        assert await failing_db.type("k") == "undefined"
        assert await failing_db.all() == []
        assert await failing_db.size() == 0
        assert await failing_db.to_json() == {}
        assert await failing_db.last() is None

    @pytest.mark.asyncio
    async def test_writes_return_none_or_false(self, failing_db: CodersDB) -> None:
        """Writes report failure through their return value."""
        assert await failing_db.set("k", 1) is None
        assert await failing_db.add("k", 1) is None
        assert await failing_db.push("k", 1) is None
        assert await failing_db.delete("k") is False
        assert await failing_db.delete_all() is False

    @pytest.mark.asyncio
    async def test_swallowed_errors_are_logged(
        self, failing_db: CodersDB, captured_logs: list[dict[str, Any]]
    ) -> None:
        """Each swallowed storage error leaves a warning naming the operation."""
        await failing_db.get("k")
        await failing_db.delete_all()

        assert captured_logs == [
            {
                "event": "storage_error",
                "log_level": "warning",
                "operation": "get",
                "key": "k",
                "error": "disk I/O error",
            },
            {
                "event": "storage_error",
                "log_level": "warning",
                "operation": "delete_all",
                "error": "disk I/O error",
            },
        ]

    @pytest.mark.asyncio
    async def test_validation_still_raises(self, failing_db: CodersDB) -> None:
        """Validation failures are never swallowed."""
        with pytest.raises(InvalidKeyError):
            await failing_db.get("")
        with pytest.raises(NotANumberError):
            await failing_db.subtract("k", 1)

    @pytest.mark.asyncio
    async def test_backup_of_unreadable_store_writes_empty_dump(
        self, failing_db: CodersDB, tmp_path: Path
    ) -> None:
        """A failed scan is indistinguishable from an empty store."""
        result = await failing_db.backup(str(tmp_path / "backup.json"))

        assert result.success is True
        assert result.size == 0

    @pytest.mark.asyncio
    async def test_corrupt_row_reads_as_absent(self) -> None:
        """Undecodable text reads as None and empties whole scans."""
        adapter = InMemoryStorageAdapter()
        await adapter.put("good", "1")
        await adapter.put("bad", "{not json")
        db = CodersDB(adapter=adapter)

        assert await db.get("bad") is None
        assert await db.has("bad") is True
        assert await db.get("good") == 1
        assert await db.all() == []


class TestLostUpdate:
    """Read-modify-write operations are not atomic."""

    @pytest.mark.asyncio
    async def test_concurrent_adds_can_lose_an_update(self) -> None:
        """Two concurrent add(k, 1) from 0 can both read 0 and both write 1."""
        db = CodersDB(adapter=YieldingStorageAdapter())
        await db.set("counter", 0)

        await asyncio.gather(db.add("counter", 1), db.add("counter", 1))

        assert await db.get("counter") == 1

    @pytest.mark.asyncio
    async def test_concurrent_pushes_can_lose_an_update(self) -> None:
        """The later write wins for list mutations too."""
        db = CodersDB(adapter=YieldingStorageAdapter())

        await asyncio.gather(db.push("tags", "a"), db.push("tags", "b"))

        assert await db.get("tags") in (["a"], ["b"])

    @pytest.mark.asyncio
    async def test_sequential_adds_accumulate(self) -> None:
        """Without overlap every update is kept."""
        db = CodersDB(adapter=YieldingStorageAdapter())
        await db.set("counter", 0)

        await db.add("counter", 1)
        await db.add("counter", 1)

        assert await db.get("counter") == 2
