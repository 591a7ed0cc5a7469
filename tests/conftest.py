"""Pytest configuration and shared fixtures for the test suite."""

from pathlib import Path
from typing import Any, AsyncGenerator, Iterator

import pytest
import structlog
from structlog.testing import capture_logs

from codersdb import CodersDB, CodersDBConfig
from codersdb.storage import InMemoryStorageAdapter


@pytest.fixture
def db_file(tmp_path: Path) -> Path:
    """Path of a fresh SQLite file inside the test's temp directory."""
    return tmp_path / "db.sqlite"


@pytest.fixture
def config(tmp_path: Path, db_file: Path) -> CodersDBConfig:
    """Store configuration pointing at the temp directory."""
    return CodersDBConfig(db_path=str(db_file), backup_dir=str(tmp_path))


@pytest.fixture
async def db(config: CodersDBConfig) -> AsyncGenerator[CodersDB, None]:
    """Create a file-backed SQLite store for testing.

    Yields:
        Open CodersDB instance, closed after the test
    """
    async with CodersDB(config=config) as store:
        yield store


@pytest.fixture
async def memory_db(tmp_path: Path) -> AsyncGenerator[CodersDB, None]:
    """Create a store over the in-memory backend.

    Yields:
        CodersDB instance backed by InMemoryStorageAdapter
    """
    store = CodersDB(
        config=CodersDBConfig(backup_dir=str(tmp_path)), adapter=InMemoryStorageAdapter()
    )
    async with store:
        yield store


@pytest.fixture
def captured_logs(monkeypatch: pytest.MonkeyPatch) -> Iterator[list[dict[str, Any]]]:
    """Capture store log events, bypassing any logger cached by setup_logging."""
    with capture_logs() as logs:
        monkeypatch.setattr("codersdb.store.logger", structlog.get_logger("codersdb.store"))
        yield logs
