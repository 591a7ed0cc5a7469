"""Storage layer for codersdb.

This module provides the storage backend protocol and its SQL and in-memory
implementations. The backends store opaque JSON text and know nothing about
value semantics.
"""

from codersdb.storage.adapter import SQLStorageAdapter
from codersdb.storage.base import StorageBackend
from codersdb.storage.database import Database, DatabaseConfig
from codersdb.storage.memory import InMemoryStorageAdapter

__all__ = [
    "Database",
    "DatabaseConfig",
    "InMemoryStorageAdapter",
    "SQLStorageAdapter",
    "StorageBackend",
]
