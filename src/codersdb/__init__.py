"""codersdb: an async key-value store for JSON values on SQLite.

Example:
    >>> from codersdb import CodersDB
    >>> async with CodersDB("./db.sqlite") as db:
    ...     await db.set("user1", {"name": "Ada"})
    ...     await db.add("visits", 1)
"""

from codersdb.config import CodersDBConfig
from codersdb.errors import (
    CodersDBError,
    InvalidAmountError,
    InvalidDataError,
    InvalidFilterError,
    InvalidKeyError,
    InvalidOperatorError,
    MissingElementError,
    MissingValueError,
    NotAnArrayError,
    NotANumberError,
    StoreClosedError,
    ValidationError,
)
from codersdb.models import BackupResult, Entry
from codersdb.store import MISSING, CodersDB
from codersdb.version import __version__

__all__ = [
    "__version__",
    "CodersDB",
    "CodersDBConfig",
    "Entry",
    "BackupResult",
    "MISSING",
    "CodersDBError",
    "ValidationError",
    "StoreClosedError",
    "InvalidKeyError",
    "InvalidAmountError",
    "InvalidDataError",
    "MissingValueError",
    "MissingElementError",
    "NotANumberError",
    "NotAnArrayError",
    "InvalidOperatorError",
    "InvalidFilterError",
]
