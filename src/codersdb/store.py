"""Value store: typed operations over a single keyed JSON table.

CodersDB interprets the opaque JSON text kept by a storage backend as typed
values and layers numeric, array and query operations on top of plain
get/set/delete.

Errors come in two tiers:
- Validation failures (bad key, wrong amount type, missing value, bad
  operator or predicate, stored value of the wrong type) raise a
  ``ValidationError`` subclass before any write.
- Storage and JSON coding failures are logged and turned into a benign
  result: ``None`` for reads and writes, ``False`` for boolean outcomes,
  ``[]`` for scans and ``BackupResult(success=False)`` for backups. A storage
  outage therefore looks like "not found" on most read paths.

Read-modify-write operations (add, subtract, math, push, pull) await a read
and then a separate write with no lock or transaction around them. Two
concurrent mutations of the same key can lose an update.
"""

import asyncio
import json
import math
import operator
import time
from pathlib import Path
from typing import Any, Callable, ClassVar, Optional

from sqlalchemy.exc import SQLAlchemyError

from codersdb.config import CodersDBConfig
from codersdb.errors import (
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
)
from codersdb.models import BackupResult, Entry
from codersdb.observability.logging import get_logger
from codersdb.storage.adapter import SQLStorageAdapter
from codersdb.storage.base import StorageBackend
from codersdb.version import __version__

logger = get_logger(__name__)

# Storage I/O and JSON coding failures; swallowed at the store boundary
STORAGE_ERRORS = (SQLAlchemyError, OSError, ValueError, TypeError)


class _Missing:
    """Marker for an omitted argument or an absent entry."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _exceeds_float_range(value: float) -> bool:
    """Whether a number is infinite or an int too large for a float."""
    try:
        return math.isinf(value)
    except OverflowError:
        return True


def _divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _modulo(a: float, b: float) -> float:
    # Truncated remainder: the result takes the sign of the dividend
    if b == 0:
        return math.nan
    return math.fmod(a, b)


_OPERATORS: dict[str, Callable[[float, float], float]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": _divide,
    "%": _modulo,
}


def _apply_operator(
    apply: Callable[[float, float], float], current: float, amount: float
) -> float:
    """Run an arithmetic operator, mapping float overflow to InvalidDataError.

    Ints beyond float range only overflow when mixed with floats or divided.
    """
    try:
        return apply(current, amount)
    except OverflowError as e:
        raise InvalidDataError(current) from e


def type_tag(value: Any) -> str:
    """Return the type tag reported by ``CodersDB.type``.

    Lists, dicts and null all report ``"object"``; an absent entry reports
    ``"undefined"``.
    """
    if value is MISSING:
        return "undefined"
    if isinstance(value, bool):
        return "boolean"
    if _is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    return "object"


def _strictly_equal(a: Any, b: Any) -> bool:
    # Containers compare by identity, and decoded values are always fresh objects
    if isinstance(a, (dict, list)) or isinstance(b, (dict, list)):
        return False
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b


def _now_ms() -> int:
    return int(time.time() * 1000)


class CodersDB:
    """Key-value store for JSON values backed by a single SQLite table.

    Every public operation is a coroutine. Entries are created implicitly by
    ``set``, ``add`` and ``push``; ``subtract``, ``math`` and ``pull`` require
    an existing value of the right type.

    Example:
        >>> async with CodersDB("./db.sqlite") as db:
        ...     await db.set("user1", {"name": "Ada"})
        ...     await db.add("visits", 1)
        ...     await db.push("tags", "admin")
        ...     await db.starts_with("user")
        [Entry(id='user1', data={'name': 'Ada'})]

    Attributes:
        config: Settings used to build the default backend
        name: Package name
        version: Package version
    """

    ALIASES: ClassVar[dict[str, str]] = {
        "fetch": "get",
        "del": "delete",
        # Numeric subtraction, not deletion
        "remove": "subtract",
        "clear": "delete_all",
        "exists": "has",
        "includes": "has",
        "get_all": "all",
        "fetch_all": "all",
        "typeof": "type",
        "count": "size",
        "length": "size",
        "deleteAll": "delete_all",
        "getAll": "all",
        "fetchAll": "all",
        "startsWith": "starts_with",
        "endsWith": "ends_with",
        "toJson": "to_json",
    }

    OPERATIONS: ClassVar[frozenset[str]] = frozenset(
        {
            "get",
            "set",
            "add",
            "subtract",
            "math",
            "push",
            "pull",
            "delete",
            "delete_all",
            "has",
            "all",
            "type",
            "size",
            "filter",
            "starts_with",
            "ends_with",
            "to_json",
            "last",
            "backup",
            "close",
        }
    )

    def __init__(
        self,
        db_path: Optional[str] = None,
        *,
        config: Optional[CodersDBConfig] = None,
        adapter: Optional[StorageBackend] = None,
    ) -> None:
        """Initialize the store.

        Args:
            db_path: SQLite file path (overrides config.db_path)
            config: Store configuration (default: CodersDBConfig())
            adapter: Storage backend to use instead of the SQL adapter
        """
        if config is None:
            config = CodersDBConfig() if db_path is None else CodersDBConfig(db_path=db_path)
        elif db_path is not None:
            config = config.model_copy(update={"db_path": db_path})

        self.config = config
        self.name = "codersdb"
        self.version = __version__
        if adapter is None:
            adapter = SQLStorageAdapter.from_url(config.resolved_database_url(), echo=config.echo)
        self._adapter: StorageBackend = adapter

    async def __aenter__(self) -> "CodersDB":
        self._ensure_open("open")
        await self._adapter.ensure_schema()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if not self._adapter.is_closed:
            await self.close()

    def __getattr__(self, name: str) -> Any:
        canonical = CodersDB.ALIASES.get(name)
        if canonical is None:
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
        return getattr(self, canonical)

    @classmethod
    def resolve_operation(cls, name: str) -> str:
        """Resolve a public operation name or alias to its canonical name.

        Args:
            name: Canonical name or alias (e.g. ``"remove"``)

        Returns:
            Canonical operation name (e.g. ``"subtract"``)

        Raises:
            AttributeError: If the name is not a public operation
        """
        if name in cls.OPERATIONS:
            return name
        if name in cls.ALIASES:
            return cls.ALIASES[name]
        raise AttributeError(f"Unknown operation '{name}'")

    async def invoke(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Run an operation by canonical name or alias.

        Args:
            name: Operation name or alias (``"del"`` is only reachable this way
                or through ``getattr``)
            *args: Positional arguments for the operation
            **kwargs: Keyword arguments for the operation

        Returns:
            Whatever the resolved operation returns
        """
        method = getattr(self, self.resolve_operation(name))
        return await method(*args, **kwargs)

    # -- internals ---------------------------------------------------------

    def _ensure_open(self, operation: str) -> None:
        if self._adapter.is_closed:
            raise StoreClosedError(operation)

    def _validate(self, key: Any, data: Any = MISSING, expected_type: Optional[str] = None) -> None:
        if not isinstance(key, str) or not key:
            raise InvalidKeyError(key)
        if expected_type == "number" and not _is_number(data):
            raise InvalidAmountError(data)
        # NaN is accepted
        if _is_number(data) and _exceeds_float_range(data):
            raise InvalidDataError(data)

    async def _get_data(self, key: str) -> Any:
        """Read and decode a value, or MISSING when absent or unreadable."""
        try:
            raw = await self._adapter.get(key)
            if raw is None:
                return MISSING
            return json.loads(raw)
        except STORAGE_ERRORS as e:
            logger.warning("storage_error", operation="get", key=key, error=str(e))
            return MISSING

    async def _set_data(self, key: str, data: Any) -> Any:
        """Encode and write a value; return it, or None if the write failed."""
        try:
            await self._adapter.put(key, json.dumps(data))
        except STORAGE_ERRORS as e:
            logger.warning("storage_error", operation="set", key=key, error=str(e))
            return None
        logger.debug("entry_written", key=key)
        return data

    # -- basic CRUD --------------------------------------------------------

    async def get(self, key: str) -> Any:
        """Get the value stored under a key.

        Args:
            key: Entry key

        Returns:
            Stored value, or None if absent or unreadable

        Raises:
            InvalidKeyError: If key is not a non-empty string
        """
        self._ensure_open("get")
        self._validate(key)
        value = await self._get_data(key)
        return None if value is MISSING else value

    async def set(self, key: str, value: Any = MISSING) -> Any:
        """Store a value under a key, replacing any previous value.

        Args:
            key: Entry key
            value: Any JSON-serializable value (``None`` stores null)

        Returns:
            The stored value, or None if the write failed

        Raises:
            InvalidKeyError: If key is not a non-empty string
            MissingValueError: If value is omitted
        """
        self._ensure_open("set")
        self._validate(key)
        if value is MISSING:
            raise MissingValueError(key)
        return await self._set_data(key, value)

    async def delete(self, key: str) -> bool:
        """Delete an entry.

        Returns:
            True if the entry existed and was deleted, False otherwise
        """
        self._ensure_open("delete")
        self._validate(key)
        if not await self.has(key):
            return False
        try:
            await self._adapter.delete(key)
        except STORAGE_ERRORS as e:
            logger.warning("storage_error", operation="delete", key=key, error=str(e))
            return False
        logger.debug("entry_deleted", key=key)
        return True

    async def delete_all(self) -> bool:
        """Delete every entry.

        Returns:
            True unless the storage call failed
        """
        self._ensure_open("delete_all")
        try:
            await self._adapter.clear()
        except STORAGE_ERRORS as e:
            logger.warning("storage_error", operation="delete_all", error=str(e))
            return False
        logger.info("store_cleared")
        return True

    async def has(self, key: str) -> bool:
        """Check whether a key exists. Storage errors read as False."""
        self._ensure_open("has")
        self._validate(key)
        try:
            return (await self._adapter.get(key)) is not None
        except STORAGE_ERRORS as e:
            logger.warning("storage_error", operation="has", key=key, error=str(e))
            return False

    # -- numeric mutation --------------------------------------------------

    async def add(self, key: str, amount: float) -> Optional[float]:
        """Add to a numeric value.

        A missing or non-number value counts as 0, so ``add`` can create the
        entry.

        Args:
            key: Entry key
            amount: Number to add

        Returns:
            The new value, or None if the write failed

        Raises:
            InvalidKeyError: If key is not a non-empty string
            InvalidAmountError: If amount is not a number
            InvalidDataError: If amount is infinite or the result overflows a float
        """
        self._ensure_open("add")
        self._validate(key, amount, "number")
        current = await self._get_data(key)
        if not _is_number(current):
            current = 0
        return await self._set_data(key, _apply_operator(operator.add, current, amount))

    async def subtract(self, key: str, amount: float) -> Optional[float]:
        """Subtract from an existing numeric value.

        Unlike ``add``, a missing or non-number value is an error.

        Raises:
            InvalidKeyError: If key is not a non-empty string
            InvalidAmountError: If amount is not a number
            InvalidDataError: If amount is infinite or the result overflows a float
            NotANumberError: If the stored value is not a number
        """
        self._ensure_open("subtract")
        self._validate(key, amount, "number")
        current = await self._get_data(key)
        if not _is_number(current):
            raise NotANumberError(key, type_tag(current))
        return await self._set_data(key, _apply_operator(operator.sub, current, amount))

    async def math(self, key: str, amount: float, operator: str) -> Optional[float]:
        """Apply an arithmetic operator to an existing numeric value.

        Division or modulo by zero does not raise: ``x / 0`` gives ``inf``,
        ``-inf`` or ``nan`` by the sign of ``x`` and ``x % 0`` gives ``nan``.
        ``%`` is a truncated remainder with the sign of the stored value.

        Args:
            key: Entry key
            amount: Right-hand operand
            operator: One of ``+ - * / %``

        Returns:
            The new value, or None if the write failed

        Raises:
            InvalidKeyError: If key is not a non-empty string
            InvalidAmountError: If amount is not a number
            InvalidDataError: If amount is infinite or the result overflows a float
            InvalidOperatorError: If operator is not supported
            NotANumberError: If the stored value is not a number
        """
        self._ensure_open("math")
        self._validate(key, amount, "number")
        apply = _OPERATORS.get(operator) if isinstance(operator, str) else None
        if apply is None:
            raise InvalidOperatorError(operator)
        current = await self._get_data(key)
        if not _is_number(current):
            raise NotANumberError(key, type_tag(current))
        return await self._set_data(key, _apply_operator(apply, current, amount))

    # -- array mutation ----------------------------------------------------

    async def push(self, key: str, element: Any = MISSING) -> Optional[list[Any]]:
        """Append an element to a list value.

        A missing or non-list value is replaced by an empty list first, so
        ``push`` can create the entry.

        Raises:
            InvalidKeyError: If key is not a non-empty string
            MissingElementError: If element is omitted
        """
        self._ensure_open("push")
        self._validate(key)
        if element is MISSING:
            raise MissingElementError(key)
        current = await self._get_data(key)
        items = current if isinstance(current, list) else []
        items.append(element)
        return await self._set_data(key, items)

    async def pull(self, key: str, element: Any = MISSING) -> Optional[list[Any]]:
        """Remove the first occurrence of an element from a list value.

        Only scalar elements can match: dicts and lists are never found, and
        ``True`` does not match ``1``. The list is written back even when
        nothing was removed.

        Raises:
            InvalidKeyError: If key is not a non-empty string
            MissingElementError: If element is omitted
            NotAnArrayError: If the stored value is not a list
        """
        self._ensure_open("pull")
        self._validate(key)
        if element is MISSING:
            raise MissingElementError(key)
        current = await self._get_data(key)
        if not isinstance(current, list):
            raise NotAnArrayError(key, type_tag(current))
        for index, item in enumerate(current):
            if _strictly_equal(item, element):
                del current[index]
                break
        return await self._set_data(key, current)

    # -- queries and views -------------------------------------------------

    async def all(self) -> list[Entry]:
        """Return every entry in scan order.

        Returns:
            List of entries, or [] if the scan or any decode failed
        """
        self._ensure_open("all")
        try:
            rows = await self._adapter.scan_all()
            return [Entry(id=entry_id, data=json.loads(raw)) for entry_id, raw in rows]
        except STORAGE_ERRORS as e:
            logger.warning("storage_error", operation="all", error=str(e))
            return []

    async def type(self, key: str) -> str:
        """Return the type tag of a stored value (``"undefined"`` if absent)."""
        self._ensure_open("type")
        self._validate(key)
        return type_tag(await self._get_data(key))

    async def size(self) -> int:
        """Count entries with a full scan."""
        self._ensure_open("size")
        return len(await self.all())

    async def filter(self, predicate: Callable[[Entry], bool]) -> list[Entry]:
        """Return the entries for which ``predicate(entry)`` is true.

        Raises:
            InvalidFilterError: If predicate is not callable
        """
        self._ensure_open("filter")
        if not callable(predicate):
            raise InvalidFilterError(predicate)
        return [entry for entry in await self.all() if predicate(entry)]

    async def starts_with(self, prefix: str) -> list[Entry]:
        """Return the entries whose key starts with ``prefix``."""
        self._ensure_open("starts_with")
        self._validate(prefix)
        return [entry for entry in await self.all() if entry.id.startswith(prefix)]

    async def ends_with(self, suffix: str) -> list[Entry]:
        """Return the entries whose key ends with ``suffix``."""
        self._ensure_open("ends_with")
        self._validate(suffix)
        return [entry for entry in await self.all() if entry.id.endswith(suffix)]

    async def to_json(self) -> dict[str, Any]:
        """Fold every entry into a single key-to-value mapping."""
        self._ensure_open("to_json")
        return {entry.id: entry.data for entry in await self.all()}

    async def last(self) -> Optional[Entry]:
        """Return the final entry in scan order.

        This is the last row the backend enumerates, which is not necessarily
        the most recently written entry.
        """
        self._ensure_open("last")
        entries = await self.all()
        return entries[-1] if entries else None

    # -- backup and lifecycle ----------------------------------------------

    async def backup(self, filename: Optional[str] = None) -> BackupResult:
        """Write every entry to a pretty-printed JSON file.

        Args:
            filename: Target path (default: ``<backup_dir>/db.backup.<epoch-ms>``)

        Returns:
            BackupResult describing the written file, or the failure
        """
        self._ensure_open("backup")
        backup_name = filename or str(Path(self.config.backup_dir) / f"db.backup.{_now_ms()}")
        try:
            data = await self.to_json()
            payload = json.dumps(data, indent=2)
            await asyncio.to_thread(Path(backup_name).write_text, payload, encoding="utf-8")
        except STORAGE_ERRORS as e:
            logger.warning("backup_failed", filename=backup_name, error=str(e))
            return BackupResult(success=False, error=str(e))

        logger.info("backup_written", filename=backup_name, size=len(data))
        return BackupResult(
            success=True,
            filename=backup_name,
            timestamp=_now_ms(),
            size=len(data),
        )

    async def close(self) -> None:
        """Release the storage backend. The store cannot be used afterwards."""
        self._ensure_open("close")
        await self._adapter.close()
        logger.info("store_closed", db_path=self.config.db_path)
