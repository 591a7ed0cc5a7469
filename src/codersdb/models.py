"""Data models returned by the value store.

- Entry: one (ID, value) pair from the store
- BackupResult: outcome of a backup, success or failure
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Entry(BaseModel):
    """A single stored entry.

    Serializes with the key under ``ID`` (``entry.model_dump(by_alias=True)``)
    to match the table's column name.

    Attributes:
        id: Unique caller-provided key
        data: Deserialized JSON value
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(alias="ID", description="Unique caller-provided key")
    data: Any = Field(default=None, description="Deserialized JSON value")


class BackupResult(BaseModel):
    """Outcome of ``CodersDB.backup``.

    On success ``filename``, ``timestamp`` and ``size`` are set; on failure
    only ``error`` is.

    Attributes:
        success: Whether the backup file was written
        filename: Path of the written file
        timestamp: Completion time in epoch milliseconds
        size: Number of top-level keys written
        error: Failure message
    """

    success: bool
    filename: Optional[str] = None
    timestamp: Optional[int] = Field(default=None, ge=0)
    size: Optional[int] = Field(default=None, ge=0)
    error: Optional[str] = None
