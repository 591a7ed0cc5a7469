"""SQLAlchemy ORM model for the key-value table.

The store keeps every entry in one table named ``json`` with two columns:
the caller-provided ``ID`` (primary key) and the serialized JSON text.
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from codersdb.storage.base_model import Base


class JsonEntryModel(Base):
    """ORM model for a stored entry.

    Attributes:
        id: Caller-provided unique key (column ``ID``)
        json: Serialized JSON value
    """

    __tablename__ = "json"

    id: Mapped[str] = mapped_column("ID", String, primary_key=True)
    json: Mapped[str] = mapped_column("json", Text, nullable=False)

    def __repr__(self) -> str:
        return f"JsonEntryModel(id={self.id!r})"
