"""SQLAlchemy declarative base for codersdb ORM models.

All tables are registered on this base's metadata so that a single
``create_all`` call builds the complete schema.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all ORM models in codersdb."""

    pass
