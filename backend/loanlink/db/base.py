"""SQLAlchemy Declarative Base — shared base class for all ORM models.

Invariants:
    - All models inherit from Base
    - to_document() returns plain dicts keyed by column name; datetimes are always
      timezone-aware UTC (SQLite drops tzinfo on the way back)
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all LoanLink ORM models."""

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(c.key for c in cls.__table__.columns)

    def to_document(self) -> dict[str, Any]:
        doc = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, datetime) and value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            doc[column.key] = value
        return doc
