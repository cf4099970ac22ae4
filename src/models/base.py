"""
Declarative base shared by every restaurant-costing record.

Records are ordinary mapped classes. The costing core builds and reads them
without a session, so nothing here depends on one: column defaults apply
only when a record is flushed.
"""

import uuid as uuid_lib
from datetime import date
from typing import Any, Dict

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import declarative_base

from src.utils.datetime_utils import utc_now

Base = declarative_base()


def _new_uuid() -> str:
    return str(uuid_lib.uuid4())


class BaseModel(Base):
    """
    Columns every table carries.

    Attributes:
        id: Integer primary key; recipes reference purchases and other
            recipes by it
        uuid: Stable string identifier for exports
        created_at: Insertion time (UTC)
        updated_at: Last update time (UTC)
    """

    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(String(36), unique=True, nullable=False, default=_new_uuid, index=True)

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    def to_dict(self, include_relationships: bool = False) -> Dict[str, Any]:
        """
        Column values as a dict, dates and datetimes as ISO strings.

        With include_relationships, related records are nested the same way.
        """
        result: Dict[str, Any] = {}
        for column in self.__table__.columns:
            value = getattr(self, column.name)
            result[column.name] = value.isoformat() if isinstance(value, date) else value

        if include_relationships:
            for relationship in self.__mapper__.relationships:
                related = getattr(self, relationship.key)
                if isinstance(related, list):
                    result[relationship.key] = [item.to_dict() for item in related]
                else:
                    result[relationship.key] = related.to_dict() if related is not None else None

        return result

    def __repr__(self) -> str:
        name = getattr(self, "name", None)
        suffix = f", name='{name}'" if name is not None else ""
        return f"{self.__class__.__name__}(id={self.id}{suffix})"
