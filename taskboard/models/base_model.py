"""
Base model with common fields.

Every stored document gets:
- id (UUID string primary key, assigned by the store)
- date_created (set once when the record is inserted)
"""

import uuid
from datetime import datetime

from sqlalchemy import String, DateTime
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.db.base import Base
from taskboard.utils.time import as_utc, utc_now


def new_id() -> str:
    return str(uuid.uuid4())


class UTCDateTime(TypeDecorator):
    """
    Timestamp written and read back as an aware UTC datetime.

    SQLite keeps only the wall-clock part of a value, so the offset is
    applied before binding.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return as_utc(value)

    def process_result_value(self, value, dialect):
        return as_utc(value)


class DocumentModel(Base):
    """
    Abstract base class for Task and User.
    
    Ids are stored as strings because references between entities
    (Task.assigned_user, User.pending_tasks) are plain id strings.
    """
    
    __abstract__ = True
    
    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_id,
    )
    
    # Never touched by save(); the column is excluded from every update
    date_created: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=utc_now,
        nullable=False,
    )
