"""
Task model.

assigned_user holds a User id or "" when unassigned; assigned_user_name is a
cached copy of that User's name ("unassigned" when empty).
"""

from datetime import datetime

from sqlalchemy import String, Text, Boolean, Index
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.models.base_model import DocumentModel, UTCDateTime

UNASSIGNED_NAME = "unassigned"


class Task(DocumentModel):
    """A unit of work that may be assigned to one User."""

    __tablename__ = "tasks"

    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    deadline: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    assigned_user: Mapped[str] = mapped_column(String(36), nullable=False, default="")
    assigned_user_name: Mapped[str] = mapped_column(String(500), nullable=False, default=UNASSIGNED_NAME)

    __table_args__ = (
        Index("ix_tasks_assigned_user", "assigned_user"),
    )

    def __repr__(self) -> str:
        return f"<Task {self.id} assigned_user={self.assigned_user!r} completed={self.completed}>"
