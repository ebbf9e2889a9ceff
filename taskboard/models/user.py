"""
User model and its pending-task set.

pending_tasks is stored one row per (user_id, task_id). The composite primary
key gives set semantics: adding an existing id is a no-op, pulling removes
the row. task_id is not a foreign key; a User may list ids that match no Task.
"""

from typing import List

from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskboard.db.base import Base
from taskboard.models.base_model import DocumentModel


class User(DocumentModel):
    """A person who can own pending tasks."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(500), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)

    pending_task_links: Mapped[List["UserPendingTask"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    @property
    def pending_tasks(self) -> List[str]:
        return [link.task_id for link in self.pending_task_links]

    def __repr__(self) -> str:
        return f"<User {self.id} email={self.email!r}>"


class UserPendingTask(Base):
    """One entry of a User's pendingTasks set."""

    __tablename__ = "user_pending_tasks"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    task_id: Mapped[str] = mapped_column(String(36), primary_key=True, index=True)

    user: Mapped[User] = relationship(back_populates="pending_task_links")
