"""
Models package.

Import all models here so they are registered with SQLAlchemy.
"""

from taskboard.models.task import Task, UNASSIGNED_NAME
from taskboard.models.user import User, UserPendingTask

__all__ = [
    "Task",
    "User",
    "UserPendingTask",
    "UNASSIGNED_NAME",
]
