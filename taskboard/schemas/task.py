"""
Task Pydantic schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskboard.models.task import UNASSIGNED_NAME
from taskboard.schemas.base import DocumentRead
from taskboard.utils.time import as_utc


class TaskPayload(BaseModel):
    """
    Request body for POST/PUT /api/tasks.

    Everything is optional here so that missing required fields are reported
    by the entity validator with its own message.
    """

    name: Optional[str] = None
    deadline: Optional[datetime] = None
    description: Optional[str] = None
    completed: Optional[bool] = None
    assigned_user: Optional[str] = Field(None, alias="assignedUser")
    assigned_user_name: Optional[str] = Field(None, alias="assignedUserName")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("deadline")
    @classmethod
    def deadline_in_utc(cls, v):
        # Offsets are folded into the instant; the stored value is UTC
        return as_utc(v)


class TaskFields(BaseModel):
    """Validated, defaulted task fields ready to be written."""

    name: str
    deadline: datetime
    description: str = ""
    completed: bool = False
    assigned_user: str = ""
    assigned_user_name: str = UNASSIGNED_NAME


class TaskRead(DocumentRead):
    """Schema for reading task data (API response)."""

    name: str
    description: str
    deadline: datetime
    completed: bool
    assigned_user: str = Field(alias="assignedUser")
    assigned_user_name: str = Field(alias="assignedUserName")
