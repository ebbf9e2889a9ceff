"""
User Pydantic schemas.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from taskboard.schemas.base import DocumentRead


class UserPayload(BaseModel):
    """Request body for POST/PUT /api/users."""

    name: Optional[str] = None
    email: Optional[EmailStr] = None
    pending_tasks: Optional[List[str]] = Field(None, alias="pendingTasks")

    model_config = ConfigDict(populate_by_name=True)


class UserFields(BaseModel):
    """Validated user fields; pending_tasks is already deduplicated."""

    name: str
    email: str
    pending_tasks: List[str] = []


class UserRead(DocumentRead):
    """Schema for reading user data (API response)."""

    name: str
    email: str
    pending_tasks: List[str] = Field(alias="pendingTasks")
