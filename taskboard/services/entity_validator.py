"""
Entity validation: required fields, defaults and cross-entity references.

The validator only reads from the store. It runs before any write of a
mutation flow, so a ValidationError never follows a partial write.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.errors import ValidationError
from taskboard.models.task import UNASSIGNED_NAME
from taskboard.repositories.user_repository import UserRepository, DUPLICATE_EMAIL
from taskboard.schemas.task import TaskPayload, TaskFields
from taskboard.schemas.user import UserPayload, UserFields

TASK_REQUIRED = "name and deadline are required"
USER_REQUIRED = "name and email are required"
ASSIGNEE_MISSING = "assignedUser does not exist"


def _present(value: Optional[str]) -> bool:
    # Whitespace counts as a value; only None and "" are missing
    return value is not None and value != ""


class EntityValidator:
    """Check-and-normalize for Task and User payloads."""

    def __init__(self, db: AsyncSession):
        self.users = UserRepository(db)

    def check_task_fields(self, payload: TaskPayload) -> TaskFields:
        """Required fields and defaults, no store access."""
        if not _present(payload.name) or payload.deadline is None:
            raise ValidationError(TASK_REQUIRED)
        return TaskFields(
            name=payload.name,
            deadline=payload.deadline,
            description=payload.description or "",
            completed=bool(payload.completed),
            assigned_user=payload.assigned_user or "",
            assigned_user_name=payload.assigned_user_name or UNASSIGNED_NAME,
        )

    async def resolve_assignee(self, fields: TaskFields) -> TaskFields:
        """
        Check the assignedUser reference and re-derive the cached name.

        The client-supplied assignedUserName is never kept: it becomes the
        referenced user's current name, or "unassigned" without a reference.
        """
        if not fields.assigned_user:
            return fields.model_copy(update={"assigned_user_name": UNASSIGNED_NAME})
        user = await self.users.get_by_id(fields.assigned_user)
        if user is None:
            raise ValidationError(ASSIGNEE_MISSING)
        return fields.model_copy(update={"assigned_user_name": user.name})

    async def validate_task(self, payload: TaskPayload) -> TaskFields:
        return await self.resolve_assignee(self.check_task_fields(payload))

    def check_user_fields(self, payload: UserPayload) -> UserFields:
        """Required fields; pendingTasks defaults to empty and loses duplicates."""
        if not _present(payload.name) or not _present(payload.email):
            raise ValidationError(USER_REQUIRED)
        pending = [str(task_id) for task_id in (payload.pending_tasks or [])]
        return UserFields(
            name=payload.name,
            email=payload.email,
            pending_tasks=list(dict.fromkeys(pending)),
        )

    async def check_email_available(self, email: str, user_id: Optional[str] = None) -> None:
        if await self.users.get_by_email(email, exclude_user_id=user_id) is not None:
            raise ValidationError(DUPLICATE_EMAIL)

    async def validate_user(self, payload: UserPayload, user_id: Optional[str] = None) -> UserFields:
        fields = self.check_user_fields(payload)
        await self.check_email_available(fields.email, user_id=user_id)
        return fields
