"""
User business logic: the User side of the assignment sync.

A user's pendingTasks list is authoritative on create and update: every
listed task is (re)assigned to the user and reopened.
"""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.errors import NotFoundError, StoreError
from taskboard.models.user import User
from taskboard.repositories.task_repository import TaskRepository
from taskboard.repositories.user_repository import UserRepository
from taskboard.schemas.user import UserPayload
from taskboard.services.entity_validator import EntityValidator
from taskboard.utils.query_params import CollectionQuery

logger = logging.getLogger(__name__)


class UserService:
    """Service for user business logic."""

    def __init__(self, db: AsyncSession):
        self.repository = UserRepository(db)
        self.tasks = TaskRepository(db)
        self.validator = EntityValidator(db)

    async def get_user(self, user_id: str) -> User:
        """Get a user by ID or raise NotFoundError."""
        user = await self.repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def list_users(self, query: CollectionQuery) -> List[User]:
        return await self.repository.find(query.where, sort=query.sort, skip=query.skip, limit=query.limit)

    async def count_users(self, query: CollectionQuery) -> int:
        return await self.repository.count_matching(query.where)

    async def create_user(self, payload: UserPayload) -> User:
        """Create a user, then claim every task listed in pendingTasks."""
        fields = await self.validator.validate_user(payload)
        user = await self.repository.create(fields)
        user_id = user.id

        await self._claim_tasks(user_id, fields.name, fields.pending_tasks)
        logger.info("Created user %s with %d pending task(s)", user_id, len(fields.pending_tasks))
        return user

    async def update_user(self, user_id: str, payload: UserPayload) -> User:
        """
        Replace a user.

        Tasks pointing at the user are cleared first, so a task that stays in
        the new pendingTasks is reassigned by the claim step rather than left
        cleared.
        """
        fields = self.validator.check_user_fields(payload)
        user = await self.get_user(user_id)
        await self.validator.check_email_available(fields.email, user_id=user_id)

        cleared = await self.tasks.unassign_user(user_id)

        user.name = fields.name
        user.email = fields.email
        try:
            user = await self.repository.save(user, fields.pending_tasks)
        except StoreError:
            logger.warning("User %s: %d task(s) cleared but user not saved", user_id, cleared)
            raise

        await self._claim_tasks(user_id, fields.name, fields.pending_tasks)
        logger.info("Updated user %s: cleared %d task(s), claimed %d", user_id, cleared, len(fields.pending_tasks))
        return user

    async def delete_user(self, user_id: str) -> None:
        """Clear every task pointing at the user, then delete the user."""
        user = await self.get_user(user_id)
        cleared = await self.tasks.unassign_user(user_id)
        await self.repository.delete(user)
        logger.info("Deleted user %s, %d task(s) unassigned", user_id, cleared)

    async def _claim_tasks(self, user_id: str, user_name: str, task_ids: List[str]) -> None:
        """
        Assign the listed tasks to the user and reopen them.

        Only the Task side is written. A previous owner keeps the id in its
        own pendingTasks.
        """
        if not task_ids:
            return
        try:
            matched = await self.tasks.assign_to_user(task_ids, user_id, user_name)
        except StoreError:
            logger.warning("User %s saved but task backfill did not finish", user_id)
            raise
        logger.debug("User %s claimed %d of %d listed task(s)", user_id, matched, len(task_ids))
