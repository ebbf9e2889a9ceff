"""
Task business logic: the Task side of the assignment sync.

Each flow is an ordered list of independent store calls. Nothing wraps them
in a transaction; if a call fails, earlier calls stay committed and the
error propagates. Every pendingTasks step is a set operation, so re-issuing
the same request converges.
"""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.errors import NotFoundError, StoreError
from taskboard.models.task import Task
from taskboard.repositories.task_repository import TaskRepository
from taskboard.repositories.user_repository import UserRepository
from taskboard.schemas.task import TaskPayload
from taskboard.services.entity_validator import EntityValidator
from taskboard.utils.query_params import CollectionQuery

logger = logging.getLogger(__name__)


class TaskService:
    """Service for task business logic."""
    
    def __init__(self, db: AsyncSession):
        self.repository = TaskRepository(db)
        self.users = UserRepository(db)
        self.validator = EntityValidator(db)
    
    async def get_task(self, task_id: str) -> Task:
        """Get a task by ID or raise NotFoundError."""
        task = await self.repository.get_by_id(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    async def list_tasks(self, query: CollectionQuery, default_limit: int | None = None) -> List[Task]:
        """Find tasks; limit=0 means no limit, an absent limit falls back to default_limit."""
        limit = default_limit if query.limit is None else query.limit
        return await self.repository.find(query.where, sort=query.sort, skip=query.skip, limit=limit)

    async def count_tasks(self, query: CollectionQuery) -> int:
        return await self.repository.count_matching(query.where)
    
    async def create_task(self, payload: TaskPayload) -> Task:
        """Create a task and add it to its assignee's pendingTasks when it is open."""
        fields = await self.validator.validate_task(payload)
        task = await self.repository.create(fields)
        task_id = task.id

        if fields.assigned_user and not fields.completed:
            try:
                await self.users.add_pending_task(fields.assigned_user, task_id)
            except StoreError:
                logger.warning("Task %s created but not added to user %s pendingTasks", task_id, fields.assigned_user)
                raise

        logger.info("Created task %s assigned_user=%r completed=%s", task_id, fields.assigned_user, fields.completed)
        return task
    
    async def update_task(self, task_id: str, payload: TaskPayload) -> Task:
        """
        Replace a task and move it between pendingTasks sets.

        After the task is saved, in order:
        (a) pull it from the previous assignee,
        (b) add it to the new assignee when open,
        (c) when completed, pull it from every user.
        """
        fields = self.validator.check_task_fields(payload)
        task = await self.get_task(task_id)
        fields = await self.validator.resolve_assignee(fields)

        previous_user = task.assigned_user
        for name, value in fields.model_dump().items():
            setattr(task, name, value)
        task = await self.repository.save(task)

        try:
            if previous_user:
                await self.users.pull_pending_task(task_id, user_id=previous_user)
            if fields.assigned_user and not fields.completed:
                await self.users.add_pending_task(fields.assigned_user, task_id)
            if fields.completed:
                await self.users.pull_pending_task(task_id)
        except StoreError:
            logger.warning("Task %s saved but pendingTasks sync did not finish", task_id)
            raise

        logger.info(
            "Updated task %s assigned_user %r -> %r completed=%s",
            task_id, previous_user, fields.assigned_user, fields.completed,
        )
        return task
    
    async def delete_task(self, task_id: str) -> None:
        """Pull the task from its assignee's pendingTasks, then delete it."""
        task = await self.get_task(task_id)
        if task.assigned_user:
            await self.users.pull_pending_task(task_id, user_id=task.assigned_user)
        await self.repository.delete(task)
        logger.info("Deleted task %s", task_id)
