"""
Task repository - store operations for Task documents.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select, update, delete, func
from sqlalchemy.sql.elements import ColumnElement

from taskboard.models.task import Task, UNASSIGNED_NAME
from taskboard.repositories.base import BaseRepository
from taskboard.repositories.query_builder import FieldMap, build_filter, build_order_by
from taskboard.schemas.task import TaskFields

logger = logging.getLogger(__name__)

TASK_FIELDS = FieldMap(
    {
        "_id": Task.id,
        "name": Task.name,
        "description": Task.description,
        "deadline": Task.deadline,
        "completed": Task.completed,
        "assignedUser": Task.assigned_user,
        "assignedUserName": Task.assigned_user_name,
        "dateCreated": Task.date_created,
    },
    datetime_fields=("deadline", "dateCreated"),
)


class TaskRepository(BaseRepository):
    """Repository for Task store operations."""

    async def get_by_id(self, task_id: str) -> Optional[Task]:
        """Get a task by ID, always re-read from the store."""
        async with self.store_call("get task"):
            result = await self.db.execute(
                select(Task)
                .where(Task.id == task_id)
                .execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()

    async def create(self, data: TaskFields) -> Task:
        """Insert a new task."""
        task = Task(**data.model_dump())
        async with self.store_call("create task"):
            self.db.add(task)
            await self.db.commit()
        return task

    async def save(self, task: Task) -> Task:
        """Write every field of an already-loaded task back to the store."""
        async with self.store_call("save task"):
            self.db.add(task)
            await self.db.commit()
        return task

    async def delete(self, task: Task) -> None:
        async with self.store_call("delete task"):
            await self.db.execute(delete(Task).where(Task.id == task.id))
            await self.db.commit()

    async def update_many(self, criteria: ColumnElement, values: Dict[str, Any]) -> int:
        """Set the given columns on every matching task. Zero matches is a no-op."""
        async with self.store_call("update tasks"):
            result = await self.db.execute(
                update(Task)
                .where(criteria)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        logger.debug("update_many matched %s task(s) values=%s", result.rowcount, sorted(values))
        return result.rowcount

    async def assign_to_user(self, task_ids: Iterable[str], user_id: str, user_name: str) -> int:
        """Point the listed tasks at a user and reopen them."""
        ids = list(task_ids)
        if not ids:
            return 0
        return await self.update_many(
            Task.id.in_(ids),
            {"assigned_user": user_id, "assigned_user_name": user_name, "completed": False},
        )

    async def unassign_user(self, user_id: str) -> int:
        """Clear the reference on every task pointing at a user."""
        return await self.update_many(
            Task.assigned_user == user_id,
            {"assigned_user": "", "assigned_user_name": UNASSIGNED_NAME},
        )

    async def find(
        self,
        where: Dict[str, Any],
        sort: Optional[Dict[str, Any]] = None,
        skip: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Task]:
        query = select(Task).where(build_filter(where, TASK_FIELDS))
        order_by = build_order_by(sort, TASK_FIELDS)
        if order_by:
            query = query.order_by(*order_by)
        if skip:
            query = query.offset(skip)
        if limit:
            query = query.limit(limit)
        async with self.store_call("find tasks"):
            result = await self.db.execute(query.execution_options(populate_existing=True))
            return list(result.scalars().all())

    async def count_matching(self, where: Dict[str, Any]) -> int:
        query = select(func.count()).select_from(Task).where(build_filter(where, TASK_FIELDS))
        async with self.store_call("count tasks"):
            result = await self.db.execute(query)
            return result.scalar_one()
