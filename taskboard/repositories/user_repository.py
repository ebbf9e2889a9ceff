"""
User repository - store operations for User documents and their pendingTasks set.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select, delete, insert, func, literal, and_, not_, true, false
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.sql.elements import ColumnElement

from taskboard.errors import QueryParameterError, ValidationError
from taskboard.models.user import User, UserPendingTask
from taskboard.repositories.base import BaseRepository
from taskboard.repositories.query_builder import FieldMap, build_filter, build_order_by, is_operator_document
from taskboard.schemas.user import UserFields

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "email must be unique"

# Link rows are written through the table, not the ORM, so loaded
# collections are never mutated behind the session.
_links = UserPendingTask.__table__

_INSERT_BY_DIALECT = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def _holds(task_id: Any) -> ColumnElement:
    if not isinstance(task_id, str):
        raise QueryParameterError("pendingTasks values must be strings")
    return User.pending_task_links.any(UserPendingTask.task_id == task_id)


def _holds_any(task_ids: Any) -> ColumnElement:
    if not isinstance(task_ids, list):
        raise QueryParameterError("pendingTasks $in/$nin expects a list")
    return User.pending_task_links.any(UserPendingTask.task_id.in_([str(t) for t in task_ids]))


def _pending_count() -> ColumnElement:
    return (
        select(func.count())
        .where(UserPendingTask.user_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )


def pending_tasks_filter(condition: Any) -> ColumnElement:
    """Membership tests on the pendingTasks set."""
    if isinstance(condition, list):
        # Exact set match
        wanted = list(dict.fromkeys(condition))
        return and_(*[_holds(t) for t in wanted], _pending_count() == len(wanted))
    if not is_operator_document(condition):
        return _holds(condition)

    clauses = []
    for op, value in condition.items():
        if op == "$eq":
            clauses.append(_holds(value))
        elif op == "$ne":
            clauses.append(not_(_holds(value)))
        elif op == "$in":
            clauses.append(_holds_any(value))
        elif op == "$nin":
            clauses.append(not_(_holds_any(value)))
        elif op == "$all":
            if not isinstance(value, list):
                raise QueryParameterError("pendingTasks $all expects a list")
            clauses.extend(_holds(t) for t in value)
        elif op == "$size":
            if not isinstance(value, int) or isinstance(value, bool):
                raise QueryParameterError("pendingTasks $size expects an integer")
            clauses.append(_pending_count() == value)
        elif op == "$exists":
            clauses.append(true() if value else false())
        else:
            raise QueryParameterError(f"Unsupported operator '{op}' on 'pendingTasks'")
    return and_(*clauses)


USER_FIELDS = FieldMap(
    {
        "_id": User.id,
        "name": User.name,
        "email": User.email,
        "dateCreated": User.date_created,
    },
    datetime_fields=("dateCreated",),
    array_filters={"pendingTasks": pending_tasks_filter},
)


class UserRepository(BaseRepository):
    """Repository for User store operations."""

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by ID, always re-read from the store (pendingTasks included)."""
        async with self.store_call("get user"):
            result = await self.db.execute(
                select(User)
                .where(User.id == user_id)
                .execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()

    async def get_by_email(self, email: str, exclude_user_id: Optional[str] = None) -> Optional[User]:
        """Get the user holding an email address, optionally ignoring one user."""
        if not email:
            return None
        query = select(User).where(User.email == email)
        if exclude_user_id:
            query = query.where(User.id != exclude_user_id)
        async with self.store_call("get user by email"):
            result = await self.db.execute(query.limit(1))
            return result.scalar_one_or_none()

    async def create(self, data: UserFields) -> User:
        """Insert a new user together with its pendingTasks set."""
        user = User(
            name=data.name,
            email=data.email,
            pending_task_links=[UserPendingTask(task_id=task_id) for task_id in data.pending_tasks],
        )
        async with self.store_call("create user"):
            self.db.add(user)
            try:
                await self.db.commit()
            except IntegrityError as exc:
                await self.db.rollback()
                raise ValidationError(DUPLICATE_EMAIL) from exc
        return user

    async def save(self, user: User, pending_tasks: Iterable[str]) -> User:
        """
        Overwrite a user document, replacing its whole pendingTasks set.

        Scalar fields are taken from the (modified) user object.
        """
        rows = [{"user_id": user.id, "task_id": task_id} for task_id in dict.fromkeys(pending_tasks)]
        async with self.store_call("save user"):
            try:
                self.db.add(user)
                await self.db.execute(delete(_links).where(_links.c.user_id == user.id))
                if rows:
                    await self.db.execute(insert(_links), rows)
                await self.db.commit()
            except IntegrityError as exc:
                await self.db.rollback()
                raise ValidationError(DUPLICATE_EMAIL) from exc
        return await self.get_by_id(user.id)

    async def delete(self, user: User) -> None:
        async with self.store_call("delete user"):
            await self.db.execute(delete(_links).where(_links.c.user_id == user.id))
            await self.db.execute(delete(User).where(User.id == user.id))
            await self.db.commit()

    async def add_pending_task(self, user_id: str, task_id: str) -> None:
        """
        Add a task id to one user's pendingTasks (add-to-set).

        A missing user or an id already in the set leaves the store unchanged.
        """
        listed = select(_links.c.task_id).where(_links.c.user_id == user_id, _links.c.task_id == task_id)
        source = select(User.id, literal(task_id)).where(User.id == user_id, ~listed.exists())
        async with self.store_call("add pending task"):
            await self.db.execute(self._insert_ignore(source))
            await self.db.commit()

    async def pull_pending_task(self, task_id: str, user_id: Optional[str] = None) -> int:
        """Remove a task id from one user's pendingTasks, or from every user when user_id is None."""
        stmt = delete(_links).where(_links.c.task_id == task_id)
        if user_id is not None:
            stmt = stmt.where(_links.c.user_id == user_id)
        return await self._delete_links(stmt, "pull pending task")

    async def find(
        self,
        where: Dict[str, Any],
        sort: Optional[Dict[str, Any]] = None,
        skip: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[User]:
        query = select(User).where(build_filter(where, USER_FIELDS))
        order_by = build_order_by(sort, USER_FIELDS)
        if order_by:
            query = query.order_by(*order_by)
        if skip:
            query = query.offset(skip)
        if limit:
            query = query.limit(limit)
        async with self.store_call("find users"):
            result = await self.db.execute(query.execution_options(populate_existing=True))
            return list(result.scalars().all())

    async def count_matching(self, where: Dict[str, Any]) -> int:
        query = select(func.count()).select_from(User).where(build_filter(where, USER_FIELDS))
        async with self.store_call("count users"):
            result = await self.db.execute(query)
            return result.scalar_one()

    async def _delete_links(self, stmt, operation: str) -> int:
        async with self.store_call(operation):
            result = await self.db.execute(stmt)
            await self.db.commit()
        logger.debug("%s removed %s entr(ies)", operation, result.rowcount)
        return result.rowcount

    def _insert_ignore(self, source):
        dialect = self.db.get_bind().dialect.name
        dialect_insert = _INSERT_BY_DIALECT.get(dialect)
        if dialect_insert is None:
            # The NOT EXISTS guard in source keeps the insert to add-to-set
            return insert(_links).from_select(["user_id", "task_id"], source)
        stmt = dialect_insert(_links).from_select(["user_id", "task_id"], source)
        return stmt.on_conflict_do_nothing()
