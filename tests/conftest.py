"""
Pytest configuration and shared fixtures.

Most tests run against a throwaway SQLite file per test. Tests marked `db`
run against DATABASE_URL and are skipped unless RUN_DB_TESTS=1.
"""

import asyncio
import os
from datetime import datetime, timezone
from typing import Awaitable, Callable, TypeVar

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from taskboard.db.session import create_schema
from taskboard.models.task import UNASSIGNED_NAME
from taskboard.repositories.task_repository import TaskRepository
from taskboard.repositories.user_repository import UserRepository
from taskboard.schemas.task import TaskPayload
from taskboard.schemas.user import UserPayload

T = TypeVar("T")

DEADLINE = datetime(2030, 1, 15, 12, 0, tzinfo=timezone.utc)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
    config.addinivalue_line("markers", "db: requires the database configured by DATABASE_URL")


def pytest_collection_modifyitems(config, items):
    run_db = os.environ.get("RUN_DB_TESTS") == "1"

    skip_db = pytest.mark.skip(reason="db tests skipped by default; set RUN_DB_TESTS=1 to enable")

    for item in items:
        if "db" in item.keywords and not run_db:
            item.add_marker(skip_db)


@pytest.fixture
def session_factory(tmp_path):
    """Session factory bound to a fresh SQLite database."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'taskboard-test.db'}",
        poolclass=NullPool,
    )
    asyncio.run(create_schema(engine))
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    asyncio.run(engine.dispose())


def run_scenario(session_factory, scenario: Callable[[AsyncSession], Awaitable[T]]) -> T:
    """Run an async scenario with one session, the way a request handler would."""
    async def main():
        async with session_factory() as db:
            return await scenario(db)
    return asyncio.run(main())


def task_payload(name: str = "Write report", **fields) -> TaskPayload:
    fields.setdefault("deadline", DEADLINE)
    return TaskPayload(name=name, **fields)


def user_payload(name: str, email: str | None = None, pending_tasks=None) -> UserPayload:
    email = email or f"{name.lower().replace(' ', '.')}@example.com"
    return UserPayload(name=name, email=email, pending_tasks=pending_tasks)


async def assert_invariants(db: AsyncSession) -> None:
    """Check that Task assignment fields and User.pendingTasks agree."""
    tasks = await TaskRepository(db).find({})
    users = {user.id: user for user in await UserRepository(db).find({})}
    holders = {}
    for user in users.values():
        for task_id in user.pending_tasks:
            holders.setdefault(task_id, set()).add(user.id)

    for task in tasks:
        if task.assigned_user:
            assert task.assigned_user in users, f"{task} references a missing user"
            owner = users[task.assigned_user]
            assert task.assigned_user_name == owner.name
        else:
            assert task.assigned_user_name == UNASSIGNED_NAME

        if task.assigned_user and not task.completed:
            assert task.id in users[task.assigned_user].pending_tasks
        else:
            assert task.id not in holders, f"{task} still pending for {holders.get(task.id)}"
