"""
Smoke test against the database configured by DATABASE_URL.

Run with RUN_DB_TESTS=1 after `alembic upgrade head`.
"""

import asyncio
import uuid

import pytest

from taskboard.db.session import AsyncSessionLocal
from taskboard.services.task_service import TaskService
from taskboard.services.user_service import UserService
from tests.conftest import task_payload, user_payload


@pytest.mark.db
def test_assignment_roundtrip_on_configured_database():
    async def main():
        async with AsyncSessionLocal() as db:
            users = UserService(db)
            tasks = TaskService(db)
            tag = uuid.uuid4().hex[:8]

            alice = await users.create_user(user_payload(f"Alice {tag}", f"alice.{tag}@example.com"))
            task = await tasks.create_task(task_payload(f"task-{tag}", assigned_user=alice.id))
            assert (await users.get_user(alice.id)).pending_tasks == [task.id]

            await users.delete_user(alice.id)
            task = await tasks.get_task(task.id)
            assert task.assigned_user == ""
            await tasks.delete_task(task.id)

    asyncio.run(main())
