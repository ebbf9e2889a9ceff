"""where/sort/select parsing and their translation into store queries."""

import pytest

from taskboard.errors import QueryParameterError
from taskboard.services.task_service import TaskService
from taskboard.services.user_service import UserService
from taskboard.utils.query_params import CollectionQuery, apply_projection, parse_json_param
from tests.conftest import run_scenario, task_payload, user_payload

DOC = {"_id": "abc", "name": "Task", "completed": False, "deadline": "2030-01-15T12:00:00"}


@pytest.mark.unit
def test_parse_json_param():
    assert parse_json_param("where", None) is None
    assert parse_json_param("where", '{"completed": true}') == {"completed": True}
    with pytest.raises(QueryParameterError) as excinfo:
        parse_json_param("where", "{completed: true")
    assert excinfo.value.message == "Invalid JSON in query parameter"
    with pytest.raises(QueryParameterError):
        parse_json_param("sort", "[1, 2]")


@pytest.mark.unit
def test_projection_inclusion_keeps_id():
    assert apply_projection(DOC, {"name": 1}) == {"_id": "abc", "name": "Task"}
    assert apply_projection(DOC, {"name": 1, "_id": 0}) == {"name": "Task"}


@pytest.mark.unit
def test_projection_exclusion():
    assert apply_projection(DOC, {"_id": 0}) == {"name": "Task", "completed": False, "deadline": "2030-01-15T12:00:00"}
    assert apply_projection(DOC, {"deadline": 0, "completed": 0}) == {"_id": "abc", "name": "Task"}


@pytest.mark.unit
def test_projection_rejects_mixed_modes():
    with pytest.raises(QueryParameterError):
        apply_projection(DOC, {"name": 1, "completed": 0})


def _seed(db):
    async def seed():
        users = UserService(db)
        tasks = TaskService(db)
        alice = await users.create_user(user_payload("Alice", "alice@example.com"))
        bob = await users.create_user(user_payload("Bob", "bob@example.com"))
        await tasks.create_task(task_payload("a", assigned_user=alice.id, deadline="2030-01-01T00:00:00Z"))
        await tasks.create_task(task_payload("b", assigned_user=alice.id, deadline="2030-02-01T00:00:00Z"))
        await tasks.create_task(task_payload("c", completed=True, deadline="2030-03-01T00:00:00Z"))
        return alice, bob
    return seed()


def test_task_filters(session_factory):
    async def scenario(db):
        alice, _ = await _seed(db)
        tasks = TaskService(db)

        async def names(where, **kwargs):
            found = await tasks.list_tasks(CollectionQuery(where=where, **kwargs))
            return [t.name for t in found]

        assert await names({"completed": True}) == ["c"]
        assert await names({"assignedUser": alice.id}, sort={"name": -1}) == ["b", "a"]
        assert await names({"name": {"$in": ["a", "c"]}}, sort={"name": 1}) == ["a", "c"]
        assert await names({"name": {"$nin": ["a"]}}, sort={"name": 1}) == ["b", "c"]
        assert await names({"deadline": {"$gte": "2030-02-01T00:00:00Z"}}, sort={"deadline": 1}) == ["b", "c"]
        assert await names({"$or": [{"name": "a"}, {"completed": True}]}, sort={"name": 1}) == ["a", "c"]
        assert await names({}, sort={"name": 1}, skip=1, limit=1) == ["b"]
        assert await tasks.count_tasks(CollectionQuery(where={"assignedUserName": "unassigned"})) == 1

    run_scenario(session_factory, scenario)


def test_task_default_limit(session_factory):
    async def scenario(db):
        await _seed(db)
        tasks = TaskService(db)
        assert len(await tasks.list_tasks(CollectionQuery(), default_limit=2)) == 2
        # limit=0 means no limit
        assert len(await tasks.list_tasks(CollectionQuery(limit=0), default_limit=2)) == 3

    run_scenario(session_factory, scenario)


def test_user_pending_task_filters(session_factory):
    async def scenario(db):
        alice, _ = await _seed(db)
        users = UserService(db)
        task_id = (await users.get_user(alice.id)).pending_tasks[0]

        async def names(where):
            found = await users.list_users(CollectionQuery(where=where, sort={"name": 1}))
            return [u.name for u in found]

        assert await names({"pendingTasks": task_id}) == ["Alice"]
        assert await names({"pendingTasks": {"$size": 0}}) == ["Bob"]
        assert await names({"pendingTasks": {"$nin": [task_id]}}) == ["Bob"]
        assert await names({"email": {"$ne": "alice@example.com"}}) == ["Bob"]

    run_scenario(session_factory, scenario)


def test_unknown_field_rejected(session_factory):
    async def scenario(db):
        with pytest.raises(QueryParameterError):
            await TaskService(db).list_tasks(CollectionQuery(where={"owner": "x"}))
        with pytest.raises(QueryParameterError):
            await UserService(db).list_users(CollectionQuery(where={"name": {"$regex": "A"}}))
        with pytest.raises(QueryParameterError):
            await UserService(db).list_users(CollectionQuery(sort={"pendingTasks": 1}))

    run_scenario(session_factory, scenario)
