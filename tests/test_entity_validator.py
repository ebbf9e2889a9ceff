"""Entity validator: required fields, defaults and reference checks."""

import pytest

from taskboard.errors import ValidationError
from taskboard.schemas.task import TaskPayload
from taskboard.schemas.user import UserPayload
from taskboard.services.entity_validator import EntityValidator
from taskboard.services.user_service import UserService
from tests.conftest import DEADLINE, run_scenario, task_payload, user_payload


@pytest.mark.unit
@pytest.mark.parametrize(
    "payload",
    [
        TaskPayload(deadline=DEADLINE),
        TaskPayload(name="", deadline=DEADLINE),
        TaskPayload(name="No deadline"),
    ],
)
def test_task_requires_name_and_deadline(payload):
    validator = EntityValidator(db=None)
    with pytest.raises(ValidationError) as excinfo:
        validator.check_task_fields(payload)
    assert excinfo.value.reason == "name and deadline are required"


@pytest.mark.unit
def test_whitespace_names_are_present():
    validator = EntityValidator(db=None)

    assert validator.check_task_fields(task_payload("   ")).name == "   "
    assert validator.check_user_fields(user_payload(" ", "blank@example.com")).name == " "


@pytest.mark.unit
def test_task_defaults():
    fields = EntityValidator(db=None).check_task_fields(task_payload("Plan sprint"))

    assert fields.description == ""
    assert fields.completed is False
    assert fields.assigned_user == ""
    assert fields.assigned_user_name == "unassigned"


@pytest.mark.unit
@pytest.mark.parametrize(
    "payload",
    [
        UserPayload(email="solo@example.com"),
        UserPayload(name="Nobody"),
        UserPayload(name="", email="blank@example.com"),
    ],
)
def test_user_requires_name_and_email(payload):
    with pytest.raises(ValidationError) as excinfo:
        EntityValidator(db=None).check_user_fields(payload)
    assert excinfo.value.reason == "name and email are required"


@pytest.mark.unit
def test_user_pending_tasks_deduplicated_in_order():
    fields = EntityValidator(db=None).check_user_fields(
        user_payload("Ada", pending_tasks=["t2", "t1", "t2", "t1", "t3"])
    )
    assert fields.pending_tasks == ["t2", "t1", "t3"]


@pytest.mark.unit
def test_user_pending_tasks_default_empty():
    fields = EntityValidator(db=None).check_user_fields(user_payload("Ada"))
    assert fields.pending_tasks == []


def test_missing_assignee_is_rejected(session_factory):
    async def scenario(db):
        with pytest.raises(ValidationError) as excinfo:
            await EntityValidator(db).validate_task(task_payload(assigned_user="does-not-exist"))
        return excinfo.value.reason

    assert run_scenario(session_factory, scenario) == "assignedUser does not exist"


def test_assignee_name_comes_from_user(session_factory):
    async def scenario(db):
        user = await UserService(db).create_user(user_payload("Grace Hopper"))
        fields = await EntityValidator(db).validate_task(
            task_payload(assigned_user=user.id, assigned_user_name="Someone Else")
        )
        return fields.assigned_user_name

    assert run_scenario(session_factory, scenario) == "Grace Hopper"


def test_client_name_dropped_without_assignee(session_factory):
    async def scenario(db):
        fields = await EntityValidator(db).validate_task(task_payload(assigned_user_name="Ghost"))
        return fields.assigned_user_name

    assert run_scenario(session_factory, scenario) == "unassigned"


def test_duplicate_email_detected(session_factory):
    async def scenario(db):
        service = UserService(db)
        first = await service.create_user(user_payload("Ada", "ada@example.com"))
        validator = EntityValidator(db)

        with pytest.raises(ValidationError) as excinfo:
            await validator.validate_user(user_payload("Other Ada", "ada@example.com"))
        # The owner of the address may keep it
        await validator.validate_user(user_payload("Ada L.", "ada@example.com"), user_id=first.id)
        return excinfo.value.reason

    assert run_scenario(session_factory, scenario) == "email must be unique"
