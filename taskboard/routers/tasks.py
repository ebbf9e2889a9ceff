"""
Task router - API endpoints for tasks.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.config import settings
from taskboard.db.session import get_db
from taskboard.errors import build_envelope
from taskboard.models.task import Task
from taskboard.schemas.task import TaskPayload, TaskRead
from taskboard.services.task_service import TaskService
from taskboard.utils.query_params import CollectionQuery, apply_projection, collection_query, select_only

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _document(task: Task, select: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return apply_projection(TaskRead.model_validate(task).to_document(), select)


@router.get("")
async def list_tasks(
    query: CollectionQuery = Depends(collection_query),
    db: AsyncSession = Depends(get_db),
):
    """
    List tasks.
    
    Supports where/sort/select/skip/limit/count; limit defaults to
    TASKS_DEFAULT_LIMIT.
    """
    service = TaskService(db)
    if query.count:
        return build_envelope("OK", await service.count_tasks(query))
    tasks = await service.list_tasks(query, default_limit=settings.TASKS_DEFAULT_LIMIT)
    return build_envelope("OK", [_document(task, query.select) for task in tasks])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(
    data: Optional[TaskPayload] = None,
    db: AsyncSession = Depends(get_db),
):
    """Create a new task."""
    service = TaskService(db)
    task = await service.create_task(data or TaskPayload())
    return build_envelope("Task created", _document(task))


@router.get("/{task_id}")
async def get_task(
    task_id: str,
    select: Optional[Dict[str, Any]] = Depends(select_only),
    db: AsyncSession = Depends(get_db),
):
    """Get a task by ID."""
    service = TaskService(db)
    task = await service.get_task(task_id)
    return build_envelope("OK", _document(task, select))


@router.put("/{task_id}")
async def update_task(
    task_id: str,
    data: Optional[TaskPayload] = None,
    db: AsyncSession = Depends(get_db),
):
    """Replace a task."""
    service = TaskService(db)
    task = await service.update_task(task_id, data or TaskPayload())
    return build_envelope("Task updated", _document(task))


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Delete a task."""
    service = TaskService(db)
    await service.delete_task(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
