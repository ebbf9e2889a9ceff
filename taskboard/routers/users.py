"""
User router - API endpoints for users.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.db.session import get_db
from taskboard.errors import build_envelope
from taskboard.models.user import User
from taskboard.schemas.user import UserPayload, UserRead
from taskboard.services.user_service import UserService
from taskboard.utils.query_params import CollectionQuery, apply_projection, collection_query, select_only

router = APIRouter(prefix="/users", tags=["users"])


def _document(user: User, select: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return apply_projection(UserRead.model_validate(user).to_document(), select)


@router.get("")
async def list_users(
    query: CollectionQuery = Depends(collection_query),
    db: AsyncSession = Depends(get_db),
):
    """List users with where/sort/select/skip/limit/count."""
    service = UserService(db)
    if query.count:
        return build_envelope("OK", await service.count_users(query))
    users = await service.list_users(query)
    return build_envelope("OK", [_document(user, query.select) for user in users])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    data: Optional[UserPayload] = None,
    db: AsyncSession = Depends(get_db),
):
    """Create a new user."""
    service = UserService(db)
    user = await service.create_user(data or UserPayload())
    return build_envelope("User created", _document(user))


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    select: Optional[Dict[str, Any]] = Depends(select_only),
    db: AsyncSession = Depends(get_db),
):
    """Get a user by ID."""
    service = UserService(db)
    user = await service.get_user(user_id)
    return build_envelope("OK", _document(user, select))


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    data: Optional[UserPayload] = None,
    db: AsyncSession = Depends(get_db),
):
    """Replace a user."""
    service = UserService(db)
    user = await service.update_user(user_id, data or UserPayload())
    return build_envelope("User updated", _document(user))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Delete a user."""
    service = UserService(db)
    await service.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
