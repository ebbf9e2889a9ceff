"""
Shared repository plumbing.

Each public repository method is one store call: it commits on its own and
never joins a transaction with another call.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.errors import StoreError

logger = logging.getLogger(__name__)


class BaseRepository:
    """Holds the session and turns driver failures into StoreError."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def store_call(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.exception("Store call failed: %s", operation)
            raise StoreError(operation) from exc
