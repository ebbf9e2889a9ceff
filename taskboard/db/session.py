"""
Database session and engine configuration.

This file sets up the async database connection using SQLAlchemy.
Repositories commit after every write, so a session here never wraps
more than one store operation in a transaction.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker

from taskboard.core.config import settings
from taskboard.db.base import Base


# Create the async database engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,  # When DEBUG=True, prints SQL queries to console
    future=True,
)

# Create a session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Keeps data accessible after commit
)

# Alias used by scripts and the opt-in database tests
AsyncSessionLocal = async_session_maker


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session.
    
    Used by FastAPI to provide a database connection to API endpoints.
    Pending work is rolled back if the request fails; anything a repository
    already committed stays committed.
    """
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def create_schema(bind: AsyncEngine | None = None) -> None:
    """Create any missing tables for the registered models."""
    import taskboard.models  # noqa: F401  (registers tables on Base.metadata)

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
