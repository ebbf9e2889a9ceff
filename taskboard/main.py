"""
Main FastAPI application.

This is the entry point for the API server:
    uvicorn taskboard.main:app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard.core.config import settings
from taskboard.core.logging_config import configure_logging
from taskboard.db.session import create_schema, engine
from taskboard.errors import (
    AppError,
    app_error_handler,
    http_exception_handler,
    request_validation_handler,
)
from taskboard.routers import home, tasks, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.
    
    - On startup: configure logging and create missing tables.
    - On shutdown: release pooled connections.
    """
    configure_logging()
    logger.info("Starting %s...", settings.APP_NAME)
    if settings.CREATE_SCHEMA_ON_STARTUP:
        await create_schema()
    
    yield
    
    logger.info("Shutting down %s...", settings.APP_NAME)
    await engine.dispose()


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.APP_NAME,
        description="Task and user assignment API with two-way reference sync",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_methods=["POST", "GET", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["X-Requested-With", "X-HTTP-Method-Override", "Content-Type", "Accept"],
    )

    application.add_exception_handler(AppError, app_error_handler)
    application.add_exception_handler(RequestValidationError, request_validation_handler)
    application.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Include routers (API endpoints), all under /api
    application.include_router(home.router, prefix="/api", tags=["Home"])
    application.include_router(users.router, prefix="/api")
    application.include_router(tasks.router, prefix="/api")

    return application


app = create_app()
