"""Application errors and the response envelope they map to."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def build_envelope(message: str, data: Any = None) -> Dict[str, Any]:
    """Every non-204 response body has this shape."""
    return {"message": message, "data": data}


class AppError(Exception):
    """Application-scoped error carrying the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def payload(self) -> Dict[str, Any]:
        return build_envelope(self.message)


class ValidationError(AppError):
    """Missing required field, dangling reference or duplicate email. No writes precede it."""

    status_code = 400

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Validation error: {reason}")


class NotFoundError(AppError):
    """The id does not resolve to a stored document."""

    status_code = 404

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class StoreError(AppError):
    """
    A single store call failed.

    Steps committed before the failing one stay committed; callers converge
    the data by re-issuing the update or delete.
    """

    status_code = 500

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__("Server error")


class QueryParameterError(AppError):
    """A where/sort/select/skip/limit parameter could not be used."""

    status_code = 400


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.message)
    else:
        logger.warning("Request rejected (%s): %s", exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Malformed request: %s", exc.errors())
    return JSONResponse(status_code=400, content=build_envelope("Validation error: check fields"))


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Error"
    return JSONResponse(status_code=exc.status_code, content=build_envelope(message), headers=exc.headers)
