"""Uniform ``{success, data|message}`` response envelope and error handlers."""

from typing import Any, Generic, TypeVar

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from openspace.core.exceptions import OpenSpaceError

logger = structlog.get_logger()

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Response/request model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(CamelModel, Generic[DataT]):
    """Successful response wrapper."""

    success: bool = True
    data: DataT
    message: str | None = None


def failure(
    status_code: int,
    message: str,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> JSONResponse:
    """Build a failure envelope; ``success: false`` is the authoritative signal."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **jsonable_encoder(extra)},
        headers=headers,
    )


async def openspace_error_handler(request: Request, exc: OpenSpaceError) -> JSONResponse:
    if exc.retryable:
        return failure(exc.status_code, exc.message, retryable=True)
    return failure(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return failure(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return failure(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Invalid request parameters",
        errors=exc.errors(),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("database_error", error_type=type(exc).__name__)
    return failure(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Database temporarily unavailable, please retry",
        retryable=True,
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return failure(
        status.HTTP_429_TOO_MANY_REQUESTS,
        f"Rate limit exceeded: {exc.detail}",
        retryable=True,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Route every error raised under the app into a failure envelope."""
    app.add_exception_handler(OpenSpaceError, openspace_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, database_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)  # type: ignore[arg-type]
