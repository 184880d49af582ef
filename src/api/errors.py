"""Exception handlers turning domain failures into the JSON error envelope."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from src.domain.errors import (
    AlreadyExistsError,
    AuthenticationError,
    DomainError,
    DuplicateReviewError,
    IneligibleStateError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
)

logger = structlog.get_logger()

# Checked in order; subclasses before their bases
STATUS_CODES: tuple[tuple[type[DomainError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (IneligibleStateError, status.HTTP_409_CONFLICT),
    (DuplicateReviewError, status.HTTP_409_CONFLICT),
    (AlreadyExistsError, status.HTTP_409_CONFLICT),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_code_for(exc: DomainError) -> int:
    for error_type, code in STATUS_CODES:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _envelope(code: int, message: str, **extra: object) -> JSONResponse:
    return JSONResponse(status_code=code, content={"success": False, "message": message, **extra})


async def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    code = status_code_for(exc)
    log = logger.error if code >= 500 else logger.info
    log("request_failed", error=type(exc).__name__, message=exc.message, status_code=code)
    return _envelope(code, exc.message)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    missing = any(error.get("type") == "missing" for error in exc.errors())
    message = "All fields are required" if missing else "Invalid request data"
    logger.info("request_invalid", problems=problems)
    return _envelope(status.HTTP_400_BAD_REQUEST, message, errors=problems)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request_crashed", error=type(exc).__name__)
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = _envelope(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
