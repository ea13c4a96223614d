"""Application exceptions and the FastAPI handlers that render them.

Every error leaves the API in the same envelope (see ``create_error_response``).
Unexpected exceptions are logged with their traceback and reported with a
generic message.
"""

import logging
from typing import Union

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.workflow.summary import StageNotEditableError

logger = logging.getLogger(__name__)


class MycoFarmException(Exception):
    """Base exception for MycoFarm application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        details: Union[dict, list, None] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class BusinessLogicError(MycoFarmException):
    """Exception for business logic violations."""

    def __init__(self, message: str, error_code: str = "BUSINESS_LOGIC_ERROR"):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code=error_code,
        )


class ResourceNotFoundError(MycoFarmException):
    """Exception for resources not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="RESOURCE_NOT_FOUND",
        )


class InvalidStageError(MycoFarmException):
    """A stage key outside the fixed order (or a batch stuck on one)."""

    def __init__(self, stage: str, message: str | None = None):
        super().__init__(
            message=message or f"Unknown production stage: {stage}",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="INVALID_STAGE",
            details={"stage": stage},
        )


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    details: Union[dict, list, None] = None,
) -> JSONResponse:
    """Error envelope: ``{"error": {"code", "message", "details"?}}``."""
    content = {"error": {"code": error_code, "message": message}}
    if details:
        content["error"]["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _where(request: Request) -> dict:
    return {"path": request.url.path, "method": request.method}


# Unique-constraint column → (error code, message)
_UNIQUE_VIOLATIONS = {
    "batch_number": (
        "DUPLICATE_BATCH_NUMBER",
        "A production batch with this batch number already exists",
    ),
}


async def mycofarm_exception_handler(request: Request, exc: MycoFarmException) -> JSONResponse:
    logger.warning(
        f"{exc.error_code} on {request.url.path}: {exc.message}",
        extra={"error_code": exc.error_code, **_where(request)},
    )
    return create_error_response(exc.status_code, exc.message, exc.error_code, exc.details)


async def stage_not_editable_handler(request: Request, exc: StageNotEditableError) -> JSONResponse:
    """Edits are only accepted for the batch's current stage."""
    logger.info(f"Rejected edit of non-current stage {exc.stage}", extra=_where(request))

    details = {"stage": exc.stage}
    if exc.status is not None:
        details["status"] = exc.status.value
    return create_error_response(
        status.HTTP_409_CONFLICT, str(exc), "STAGE_NOT_EDITABLE", details
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code}: {exc.detail}", extra=_where(request))
    return create_error_response(exc.status_code, str(exc.detail), f"HTTP_{exc.status_code}")


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Request body/query errors, one entry per offending field."""
    errors = [
        {
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Validation error on {request.url.path}", extra={"errors": errors, **_where(request)})
    return create_error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        "VALIDATION_ERROR",
        {"errors": errors},
    )


async def database_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Constraint violations that slipped past the service-level checks."""
    logger.error(f"Integrity error on {request.url.path}: {exc}", extra=_where(request))

    error_msg = str(exc.orig if exc.orig is not None else exc).lower()
    error_code, message = "INTEGRITY_ERROR", "Database constraint violation"
    if "unique" in error_msg:
        error_code, message = "DUPLICATE_RECORD", "A record with this value already exists"
        for column, (code, text) in _UNIQUE_VIOLATIONS.items():
            if column in error_msg:
                error_code, message = code, text
    elif "not null" in error_msg:
        error_code, message = "NULL_VALUE_NOT_ALLOWED", "Required field is missing"
    elif "foreign key" in error_msg:
        error_code, message = "UNKNOWN_BATCH", "Referenced production batch does not exist"

    return create_error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, message, error_code)


async def operational_exception_handler(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error(f"Database unavailable on {request.url.path}: {exc}", extra=_where(request))
    return create_error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Database temporarily unavailable. Please try again.",
        "DATABASE_UNAVAILABLE",
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled exception on {request.url.path}", extra=_where(request))
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
        "INTERNAL_SERVER_ERROR",
    )


def register_exception_handlers(app):
    """Register all custom exception handlers with FastAPI app."""
    app.add_exception_handler(MycoFarmException, mycofarm_exception_handler)
    app.add_exception_handler(StageNotEditableError, stage_not_editable_handler)
    # fastapi.HTTPException subclasses Starlette's
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, database_exception_handler)
    app.add_exception_handler(OperationalError, operational_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
