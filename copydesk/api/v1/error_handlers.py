"""Error handlers for consistent API error responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from copydesk.api.v1.exceptions import (
    APIError,
    ConflictError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from copydesk.domain.models.errors import (
    ContentStoreError,
    EditorNotLoadedError,
    EmailEditRejectedError,
    EmailTableError,
    InvalidSectionOperationError,
    PatchApplicationError,
    RowOrderError,
    SectionNotFoundError,
)


logger = logging.getLogger(__name__)


def to_api_error(exc: EmailTableError) -> APIError:
    """Map a domain error onto the API error family."""
    if isinstance(exc, SectionNotFoundError):
        return NotFoundError("section", exc.section_name)
    if isinstance(exc, EditorNotLoadedError):
        return ConflictError(str(exc), error_code="CAMPAIGN_NOT_LOADED")
    if isinstance(exc, PatchApplicationError):
        return ConflictError(str(exc), error_code="PATCH_REJECTED")
    if isinstance(exc, RowOrderError):
        return ConflictError(
            str(exc),
            error_code="INVALID_ROW_ORDER",
            details={
                "missing": exc.missing,
                "unexpected": exc.unexpected,
                "duplicated": exc.duplicated,
            },
        )
    if isinstance(exc, (InvalidSectionOperationError, EmailEditRejectedError)):
        return ValidationError(str(exc))
    if isinstance(exc, ContentStoreError):
        return ServiceUnavailableError(
            "Task tracker",
            message=f"Could not save to the task tracker: {exc}",
            details={"status_code": exc.status_code} if exc.status_code else None,
        )
    return ConflictError(str(exc))


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.to_dict(),
        },
    )


async def email_table_error_handler(request: Request, exc: EmailTableError) -> JSONResponse:
    """Handle domain errors that escaped a router."""
    api_error = to_api_error(exc)
    if api_error.status_code >= 500:
        logger.warning(f"{api_error.error_code} on {request.url.path}: {exc}")
    return await api_error_handler(request, api_error)


async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle FastAPI validation errors."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": {
                "error_code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": {"errors": errors},
            },
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers with the app."""
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(EmailTableError, email_table_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
