"""
Exception-to-response mapping.

Every error leaving the API is an RFC 7807 problem document:

    {type, title, status, detail, instance, traceId, errors?}

The table below is the single place where domain errors meet HTTP.
Unexpected exceptions are logged with their traceback and surface as a
bare 500 without internal detail.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from trestle.core.errors import (
    BusinessRuleError,
    NotFoundError,
    TrestleError,
    UnauthorizedError,
    UnsupportedVersionError,
    ValidationError,
)
from trestle.core.logging import get_logger
from trestle.schemas.codec import collect_errors

logger = get_logger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"

# error class -> (status, title, type slug)
ERROR_TABLE: dict[type[TrestleError], tuple[int, str, str]] = {
    NotFoundError: (404, "Not Found", "not-found"),
    ValidationError: (400, "Validation Failed", "validation-failed"),
    BusinessRuleError: (409, "Business Rule Violation", "business-rule-violation"),
    UnauthorizedError: (401, "Unauthorized", "unauthorized"),
    UnsupportedVersionError: (400, "Unsupported API Version", "unsupported-api-version"),
}

# Plain HTTP errors raised by routing (unknown path, wrong method, ...)
_HTTP_STATUS_INFO: dict[int, tuple[str, str]] = {
    400: ("Bad Request", "bad-request"),
    401: ("Unauthorized", "unauthorized"),
    403: ("Forbidden", "forbidden"),
    404: ("Not Found", "not-found"),
    405: ("Method Not Allowed", "method-not-allowed"),
    409: ("Conflict", "conflict"),
    415: ("Unsupported Media Type", "unsupported-media-type"),
    500: ("Internal Server Error", "internal-server-error"),
}


class ProblemDetails(BaseModel):
    """RFC 7807 problem document."""
    type: str
    title: str
    status: int
    detail: str
    instance: str
    trace_id: str | None = Field(None, serialization_alias="traceId")
    errors: dict[str, list[str]] | None = None


def classify(exc: TrestleError) -> tuple[int, str, str]:
    for error_cls in type(exc).__mro__:
        if error_cls in ERROR_TABLE:
            return ERROR_TABLE[error_cls]
    return 500, "Internal Server Error", "internal-server-error"


def problem_response(
    request: Request,
    status: int,
    title: str,
    slug: str,
    detail: str,
    errors: dict[str, list[str]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    settings = request.app.state.container.settings
    problem = ProblemDetails(
        type=f"{settings.API_BASE_URL}/errors/{slug}",
        title=title,
        status=status,
        detail=detail,
        instance=str(request.url.path),
        trace_id=getattr(request.state, "trace_id", None),
        errors=errors or None,
    )
    return JSONResponse(
        status_code=status,
        content=problem.model_dump(by_alias=True, exclude_none=True),
        headers=headers or None,
        media_type=PROBLEM_MEDIA_TYPE,
    )


async def trestle_error_handler(request: Request, exc: TrestleError) -> JSONResponse:
    status, title, slug = classify(exc)
    logger.info("request.rejected", error=type(exc).__name__, status=status, detail=exc.detail)
    return problem_response(
        request,
        status,
        title,
        slug,
        exc.detail,
        errors=getattr(exc, "errors", None),
        headers=exc.headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = collect_errors(exc)
    return problem_response(
        request,
        400,
        "Validation Failed",
        "validation-failed",
        "One or more validation errors occurred.",
        errors=errors,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    title, slug = _HTTP_STATUS_INFO.get(exc.status_code, ("Error", "error"))
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return problem_response(
        request,
        exc.status_code,
        title,
        slug,
        detail,
        headers=exc.headers,
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """A constraint the services did not pre-check (e.g. a concurrent duplicate)."""
    logger.warning("request.integrity_error", error=str(exc.orig))
    return problem_response(
        request,
        409,
        "Business Rule Violation",
        "business-rule-violation",
        "The change conflicts with existing data.",
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "request.failed",
        method=request.method,
        path=request.url.path,
        exc_info=exc,
    )
    return problem_response(
        request,
        500,
        "Internal Server Error",
        "internal-server-error",
        "An unexpected error occurred.",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TrestleError, trestle_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
