"""
Exception Handlers.

Every error leaving the API uses the ErrorResponse envelope:

    {"success": false, "error": {"code", "message", "details"}, "metadata": {...}}

Application errors carry their own code. Framework HTTPExceptions (unknown
routes, wrong methods, readiness failures) are mapped onto a code here so
clients never see a bare {"detail": ...} body.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notekeeper.backend.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DatabaseError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)
from notekeeper.backend.core.logging import get_logger
from notekeeper.backend.schemas.base import ErrorDetail, ErrorResponse, ResponseMetadata

logger = get_logger(__name__)

EXCEPTION_STATUS_MAP: dict[type[ApplicationError], int] = {
    NotFoundError: 404,
    ValidationError: 400,
    AuthenticationError: 401,
    AuthorizationError: 403,
    ConflictError: 409,
    ExternalServiceError: 502,
    DatabaseError: 503,
}

HTTP_STATUS_CODES: dict[int, str] = {
    401: "AUTH_REQUIRED",
    403: "AUTH_FORBIDDEN",
    404: "RES_NOT_FOUND",
    405: "REQ_METHOD_NOT_ALLOWED",
    503: "SYS_NOT_READY",
}


def _status_for(exc: ApplicationError) -> int:
    """Resolve the HTTP status for an exception, honouring subclasses."""
    for cls in type(exc).__mro__:
        if cls in EXCEPTION_STATUS_MAP:
            return EXCEPTION_STATUS_MAP[cls]
    return 500


def _get_request_id(request: Request) -> str | None:
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return request.headers.get("x-request-id")


def _error_response(
    request: Request,
    status_code: int,
    detail: ErrorDetail,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=detail,
        metadata=ResponseMetadata(request_id=_get_request_id(request)),
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


def _log_context(request: Request, **fields) -> dict:
    context = {"path": request.url.path, "method": request.method, **fields}
    request_id = _get_request_id(request)
    if request_id:
        context["request_id"] = request_id
    return context


async def application_error_handler(
    request: Request,
    exc: ApplicationError,
) -> JSONResponse:
    """Render an ApplicationError with the status its class maps to."""
    status_code = _status_for(exc)
    context = _log_context(request, code=exc.code, message=exc.message, status=status_code)

    if status_code >= 500:
        logger.error("Server error", extra=context)
    else:
        logger.warning("Client error", extra=context)

    detail = ErrorDetail(code=exc.code, message=exc.message)
    details = getattr(exc, "details", None)
    if details:
        detail.details = details

    return _error_response(request, status_code, detail)


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Wrap framework HTTPExceptions in the error envelope."""
    status_code = exc.status_code
    code = HTTP_STATUS_CODES.get(status_code, f"HTTP_{status_code}")

    if isinstance(exc.detail, dict):
        message = str(exc.detail.get("status", "Request failed"))
        details = exc.detail
    else:
        message = str(exc.detail)
        details = None

    level = "error" if status_code >= 500 else "info"
    getattr(logger, level)("HTTP error", extra=_log_context(request, code=code, status=status_code))

    return _error_response(
        request,
        status_code,
        ErrorDetail(code=code, message=message, details=details),
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Flatten pydantic's error list into field/message/type triples."""
    errors = exc.errors()
    validation_errors = [
        {
            "field": ".".join(str(loc) for loc in err.get("loc", [])),
            "message": err.get("msg", "Validation error"),
            "type": err.get("type", "unknown"),
        }
        for err in errors
    ]

    logger.warning(
        "Request validation failed",
        extra=_log_context(request, error_count=len(errors)),
    )

    return _error_response(
        request,
        422,
        ErrorDetail(
            code="VAL_REQUEST_INVALID",
            message="Request validation failed",
            details={"validation_errors": validation_errors},
        ),
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Last resort. The exception text is logged, never returned."""
    logger.exception(
        "Unhandled exception",
        extra=_log_context(request, exception_type=type(exc).__name__),
    )
    return _error_response(
        request,
        500,
        ErrorDetail(code="SYS_INTERNAL_ERROR", message="An unexpected error occurred"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApplicationError, application_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    logger.debug("Exception handlers registered")
