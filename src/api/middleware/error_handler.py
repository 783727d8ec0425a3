"""Global exception handlers for the FastAPI application.

This module provides centralized exception handling for all API endpoints,
ensuring consistent error responses and proper logging of exceptions.

Error documents are always JSON, whatever format the endpoint answers in.
"""

import traceback
from collections.abc import Mapping
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from src.api.constants import (
    HTTP_400_BAD_REQUEST,
    HTTP_499_CLIENT_CLOSED_REQUEST,
    HTTP_500_INTERNAL_SERVER_ERROR,
)
from src.api.schemas.errors import ErrorResponse, ServiceInfo
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.context import RequestContext, generate_request_id
from src.core.error_context import sanitize_error_context
from src.core.exceptions import (
    ErrorCode,
    PacksendError,
    ResponseCancelledError,
    Severity,
    ValidationFailureError,
)


def get_service_info(settings: Settings) -> ServiceInfo:
    """Create ServiceInfo from application settings.

    Args:
        settings: Application settings

    Returns:
        ServiceInfo: Instance with current service metadata
    """
    return ServiceInfo(
        name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )


def status_code_for(exc: PacksendError) -> int:
    """Map a PacksendError to its HTTP status code."""
    if isinstance(exc, ValidationFailureError):
        return HTTP_400_BAD_REQUEST
    if isinstance(exc, ResponseCancelledError):
        return HTTP_499_CLIENT_CLOSED_REQUEST
    return HTTP_500_INTERNAL_SERVER_ERROR


def request_log_context(
    request: Request, status_code: int, **extra: Any  # noqa: ANN401
) -> dict[str, Any]:
    """Build the fields every error log line carries.

    Args:
        request: The request being answered
        status_code: Status of the error document sent back
        **extra: Handler-specific fields

    Returns:
        dict[str, Any]: Fields to pass to the logger
    """
    return {
        "request_method": request.method,
        "request_path": str(request.url.path),
        "endpoint": RequestContext.get_endpoint_name(),
        "status_code": status_code,
        **extra,
    }


def error_document(
    status_code: int,
    error_code: str,
    message: str,
    severity: str,
    *,
    details: dict[str, Any] | None = None,
    debug_info: dict[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
) -> ORJSONResponse:
    """Render an ErrorResponse for the current request as JSON."""
    error_response = ErrorResponse(
        error_code=error_code,
        message=message,
        details=details,
        correlation_id=RequestContext.get_correlation_id(),
        request_id=generate_request_id(),
        severity=severity,
        service_info=get_service_info(get_settings()),
        debug_info=debug_info,
    )
    return ORJSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json"),
        headers=headers,
    )


async def packsend_error_handler(request: Request, exc: Exception) -> Response:
    """Handle PacksendError exceptions.

    Converts PacksendError instances to ErrorResponse with full context,
    ensuring sensitive data is sanitized before sending to client.

    Args:
        request: The FastAPI request that caused the exception
        exc: The PacksendError exception to handle

    Returns:
        Response: ORJSONResponse with error details

    Raises:
        TypeError: If exc is not a PacksendError instance
    """
    # Type narrowing - we know this handler only receives PacksendError
    if not isinstance(exc, PacksendError):
        raise TypeError(f"Expected PacksendError, got {type(exc).__name__}")

    settings = get_settings()
    status_code = status_code_for(exc)
    error_context = sanitize_error_context(
        exc, request_log_context(request, status_code, error_code=exc.error_code)
    )

    log = logger.warning if exc.is_expected else logger.error
    log(
        "Handling {exception_type}: {message}",
        exception_type=type(exc).__name__,
        message=exc.message,
        correlation_id=RequestContext.get_correlation_id(),
        **error_context,
    )

    if isinstance(exc, ValidationFailureError):
        details = {
            "validation_failures": [
                failure.model_dump(mode="json") for failure in exc.failures
            ]
        }
    else:
        details = exc.context if exc.context else None

    debug_info = None
    if settings.environment == "development":
        debug_info = {
            "stack_trace": exc.stack_trace,
            "error_context": exc.context if exc.context else {},
            "exception_type": type(exc).__name__,
        }
        if exc.cause:
            debug_info["cause"] = {
                "type": type(exc.cause).__name__,
                "message": str(exc.cause),
            }

    return error_document(
        status_code,
        exc.error_code,
        exc.message,
        exc.severity.value,
        details=details,
        debug_info=debug_info,
    )


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI RequestValidationError exceptions.

    Messages are grouped per field so clients see every problem at once.

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    # ['body', 'email'] -> 'email'
    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field_path = error.get("loc", ())
        field_name = ".".join(str(loc) for loc in field_path[1:] if loc != "__root__")
        field_errors.setdefault(field_name or "root", []).append(
            error.get("msg", "Invalid value")
        )

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    logger.warning(
        "Request validation failed for {} field(s)",
        len(field_errors),
        correlation_id=RequestContext.get_correlation_id(),
        **sanitize_error_context(
            exc, request_log_context(request, status_code, validation_errors=field_errors)
        ),
    )

    return error_document(
        status_code,
        ErrorCode.VALIDATION_ERROR.value,
        "Request validation failed",
        Severity.LOW.value,
        details={"validation_errors": field_errors},
    )


def _http_error_code(status_code: int) -> tuple[str, Severity]:
    if status_code == status.HTTP_400_BAD_REQUEST:
        return ErrorCode.VALIDATION_ERROR.value, Severity.LOW
    if status_code == status.HTTP_404_NOT_FOUND:
        return ErrorCode.NOT_FOUND.value, Severity.LOW
    if status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        return ErrorCode.INTERNAL_ERROR.value, Severity.HIGH
    return ErrorCode.INTERNAL_ERROR.value, Severity.MEDIUM


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTPException.

    Unknown paths and verbs an endpoint does not declare end up here. Headers
    the exception carries (``Allow`` on 405) are kept.

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    error_code, severity = _http_error_code(exc.status_code)
    logger.warning(
        "HTTP {} on {} {}",
        exc.status_code,
        request.method,
        request.url.path,
        correlation_id=RequestContext.get_correlation_id(),
        **sanitize_error_context(
            exc, request_log_context(request, exc.status_code, detail=exc.detail)
        ),
    )

    return error_document(
        exc.status_code,
        error_code,
        str(exc.detail),
        severity.value,
        headers=exc.headers,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle generic exceptions.

    Catches all unhandled exceptions and converts them to a safe error response.
    In production, hides internal error details from clients.

    Args:
        request: The FastAPI request that caused the exception
        exc: The unhandled exception

    Returns:
        Response: ORJSONResponse with generic error message
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    logger.exception(
        "Unhandled exception: {exception_type}",
        exception_type=type(exc).__name__,
        correlation_id=RequestContext.get_correlation_id(),
        **sanitize_error_context(exc, request_log_context(request, status_code)),
    )

    if get_settings().environment == "production":
        return error_document(
            status_code,
            ErrorCode.INTERNAL_ERROR.value,
            "An internal server error occurred",
            Severity.CRITICAL.value,
        )

    return error_document(
        status_code,
        ErrorCode.INTERNAL_ERROR.value,
        f"Internal server error: {type(exc).__name__}",
        Severity.CRITICAL.value,
        details={"error": str(exc), "type": type(exc).__name__},
        debug_info={
            "stack_trace": traceback.format_tb(exc.__traceback__),
            "error_context": {"error_message": str(exc), "error_args": exc.args},
            "exception_type": type(exc).__name__,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(PacksendError, packsend_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
