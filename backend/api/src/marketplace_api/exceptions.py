"""FastAPI exception handlers for converting ReservationError to HTTP responses.

The ErrorCode-to-HTTP status mapping follows REST conventions:
- 401 Unauthorized: Authentication required
- 403 Forbidden: Authorization failures and disabled modules
- 404 Not Found: Lead or resource missing/disabled
- 409 Conflict: Schedule overlaps an existing reservation
- 422 Unprocessable Entity: Schedule, amount and payload validation
- 500 Internal Server Error: Storage failures and unhandled exceptions

Usage:
    from marketplace_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from marketplace.models.errors import ErrorCode, ErrorResponse, ReservationError
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

# Map ErrorCode to HTTP status codes
ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    # Authentication -> 401
    ErrorCode.AUTH_REQUIRED: HTTP_401_UNAUTHORIZED,
    # Authorization / feature gate -> 403
    ErrorCode.FORBIDDEN: HTTP_403_FORBIDDEN,
    ErrorCode.MODULE_DISABLED: HTTP_403_FORBIDDEN,
    # Lookups -> 404
    ErrorCode.LEAD_NOT_AVAILABLE: HTTP_404_NOT_FOUND,
    ErrorCode.RESOURCE_NOT_AVAILABLE: HTTP_404_NOT_FOUND,
    # Availability -> 409
    ErrorCode.RESERVATION_CONFLICT: HTTP_409_CONFLICT,
    # Validation -> 422
    ErrorCode.VALIDATION_ERROR: HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.BOOKING_TYPE_INVALID: HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.SCHEDULE_REQUIRED: HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.DATE_RANGE_REQUIRED: HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.DATE_RANGE_INVALID: HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.TIME_SLOT_REQUIRED: HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.TIME_SLOT_INVALID: HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.AMOUNT_INVALID: HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.CURRENCY_NOT_SUPPORTED: HTTP_422_UNPROCESSABLE_ENTITY,
    # Server -> 500
    ErrorCode.INTERNAL_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode (422 if not explicitly mapped)."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_422_UNPROCESSABLE_ENTITY)


def _error_json(status_code: int, error: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error.model_dump(mode="json"),
    )


async def reservation_error_handler(
    request: Request, exc: ReservationError
) -> JSONResponse:
    """Convert a ReservationError to its JSON error response.

    Args:
        request: The incoming request (unused but required by FastAPI)
        exc: The ReservationError exception

    Returns:
        JSONResponse with error details and appropriate status code.
    """
    return _error_json(get_http_status_for_error(exc.code), exc.to_error_response())


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Wrap FastAPI body/header validation failures as VALIDATION_ERROR."""
    fields = [
        ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        for error in exc.errors()
    ]
    details = {"fields": ", ".join(field for field in fields if field)[:500]}
    return _error_json(
        HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorResponse.from_code(ErrorCode.VALIDATION_ERROR, details),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for uncaught exceptions; never exposes internal details.

    Args:
        request: The incoming request (unused but required by FastAPI)
        exc: The uncaught exception

    Returns:
        JSONResponse with 500 status and INTERNAL_ERROR body.
    """
    logger.exception("Unhandled exception: %s", exc)
    return _error_json(
        HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse.from_code(ErrorCode.INTERNAL_ERROR),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(ReservationError, reservation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
