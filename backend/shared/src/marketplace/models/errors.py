"""Standard error codes for manual reservation operations.

All engine failures are raised as ReservationError carrying one of these
codes. The API layer maps codes to HTTP status classes.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Typed failure kinds surfaced to callers."""

    # Request / identity
    AUTH_REQUIRED = "AUTH_REQUIRED"
    FORBIDDEN = "FORBIDDEN"
    MODULE_DISABLED = "MODULE_DISABLED"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Lookups
    LEAD_NOT_AVAILABLE = "LEAD_NOT_AVAILABLE"
    RESOURCE_NOT_AVAILABLE = "RESOURCE_NOT_AVAILABLE"

    # Schedule resolution
    BOOKING_TYPE_INVALID = "BOOKING_TYPE_INVALID"
    SCHEDULE_REQUIRED = "SCHEDULE_REQUIRED"
    DATE_RANGE_REQUIRED = "DATE_RANGE_REQUIRED"
    DATE_RANGE_INVALID = "DATE_RANGE_INVALID"
    TIME_SLOT_REQUIRED = "TIME_SLOT_REQUIRED"
    TIME_SLOT_INVALID = "TIME_SLOT_INVALID"

    # Conflicts
    RESERVATION_CONFLICT = "RESERVATION_CONFLICT"

    # Pricing
    AMOUNT_INVALID = "AMOUNT_INVALID"
    CURRENCY_NOT_SUPPORTED = "CURRENCY_NOT_SUPPORTED"

    INTERNAL_ERROR = "INTERNAL_ERROR"


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.AUTH_REQUIRED: "You must be authenticated",
    ErrorCode.FORBIDDEN: "Insufficient permissions to create manual reservations",
    ErrorCode.MODULE_DISABLED: "This module is not enabled for this instance",
    ErrorCode.VALIDATION_ERROR: "Invalid request",
    ErrorCode.LEAD_NOT_AVAILABLE: "Lead not available",
    ErrorCode.RESOURCE_NOT_AVAILABLE: "Resource not available",
    ErrorCode.BOOKING_TYPE_INVALID: "Unsupported bookingType",
    ErrorCode.SCHEDULE_REQUIRED: "A scheduleType is required for manual reservations",
    ErrorCode.DATE_RANGE_REQUIRED: (
        "checkInDate and checkOutDate are required for date range reservations"
    ),
    ErrorCode.DATE_RANGE_INVALID: "checkOutDate must be greater than checkInDate",
    ErrorCode.TIME_SLOT_REQUIRED: (
        "startDateTime and endDateTime are required for time slot reservations"
    ),
    ErrorCode.TIME_SLOT_INVALID: "endDateTime must be greater than startDateTime",
    ErrorCode.RESERVATION_CONFLICT: "The selected schedule is not available",
    ErrorCode.AMOUNT_INVALID: "Invalid amount payload",
    ErrorCode.CURRENCY_NOT_SUPPORTED: "Supported currencies: MXN, USD, EUR",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred",
}

# Recovery suggestions for API clients
ERROR_RECOVERY: dict[ErrorCode, str] = {
    ErrorCode.AUTH_REQUIRED: "Sign in and retry the request",
    ErrorCode.FORBIDDEN: "Ask an administrator for the reservations.write scope",
    ErrorCode.MODULE_DISABLED: "Enable module.resources in instance settings",
    ErrorCode.VALIDATION_ERROR: "Check the request parameters and try again",
    ErrorCode.LEAD_NOT_AVAILABLE: "Verify the lead ID or create the reservation without a lead",
    ErrorCode.RESOURCE_NOT_AVAILABLE: "Verify the resource ID and that the resource is enabled",
    ErrorCode.BOOKING_TYPE_INVALID: (
        "Use one of manual_contact, date_range, time_slot, fixed_event"
    ),
    ErrorCode.SCHEDULE_REQUIRED: "Provide scheduleType with matching dates",
    ErrorCode.DATE_RANGE_REQUIRED: "Provide valid checkInDate and checkOutDate",
    ErrorCode.DATE_RANGE_INVALID: "Stay must be between 1 and 365 nights",
    ErrorCode.TIME_SLOT_REQUIRED: "Provide valid startDateTime and endDateTime",
    ErrorCode.TIME_SLOT_INVALID: "End of the slot must be after its start",
    ErrorCode.RESERVATION_CONFLICT: "Pick a different schedule for this resource",
    ErrorCode.AMOUNT_INVALID: "Amounts must be non-negative numbers",
    ErrorCode.CURRENCY_NOT_SUPPORTED: "Use MXN, USD or EUR",
    ErrorCode.INTERNAL_ERROR: "Please try again later or contact support",
}


class ErrorResponse(BaseModel):
    """Standard error response format for failed operations."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    message: str
    recovery: str
    details: Optional[dict[str, str]] = None

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
        message: Optional[str] = None,
    ) -> "ErrorResponse":
        """Create an ErrorResponse from an error code.

        Args:
            code: The error code
            details: Optional additional context about the error
            message: Optional message overriding the default for the code

        Returns:
            An ErrorResponse with the message and recovery hint for the code.
        """
        return cls(
            error_code=code,
            message=message or ERROR_MESSAGES[code],
            recovery=ERROR_RECOVERY[code],
            details=details,
        )


class ReservationError(Exception):
    """Exception raised by reservation operations.

    Can be caught and converted to an ErrorResponse for API responses.
    """

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
        message: Optional[str] = None,
    ):
        self.code = code
        self.message = message or ERROR_MESSAGES[code]
        self.recovery = ERROR_RECOVERY[code]
        self.details = details
        super().__init__(self.message)

    def to_error_response(self) -> ErrorResponse:
        """Convert this exception to an ErrorResponse."""
        return ErrorResponse.from_code(self.code, self.details, self.message)
