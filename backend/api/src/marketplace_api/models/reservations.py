"""API models for manual reservation endpoints.

Extends the engine's request model with OpenAPI examples and defines the
201 response envelope.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from marketplace.models.enums import (
    BookingType,
    Currency,
    PaymentProvider,
    PaymentStatus,
    ReservationStatus,
    ScheduleType,
)
from marketplace.models.reservation import (
    ManualReservationRequest,
    ManualReservationResult,
)

RESERVATION_CREATED_MANUAL = "RESERVATION_CREATED_MANUAL"


class ManualReservationCreateRequest(ManualReservationRequest):
    """Request to create a reservation on behalf of a guest.

    The acting staff user is not included; it is derived from the JWT token.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "resourceId": "res-beach-house",
                    "checkInDate": "2024-03-01",
                    "checkOutDate": "2024-03-04",
                    "guestName": "Ana Torres",
                    "guestEmail": "ana@example.com",
                    "guestCount": 2,
                },
                {
                    "leadId": "lead-123",
                    "bookingType": "time_slot",
                    "startDateTime": "2024-03-01T10:00:00Z",
                    "endDateTime": "2024-03-01T12:00:00Z",
                    "closeLead": True,
                },
            ]
        },
    )


class ManualReservationData(BaseModel):
    """Summary of the created reservation."""

    model_config = ConfigDict(strict=True)

    reservation_id: str = Field(..., examples=["RES-2024-A1B2C3D4"])
    resource_id: str
    lead_id: str | None = None
    booking_type: BookingType
    schedule_type: ScheduleType
    status: ReservationStatus
    payment_status: PaymentStatus
    payment_provider: PaymentProvider
    total_amount: Decimal = Field(..., examples=[150.0])
    currency: Currency

    @field_serializer("total_amount")
    def _total_as_number(self, value: Decimal) -> float:
        return float(value)


class ManualReservationResponse(BaseModel):
    """Response for POST /reservations/manual."""

    model_config = ConfigDict(strict=True)

    success: bool = True
    code: str = RESERVATION_CREATED_MANUAL
    message: str = "Manual reservation created"
    data: ManualReservationData

    @classmethod
    def from_result(cls, result: ManualReservationResult) -> "ManualReservationResponse":
        record = result.record
        return cls(
            data=ManualReservationData(
                reservation_id=result.reservation_id,
                resource_id=record.resource_id,
                lead_id=record.lead_id,
                booking_type=record.booking_type,
                schedule_type=record.schedule_type,
                status=record.status,
                payment_status=record.payment_status,
                payment_provider=record.payment_provider,
                total_amount=record.amounts.total,
                currency=record.currency,
            )
        )
