"""Reservation models: manual request payload, stored reservations, output record."""

import datetime as dt
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import (
    ActivitySeverity,
    BookingType,
    CommercialMode,
    Currency,
    PaymentProvider,
    PaymentStatus,
    ReservationStatus,
    ScheduleType,
)

# Loosely-typed scalar as it arrives in JSON; coerced by marketplace.utils.normalize
RawValue = str | int | float | None


class ManualReservationRequest(BaseModel):
    """Payload for creating a reservation on behalf of a guest.

    Field values are kept raw: enum names, dates and amounts are normalized
    and validated by the engine so that failures map to typed error codes
    instead of generic schema errors. Accepts snake_case or camelCase keys.
    """

    model_config = ConfigDict(
        strict=False,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    resource_id: RawValue = None
    lead_id: RawValue = None
    booking_type: RawValue = None
    schedule_type: RawValue = None
    check_in_date: RawValue = None
    check_out_date: RawValue = None
    start_date_time: RawValue = None
    end_date_time: RawValue = None
    guest_user_id: RawValue = None
    guest_name: RawValue = None
    guest_email: RawValue = None
    guest_phone: RawValue = None
    guest_count: RawValue = None
    units: RawValue = None
    base_amount: RawValue = None
    fees_amount: RawValue = None
    tax_amount: RawValue = None
    total_amount: RawValue = None
    currency: RawValue = None
    status: RawValue = None
    payment_status: RawValue = None
    external_ref: RawValue = None
    special_requests: RawValue = None
    close_lead: bool = False


class ExistingReservation(BaseModel):
    """A stored reservation as seen by the conflict detector.

    Dates stay raw; a reservation whose window cannot be parsed is ignored
    rather than treated as an error.
    """

    model_config = ConfigDict(strict=False, extra="ignore")

    reservation_id: str = ""
    resource_id: str = ""
    booking_type: RawValue = None
    status: RawValue = None
    payment_status: RawValue = None
    check_in_date: Any = None
    check_out_date: Any = None
    start_date_time: Any = None
    end_date_time: Any = None


class MoneyAmounts(BaseModel):
    """Reconciled monetary amounts, each non-negative and rounded to cents."""

    model_config = ConfigDict(strict=True, frozen=True)

    base: Decimal = Field(..., ge=0, decimal_places=2)
    fees: Decimal = Field(default=Decimal("0.00"), ge=0, decimal_places=2)
    tax: Decimal = Field(default=Decimal("0.00"), ge=0, decimal_places=2)
    total: Decimal = Field(..., ge=0, decimal_places=2)


class AmountOverrides(BaseModel):
    """Caller-supplied amounts, raw."""

    model_config = ConfigDict(strict=False, frozen=True)

    base: RawValue | Decimal = None
    fees: RawValue | Decimal = None
    tax: RawValue | Decimal = None
    total: RawValue | Decimal = None

    @classmethod
    def from_request(cls, request: ManualReservationRequest) -> "AmountOverrides":
        return cls(
            base=request.base_amount,
            fees=request.fees_amount,
            tax=request.tax_amount,
            total=request.total_amount,
        )


class GuestIdentity(BaseModel):
    """Resolved guest fields for a reservation."""

    model_config = ConfigDict(strict=True, frozen=True)

    guest_user_id: str
    guest_name: str
    guest_email: str
    guest_phone: str = ""
    guest_count: int = Field(default=1, ge=1, le=500)
    units: int = Field(default=1, ge=1, le=9999)


class ReservationRecord(BaseModel):
    """Reservation created by the manual engine. Immutable once built."""

    model_config = ConfigDict(strict=True, frozen=True)

    resource_id: str
    resource_owner_user_id: str = ""
    lead_id: RawValue = None
    guest_user_id: str
    guest_name: str
    guest_email: str
    guest_phone: str = ""
    commercial_mode: CommercialMode
    booking_type: BookingType
    schedule_type: ScheduleType
    check_in_date: dt.datetime
    check_out_date: dt.datetime
    start_date_time: dt.datetime | None = None
    end_date_time: dt.datetime | None = None
    guest_count: int = Field(..., ge=1)
    units: int = Field(..., ge=1)
    nights: int = Field(..., ge=0)
    amounts: MoneyAmounts
    currency: Currency
    status: ReservationStatus = ReservationStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_provider: PaymentProvider = PaymentProvider.MANUAL
    external_ref: str = ""
    special_requests: str = ""
    enabled: bool = True
    created_at: dt.datetime

    def to_item(self, reservation_id: str) -> dict[str, Any]:
        """Serialize for storage; empty optional fields are omitted."""
        item: dict[str, Any] = {
            "reservation_id": reservation_id,
            "resource_id": self.resource_id,
            "resource_owner_user_id": self.resource_owner_user_id,
            "guest_user_id": self.guest_user_id,
            "guest_name": self.guest_name,
            "guest_email": self.guest_email,
            "commercial_mode": self.commercial_mode.value,
            "booking_type": self.booking_type.value,
            "schedule_type": self.schedule_type.value,
            "check_in_date": self.check_in_date.isoformat(),
            "check_out_date": self.check_out_date.isoformat(),
            "guest_count": self.guest_count,
            "units": self.units,
            "nights": self.nights,
            "base_amount": self.amounts.base,
            "fees_amount": self.amounts.fees,
            "tax_amount": self.amounts.tax,
            "total_amount": self.amounts.total,
            "currency": self.currency.value,
            "status": self.status.value,
            "payment_status": self.payment_status.value,
            "payment_provider": self.payment_provider.value,
            "enabled": self.enabled,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.created_at.isoformat(),
        }
        if self.lead_id:
            item["lead_id"] = self.lead_id
        if self.guest_phone:
            item["guest_phone"] = self.guest_phone
        if self.external_ref:
            item["external_ref"] = self.external_ref
        if self.special_requests:
            item["special_requests"] = self.special_requests
        if self.start_date_time and self.end_date_time:
            item["start_date_time"] = self.start_date_time.isoformat()
            item["end_date_time"] = self.end_date_time.isoformat()
        return item


class ActivityLogEntry(BaseModel):
    """Audit trail entry written after a reservation is created."""

    model_config = ConfigDict(strict=True, frozen=True)

    actor_user_id: str
    actor_role: str
    action: str
    entity_type: str = "reservations"
    entity_id: str
    after_data: str = Field(..., max_length=20000)
    request_id: str = ""
    severity: ActivitySeverity = ActivitySeverity.INFO
    created_at: dt.datetime


class SideEffectOutcome(BaseModel):
    """Result of one best-effort secondary write. Never surfaced to callers."""

    model_config = ConfigDict(strict=True, frozen=True)

    name: str
    ok: bool
    skipped: bool = False
    error: str | None = None


class ManualReservationResult(BaseModel):
    """Outcome of a successful manual reservation request."""

    model_config = ConfigDict(strict=True, frozen=True)

    reservation_id: str
    record: ReservationRecord
    side_effects: list[SideEffectOutcome] = Field(default_factory=list)
