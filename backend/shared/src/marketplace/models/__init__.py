"""Pydantic models for marketplace reservation entities."""

from .enums import (
    BLOCKING_STATUSES,
    ActivitySeverity,
    BookingType,
    CommercialMode,
    Currency,
    LeadStatus,
    PaymentProvider,
    PaymentStatus,
    PricingModel,
    ReservationStatus,
    ScheduleType,
)
from .errors import ErrorCode, ErrorResponse, ReservationError
from .reservation import (
    ActivityLogEntry,
    AmountOverrides,
    ExistingReservation,
    GuestIdentity,
    ManualReservationRequest,
    ManualReservationResult,
    MoneyAmounts,
    ReservationRecord,
    SideEffectOutcome,
)
from .resource import InstanceSettings, Lead, LeadSchedule, Resource, UserProfile
from .schedule import ScheduleContext, TimeWindow, make_window, overlaps

__all__ = [
    # Enums
    "BLOCKING_STATUSES",
    "ActivitySeverity",
    "BookingType",
    "CommercialMode",
    "Currency",
    "LeadStatus",
    "PaymentProvider",
    "PaymentStatus",
    "PricingModel",
    "ReservationStatus",
    "ScheduleType",
    # Errors
    "ErrorCode",
    "ErrorResponse",
    "ReservationError",
    # Reservation
    "ActivityLogEntry",
    "AmountOverrides",
    "ExistingReservation",
    "GuestIdentity",
    "ManualReservationRequest",
    "ManualReservationResult",
    "MoneyAmounts",
    "ReservationRecord",
    "SideEffectOutcome",
    # Resource / lead / user
    "InstanceSettings",
    "Lead",
    "LeadSchedule",
    "Resource",
    "UserProfile",
    # Schedule
    "ScheduleContext",
    "TimeWindow",
    "make_window",
    "overlaps",
]
