"""Enumeration types for marketplace reservation models.

Every enum exposes ``parse()`` which normalizes free-form input (trim,
lower-case) and returns the member or ``None``. Callers decide whether an
unsupported value is a fallback or a rejection.
"""

from enum import Enum
from typing import Any, TypeVar

E = TypeVar("E", bound="ParseableEnum")


class ParseableEnum(str, Enum):
    """String enum with lenient, normalizing lookup."""

    @classmethod
    def _normalize(cls, value: Any) -> str:
        return str(value if value is not None else "").strip().lower()

    @classmethod
    def parse(cls: type[E], value: Any) -> E | None:
        """Return the member matching ``value`` or None if unsupported."""
        if isinstance(value, cls):
            return value
        normalized = cls._normalize(value)
        for member in cls:
            if member.value == normalized:
                return member
        return None


class BookingType(ParseableEnum):
    """Coarse category of a reservation."""

    MANUAL_CONTACT = "manual_contact"
    DATE_RANGE = "date_range"
    TIME_SLOT = "time_slot"
    FIXED_EVENT = "fixed_event"

    @classmethod
    def default_for(cls, commercial_mode: "CommercialMode") -> "BookingType":
        """Booking type implied by a resource's commercial mode."""
        if commercial_mode == CommercialMode.RENT_SHORT_TERM:
            return cls.DATE_RANGE
        if commercial_mode == CommercialMode.RENT_HOURLY:
            return cls.TIME_SLOT
        return cls.MANUAL_CONTACT


class ScheduleType(ParseableEnum):
    """Concrete scheduling model of a reservation."""

    DATE_RANGE = "date_range"
    TIME_SLOT = "time_slot"


class ReservationStatus(ParseableEnum):
    """Status of a reservation."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    EXPIRED = "expired"


# Statuses that still occupy resource time
BLOCKING_STATUSES: frozenset[ReservationStatus] = frozenset(
    {ReservationStatus.PENDING, ReservationStatus.CONFIRMED}
)


class PaymentStatus(ParseableEnum):
    """Payment status for a reservation."""

    UNPAID = "unpaid"
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentProvider(ParseableEnum):
    """Payment processing providers."""

    MANUAL = "manual"


class Currency(ParseableEnum):
    """Supported settlement currencies (ISO 4217)."""

    MXN = "MXN"
    USD = "USD"
    EUR = "EUR"

    @classmethod
    def _normalize(cls, value: Any) -> str:
        return str(value if value is not None else "").strip()[:3].upper()


class PricingModel(ParseableEnum):
    """How a resource's unit price is applied."""

    FIXED_TOTAL = "fixed_total"
    PER_NIGHT = "per_night"
    PER_DAY = "per_day"
    PER_HOUR = "per_hour"
    PER_PERSON = "per_person"


class CommercialMode(ParseableEnum):
    """Commercial mode of a resource listing."""

    SALE = "sale"
    RENT_LONG_TERM = "rent_long_term"
    RENT_SHORT_TERM = "rent_short_term"
    RENT_HOURLY = "rent_hourly"

    @classmethod
    def parse(cls, value: Any) -> "CommercialMode":  # type: ignore[override]
        """Resolve legacy aliases; anything unknown is a sale listing."""
        normalized = cls._normalize(value)
        if normalized == "rent":
            return cls.RENT_LONG_TERM
        if normalized == "vacation_rental":
            return cls.RENT_SHORT_TERM
        return super().parse(normalized) or cls.SALE


class LeadStatus(ParseableEnum):
    """Pipeline status of a lead."""

    NEW = "new"
    CONTACTED = "contacted"
    CLOSED_WON = "closed_won"
    CLOSED_LOST = "closed_lost"


class ActivitySeverity(ParseableEnum):
    """Severity of an activity log entry."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
