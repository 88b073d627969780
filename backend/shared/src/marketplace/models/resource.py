"""Models for records the reservation engine reads: resources, leads, users.

These mirror stored DynamoDB items. Numbers come back from DynamoDB as
Decimal and JSON blobs may be stored as strings, so the models are lax and
expose derived, normalized views instead of trusting raw attributes.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from marketplace.utils.normalize import (
    normalize_text,
    parse_json_object,
    parse_string_list,
)

from .enums import BookingType, CommercialMode, PricingModel, ScheduleType


class Resource(BaseModel):
    """A bookable listing (property, vehicle, service, ...)."""

    # strict=False: DynamoDB returns numbers as Decimal
    model_config = ConfigDict(strict=False, extra="ignore")

    resource_id: str
    owner_user_id: str = ""
    enabled: bool = False
    price: Decimal | str | None = None
    pricing_model: str | None = None
    currency: str | None = None
    slot_buffer_minutes: Decimal = Field(default=Decimal(0))
    commercial_mode: str | None = None
    operation_type: str | None = None
    booking_type: str | None = None
    attributes: dict[str, Any] | str | None = None
    reservation_count: int = 0
    booking_version: int = 0

    @property
    def commercial(self) -> CommercialMode:
        """Normalized commercial mode (legacy operation_type as fallback)."""
        return CommercialMode.parse(self.commercial_mode or self.operation_type)

    @property
    def default_booking_type(self) -> BookingType:
        """Configured booking type, else the one implied by commercial mode."""
        return BookingType.parse(self.booking_type) or BookingType.default_for(
            self.commercial
        )

    @property
    def pricing(self) -> PricingModel | None:
        return PricingModel.parse(self.pricing_model)

    @property
    def buffer_minutes(self) -> float:
        """Slot buffer in minutes, never negative."""
        return max(0.0, float(self.slot_buffer_minutes or 0))

    @property
    def manual_contact_schedule_type(self) -> ScheduleType | None:
        """Schedule type configured for manual-contact bookings, if any."""
        attributes = parse_json_object(self.attributes)
        return ScheduleType.parse(
            attributes.get("manualContactScheduleType")
            or attributes.get("manual_contact_schedule_type")
        )


class LeadSchedule(BaseModel):
    """Schedule and guest fields a lead carries in its metadata."""

    model_config = ConfigDict(strict=False, frozen=True)

    schedule_type: ScheduleType | None = None
    check_in_date: Any = None
    check_out_date: Any = None
    start_date_time: Any = None
    end_date_time: Any = None
    guest_name: str = ""
    guest_email: str = ""
    guest_phone: str = ""
    guest_count: Any = None


class Lead(BaseModel):
    """An inquiry from a prospective guest about a resource."""

    model_config = ConfigDict(strict=False, extra="ignore")

    lead_id: str
    resource_id: str = ""
    user_id: str = ""
    enabled: bool = True
    status: str = ""
    notes: str = ""
    last_message: str = ""
    meta: dict[str, Any] | str | None = None

    def schedule(self) -> LeadSchedule:
        """Extract schedule fields from metadata.

        meta.requestSchedule wins over meta.schedule; each field falls back
        to the same key at the top level of meta.
        """
        meta = parse_json_object(self.meta)
        schedule: dict[str, Any] = {}
        for key in ("requestSchedule", "schedule"):
            candidate = meta.get(key)
            if isinstance(candidate, dict) and candidate:
                schedule = candidate
                break

        def pick(key: str) -> Any:
            return schedule.get(key) or meta.get(key) or None

        return LeadSchedule(
            schedule_type=(
                ScheduleType.parse(schedule.get("scheduleType") or schedule.get("type"))
                or ScheduleType.parse(meta.get("scheduleType"))
            ),
            check_in_date=pick("checkInDate"),
            check_out_date=pick("checkOutDate"),
            start_date_time=pick("startDateTime"),
            end_date_time=pick("endDateTime"),
            guest_name=normalize_text(pick("guestName")),
            guest_email=normalize_text(pick("guestEmail")),
            guest_phone=normalize_text(pick("guestPhone")),
            guest_count=pick("guestCount"),
        )


class UserProfile(BaseModel):
    """A platform user profile (staff member or guest)."""

    model_config = ConfigDict(strict=False, extra="ignore")

    user_id: str
    enabled: bool = True
    role: str = ""
    scopes: list[str] | str | None = None
    email: str = ""
    name: str = ""
    first_name: str = ""
    last_name: str = ""
    phone: str = ""

    @property
    def normalized_role(self) -> str:
        return normalize_text(self.role, 40).lower()

    @property
    def scope_set(self) -> set[str]:
        return set(parse_string_list(self.scopes))

    @property
    def display_name(self) -> str:
        """Best available human name: name, then first+last, then email."""
        if normalize_text(self.name):
            return normalize_text(self.name)
        if self.first_name and self.last_name:
            return normalize_text(f"{self.first_name} {self.last_name}")
        return normalize_text(self.email)


DEFAULT_ENABLED_MODULES: tuple[str, ...] = (
    "module.resources",
    "module.leads",
    "module.staff",
    "module.analytics.basic",
    "module.booking.long_term",
    "module.messaging.realtime",
    "module.reviews",
)


class InstanceSettings(BaseModel):
    """Instance-wide switches read from the settings table."""

    model_config = ConfigDict(strict=False, extra="ignore")

    key: str = "main"
    enabled: bool = True
    enabled_modules: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ENABLED_MODULES)
    )

    def is_module_enabled(self, module_key: str) -> bool:
        key = normalize_text(module_key)
        if not key:
            return True
        if not self.enabled:
            return False
        return key in self.enabled_modules
