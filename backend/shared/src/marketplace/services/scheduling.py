"""Schedule resolution for manual reservations.

Turns a request payload, inherited lead metadata and resource defaults into
one normalized ScheduleContext. Field sourcing happens first, in
ScheduleRequest.from_sources, so the resolver only deals with canonical
values and never needs to know where a field came from.
"""

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict

from marketplace.models.enums import BookingType, ScheduleType
from marketplace.models.errors import ErrorCode, ReservationError
from marketplace.models.reservation import ManualReservationRequest
from marketplace.models.resource import LeadSchedule, Resource
from marketplace.models.schedule import ScheduleContext, TimeWindow, make_window
from marketplace.utils.logging import get_logger
from marketplace.utils.normalize import (
    DAY_IN_MS,
    has_value,
    normalize_text,
    parse_instant,
    to_epoch_ms,
)

logger = get_logger(__name__)

MAX_NIGHTS = 365

_FORCED_SCHEDULE_TYPES: dict[BookingType, ScheduleType] = {
    BookingType.DATE_RANGE: ScheduleType.DATE_RANGE,
    BookingType.TIME_SLOT: ScheduleType.TIME_SLOT,
    BookingType.FIXED_EVENT: ScheduleType.TIME_SLOT,
}


class ScheduleRequest(BaseModel):
    """Canonical schedule inputs after merging request and lead fields."""

    model_config = ConfigDict(strict=True, frozen=True)

    requested_schedule_type: ScheduleType | None = None
    resource_schedule_type: ScheduleType | None = None
    check_in: dt.datetime | None = None
    check_out: dt.datetime | None = None
    start: dt.datetime | None = None
    end: dt.datetime | None = None

    @classmethod
    def from_sources(
        cls,
        request: ManualReservationRequest,
        lead_schedule: LeadSchedule | None = None,
        resource: Resource | None = None,
    ) -> "ScheduleRequest":
        """Merge sources: request value if present, else the lead's value.

        Unparsable instants are treated as absent.
        """
        lead = lead_schedule or LeadSchedule()

        def pick(requested: object, inherited: object) -> dt.datetime | None:
            return parse_instant(requested if has_value(requested) else inherited)

        return cls(
            requested_schedule_type=ScheduleType.parse(request.schedule_type),
            resource_schedule_type=(
                resource.manual_contact_schedule_type if resource else None
            ),
            check_in=pick(request.check_in_date, lead.check_in_date),
            check_out=pick(request.check_out_date, lead.check_out_date),
            start=pick(request.start_date_time, lead.start_date_time),
            end=pick(request.end_date_time, lead.end_date_time),
        )


def resolve_booking_type(requested: Any, resource: Resource) -> BookingType:
    """Explicit supported booking type, else the resource default.

    Unsupported values are ignored, the same as a missing one.
    """
    booking_type = BookingType.parse(requested)
    if booking_type is None:
        if has_value(requested):
            logger.info(
                "Ignoring unsupported booking type %r for %s",
                normalize_text(requested, 40),
                resource.resource_id,
            )
        return resource.default_booking_type
    return booking_type


def determine_schedule_type(
    schedule_request: ScheduleRequest,
    booking_type: BookingType,
) -> ScheduleType | None:
    """Pick the scheduling model, or None when nothing determines one.

    Precedence: booking type forces a model; for manual-contact bookings the
    explicit request value, then the resource's configured type, then which
    date fields are populated (start/end wins when both pairs are present).
    """
    forced = _FORCED_SCHEDULE_TYPES.get(booking_type)
    if forced is not None:
        return forced

    if schedule_request.requested_schedule_type is not None:
        return schedule_request.requested_schedule_type
    if schedule_request.resource_schedule_type is not None:
        return schedule_request.resource_schedule_type

    if schedule_request.start and schedule_request.end:
        return ScheduleType.TIME_SLOT
    if schedule_request.check_in and schedule_request.check_out:
        return ScheduleType.DATE_RANGE
    return None


def _resolve_date_range(schedule_request: ScheduleRequest) -> ScheduleContext:
    check_in, check_out = schedule_request.check_in, schedule_request.check_out
    if check_in is None or check_out is None:
        raise ReservationError(ErrorCode.DATE_RANGE_REQUIRED)

    start_ms, end_ms = to_epoch_ms(check_in), to_epoch_ms(check_out)
    if end_ms <= start_ms:
        raise ReservationError(ErrorCode.DATE_RANGE_INVALID)

    nights = -(-(end_ms - start_ms) // DAY_IN_MS)
    if not 1 <= nights <= MAX_NIGHTS:
        raise ReservationError(
            ErrorCode.DATE_RANGE_INVALID,
            details={"nights": str(nights)},
            message="Reservation nights must be between 1 and 365",
        )

    return ScheduleContext(
        schedule_type=ScheduleType.DATE_RANGE,
        check_in=check_in,
        check_out=check_out,
        nights=nights,
    )


def _resolve_time_slot(schedule_request: ScheduleRequest) -> ScheduleContext:
    start, end = schedule_request.start, schedule_request.end
    if start is None or end is None:
        raise ReservationError(ErrorCode.TIME_SLOT_REQUIRED)

    if to_epoch_ms(end) <= to_epoch_ms(start):
        raise ReservationError(ErrorCode.TIME_SLOT_INVALID)

    return ScheduleContext(
        schedule_type=ScheduleType.TIME_SLOT,
        check_in=start,
        check_out=end,
        start_date_time=start,
        end_date_time=end,
        nights=0,
    )


_BRANCHES = {
    ScheduleType.DATE_RANGE: _resolve_date_range,
    ScheduleType.TIME_SLOT: _resolve_time_slot,
}


def resolve_schedule(
    schedule_request: ScheduleRequest,
    booking_type: BookingType,
) -> ScheduleContext:
    """Resolve and validate the schedule for a reservation request.

    Raises:
        ReservationError: SCHEDULE_REQUIRED, DATE_RANGE_REQUIRED,
            DATE_RANGE_INVALID, TIME_SLOT_REQUIRED or TIME_SLOT_INVALID.
    """
    schedule_type = determine_schedule_type(schedule_request, booking_type)
    if schedule_type is None:
        raise ReservationError(ErrorCode.SCHEDULE_REQUIRED)
    return _BRANCHES[schedule_type](schedule_request)


def candidate_window(context: ScheduleContext, buffer_minutes: float) -> TimeWindow:
    """Buffered window of the reservation being created."""
    start, end = context.bounds
    return make_window(to_epoch_ms(start), to_epoch_ms(end), buffer_minutes)
