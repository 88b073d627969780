"""Conflict detection against existing reservations on the same resource."""

from collections.abc import Iterable

from marketplace.models.enums import BLOCKING_STATUSES, BookingType, ReservationStatus
from marketplace.models.reservation import ExistingReservation
from marketplace.models.schedule import TimeWindow, make_window
from marketplace.utils.normalize import has_value, parse_instant, to_epoch_ms


def is_blocking(reservation: ExistingReservation) -> bool:
    """Only pending and confirmed reservations occupy resource time."""
    return ReservationStatus.parse(reservation.status) in BLOCKING_STATUSES


def resolve_existing_window(
    reservation: ExistingReservation,
    buffer_minutes: float,
) -> TimeWindow | None:
    """Buffered window of a stored reservation, or None if unresolvable.

    Date-range bookings use the check-in/out dates; every other booking type
    uses start/end instants, falling back to check-in/out.
    """
    booking_type = BookingType.parse(reservation.booking_type) or BookingType.MANUAL_CONTACT

    if booking_type == BookingType.DATE_RANGE:
        start = parse_instant(reservation.check_in_date)
        end = parse_instant(reservation.check_out_date)
    else:
        start = parse_instant(
            reservation.start_date_time
            if has_value(reservation.start_date_time)
            else reservation.check_in_date
        )
        end = parse_instant(
            reservation.end_date_time
            if has_value(reservation.end_date_time)
            else reservation.check_out_date
        )

    if start is None or end is None:
        return None

    start_ms, end_ms = to_epoch_ms(start), to_epoch_ms(end)
    if end_ms <= start_ms:
        # Corrupt record; nothing sensible to block
        return None
    return make_window(start_ms, end_ms, buffer_minutes)


def find_conflict(
    candidate: TimeWindow,
    existing: Iterable[ExistingReservation],
    buffer_minutes: float,
) -> ExistingReservation | None:
    """First blocking reservation whose buffered window overlaps candidate.

    The buffer is applied to every existing reservation independently of
    the candidate's own buffer. Never raises.
    """
    for reservation in existing:
        if not is_blocking(reservation):
            continue
        window = resolve_existing_window(reservation, buffer_minutes)
        if window is not None and window.overlaps(candidate):
            return reservation
    return None


def has_conflict(
    candidate: TimeWindow,
    existing: Iterable[ExistingReservation],
    buffer_minutes: float,
) -> bool:
    """True when the candidate window overlaps any blocking reservation."""
    return find_conflict(candidate, existing, buffer_minutes) is not None
