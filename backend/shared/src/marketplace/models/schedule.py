"""Time window and resolved schedule models."""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import ScheduleType

MINUTE_IN_MS = 60 * 1000


class TimeWindow(BaseModel):
    """Half-open interval [start_ms, end_ms) in absolute epoch milliseconds."""

    model_config = ConfigDict(strict=True, frozen=True)

    start_ms: int
    end_ms: int

    @model_validator(mode="after")
    def _check_order(self) -> "TimeWindow":
        if self.start_ms >= self.end_ms:
            raise ValueError("start_ms must be lower than end_ms")
        return self

    def overlaps(self, other: "TimeWindow") -> bool:
        """Half-open intersection test; touching endpoints do not overlap."""
        return self.start_ms < other.end_ms and self.end_ms > other.start_ms


def make_window(start_ms: int, end_ms: int, buffer_minutes: float = 0) -> TimeWindow:
    """Build a window expanded symmetrically by a turnaround buffer.

    Negative buffers are treated as zero.
    """
    buffer_ms = int(max(0, buffer_minutes or 0) * MINUTE_IN_MS)
    return TimeWindow(start_ms=start_ms - buffer_ms, end_ms=end_ms + buffer_ms)


def overlaps(a: TimeWindow, b: TimeWindow) -> bool:
    """True when the two windows intersect."""
    return a.overlaps(b)


class ScheduleContext(BaseModel):
    """Resolved scheduling decision for one reservation request.

    check_in/check_out are always populated; for time slots they mirror
    start_date_time/end_date_time so downstream code can read them uniformly.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    schedule_type: ScheduleType
    check_in: dt.datetime
    check_out: dt.datetime
    start_date_time: dt.datetime | None = None
    end_date_time: dt.datetime | None = None
    nights: int = Field(default=0, ge=0, le=365)

    @model_validator(mode="after")
    def _check_consistency(self) -> "ScheduleContext":
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        if self.schedule_type == ScheduleType.DATE_RANGE:
            if self.nights < 1:
                raise ValueError("date range schedules need at least one night")
        elif self.start_date_time is None or self.end_date_time is None:
            raise ValueError("time slot schedules need start and end instants")
        return self

    @property
    def bounds(self) -> tuple[dt.datetime, dt.datetime]:
        """Occupied interval: start/end instants for time slots, else check-in/out."""
        if (
            self.schedule_type == ScheduleType.TIME_SLOT
            and self.start_date_time is not None
            and self.end_date_time is not None
        ):
            return self.start_date_time, self.end_date_time
        return self.check_in, self.check_out
