"""Date-only interval arithmetic for bookings.

A booking occupies the half-open range ``[check_in, check_out)``: the guest
arrives on ``check_in`` and leaves on the morning of ``check_out``. Two stays
may share a changeover day (one guest's ``check_out`` equals the next guest's
``check_in``) but must not overlap in any other way.
"""

from __future__ import annotations

import enum
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime


def normalize(value: date | datetime) -> date:
    """Strip the time of day, keeping the local calendar date.

    Aware datetimes are converted to the local timezone first so that two
    timestamps on the same local day always normalize identically.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def same_day(a: date | datetime | None, b: date | datetime | None) -> bool:
    """True iff both values are present and fall on the same calendar date."""
    if a is None or b is None:
        return False
    return normalize(a) == normalize(b)


@dataclass(frozen=True)
class DateInterval:
    """A half-open stay ``[check_in, check_out)``.

    ``booking_id`` identifies the booking the interval belongs to, so that a
    booking being edited can be excluded from its own conflict check.
    """

    check_in: date
    check_out: date
    booking_id: uuid.UUID | None = None

    @classmethod
    def of(
        cls,
        check_in: date | datetime,
        check_out: date | datetime,
        booking_id: uuid.UUID | None = None,
    ) -> DateInterval:
        return cls(normalize(check_in), normalize(check_out), booking_id)

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def contains_interior(self, day: date) -> bool:
        """True if ``day`` lies strictly between arrival and departure."""
        return self.check_in < day < self.check_out


def overlaps(candidate: DateInterval, existing: DateInterval) -> bool:
    """Return True if ``candidate`` illegally overlaps ``existing``.

    Touching endpoints (a changeover day) are legal. Sharing the same arrival
    day or the same departure day is always a conflict.
    """
    start, end = normalize(candidate.check_in), normalize(candidate.check_out)
    other_start, other_end = normalize(existing.check_in), normalize(existing.check_out)

    if not (start < other_end and end > other_start):
        return False
    if start == other_start or end == other_end:
        return True
    edge_touch = start == other_end or end == other_start
    return not edge_touch


class DayState(str, enum.Enum):
    """Availability of one calendar day relative to the active bookings."""

    FREE = "free"
    # Strictly inside a stay.
    INTERIOR = "interior"
    # Someone departs this morning: usable only as a new arrival day.
    CHECKOUT_ONLY = "checkout_only"
    # Someone arrives this afternoon: usable only as a new departure day.
    CHECKIN_ONLY = "checkin_only"
    # Departure and arrival on the same day: no free hours left.
    FULLY_BLOCKED_EDGE = "fully_blocked_edge"

    @property
    def can_check_in(self) -> bool:
        return self in (DayState.FREE, DayState.CHECKOUT_ONLY)

    @property
    def can_check_out(self) -> bool:
        return self in (DayState.FREE, DayState.CHECKIN_ONLY)

    @property
    def disabled(self) -> bool:
        return self in (DayState.INTERIOR, DayState.FULLY_BLOCKED_EDGE)


def classify_day(day: date | datetime, intervals: Iterable[DateInterval]) -> DayState:
    """Classify a single calendar day against every active interval."""
    day = normalize(day)
    is_arrival = False
    is_departure = False

    for interval in intervals:
        start, end = normalize(interval.check_in), normalize(interval.check_out)
        if start < day < end:
            return DayState.INTERIOR
        if day == start:
            is_arrival = True
        if day == end:
            is_departure = True

    if is_arrival and is_departure:
        return DayState.FULLY_BLOCKED_EDGE
    if is_departure:
        return DayState.CHECKOUT_ONLY
    if is_arrival:
        return DayState.CHECKIN_ONLY
    return DayState.FREE
