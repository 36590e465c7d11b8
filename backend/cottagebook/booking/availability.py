"""Availability engine: validate stays and render calendar availability.

All functions are pure. Callers supply the *current* set of active intervals
on every call; nothing here caches booking state.
"""

from __future__ import annotations

import enum
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta

from cottagebook.booking.intervals import (
    DateInterval,
    DayState,
    classify_day,
    normalize,
    overlaps,
)


class RejectionReason(str, enum.Enum):
    """Why a candidate stay was refused."""

    INVALID_ORDER = "invalid_order"
    SAME_DAY_SELECTION = "same_day_selection"
    TOO_LONG = "too_long"
    OVERLAP = "overlap"
    EDGE_BLOCKED = "edge_blocked"


_MESSAGES = {
    RejectionReason.INVALID_ORDER: "Check-out must be after check-in.",
    RejectionReason.SAME_DAY_SELECTION: "Please select a check-out date.",
    RejectionReason.TOO_LONG: "Bookings cannot be longer than {max_stay_nights} nights.",
    RejectionReason.OVERLAP: "That range overlaps an existing booking.",
    RejectionReason.EDGE_BLOCKED: "That day is fully occupied by back-to-back bookings.",
}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of :func:`validate_candidate`."""

    reason: RejectionReason | None = None
    message: str | None = None
    conflicts: tuple[DateInterval, ...] = ()

    @property
    def accepted(self) -> bool:
        return self.reason is None

    @classmethod
    def accept(cls) -> ValidationResult:
        return cls()

    @classmethod
    def reject(
        cls,
        reason: RejectionReason,
        conflicts: Iterable[DateInterval] = (),
        message: str | None = None,
        **context: object,
    ) -> ValidationResult:
        return cls(
            reason=reason,
            message=message or _MESSAGES[reason].format(**context),
            conflicts=tuple(conflicts),
        )


def validate_candidate(
    candidate: DateInterval,
    active: Iterable[DateInterval],
    *,
    max_stay_nights: int | None = None,
    exclude_booking_id: uuid.UUID | None = None,
) -> ValidationResult:
    """Check a proposed stay against every other active stay.

    Args:
        candidate: The stay being requested or edited.
        active: Every pending or approved stay, freshly read.
        max_stay_nights: Length ceiling in nights. ``None`` skips it
            (administrative edits).
        exclude_booking_id: The booking being edited, left out of ``active``.

    Returns:
        An accepted result, or the first rejection reason together with the
        conflicting intervals when the reason is an overlap.
    """
    start, end = normalize(candidate.check_in), normalize(candidate.check_out)

    if start == end:
        return ValidationResult.reject(RejectionReason.SAME_DAY_SELECTION)
    if start > end:
        return ValidationResult.reject(RejectionReason.INVALID_ORDER)

    if max_stay_nights is not None and (end - start).days > max_stay_nights:
        return ValidationResult.reject(RejectionReason.TOO_LONG, max_stay_nights=max_stay_nights)

    others = [
        interval
        for interval in active
        if exclude_booking_id is None or interval.booking_id != exclude_booking_id
    ]
    normalized = DateInterval(start, end, candidate.booking_id)

    conflicts = [interval for interval in others if overlaps(normalized, interval)]
    if conflicts:
        return ValidationResult.reject(RejectionReason.OVERLAP, conflicts)

    if classify_day(end, others) is DayState.FULLY_BLOCKED_EDGE:
        return ValidationResult.reject(
            RejectionReason.EDGE_BLOCKED,
            message="Your check-out falls on a fully occupied changeover day.",
        )
    if classify_day(start, others) is DayState.FULLY_BLOCKED_EDGE:
        return ValidationResult.reject(RejectionReason.EDGE_BLOCKED)

    return ValidationResult.accept()


def _first_of_month(day: date) -> date:
    return day.replace(day=1)


def _first_of_next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def classify_range(
    from_month: date,
    to_month: date,
    active: Iterable[DateInterval],
) -> dict[date, DayState]:
    """Classify every day from the first of ``from_month`` to the end of ``to_month``.

    Args:
        from_month: Any day in the first month shown.
        to_month: Any day in the last month shown.
        active: Every pending or approved stay.

    Returns:
        A day state for each calendar day, in date order.

    Raises:
        ValueError: If ``to_month`` falls before ``from_month``.
    """
    start = _first_of_month(normalize(from_month))
    stop = _first_of_next_month(normalize(to_month))
    if stop <= start:
        raise ValueError("to_month must not be before from_month")

    intervals = list(active)
    states: dict[date, DayState] = {}
    day = start
    while day < stop:
        states[day] = classify_day(day, intervals)
        day += timedelta(days=1)
    return states


# ---------------------------------------------------------------------------
# In-progress calendar selection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DateSelection:
    """A calendar selection: nothing, a chosen arrival, or a full stay."""

    check_in: date | None = None
    check_out: date | None = None

    @property
    def in_progress(self) -> bool:
        return self.check_in is not None and self.check_out is None

    @property
    def complete(self) -> bool:
        return self.check_in is not None and self.check_out is not None


@dataclass(frozen=True)
class SelectionResult:
    """New selection after a click, plus the reason when the click was refused."""

    selection: DateSelection = field(default_factory=DateSelection)
    reason: RejectionReason | None = None
    message: str | None = None
    cleared: bool = False

    @property
    def accepted(self) -> bool:
        return self.reason is None


def _start_selection(day: date, intervals: list[DateInterval]) -> SelectionResult:
    state = classify_day(day, intervals)
    if state is DayState.FULLY_BLOCKED_EDGE:
        rejected = ValidationResult.reject(RejectionReason.EDGE_BLOCKED)
        return SelectionResult(reason=rejected.reason, message=rejected.message)
    if state is DayState.CHECKIN_ONLY:
        return SelectionResult(
            reason=RejectionReason.OVERLAP,
            message="That date is check-out only.",
        )
    if state is DayState.INTERIOR:
        rejected = ValidationResult.reject(RejectionReason.OVERLAP)
        return SelectionResult(reason=rejected.reason, message=rejected.message)
    return SelectionResult(selection=DateSelection(check_in=day))


def advance_selection(
    current: DateSelection,
    clicked: date,
    active: Iterable[DateInterval],
    *,
    max_stay_nights: int | None = None,
) -> SelectionResult:
    """Apply one calendar click to ``current``.

    The first click picks the arrival day, the second the departure day.
    Clicking the pending arrival day again clears the selection. A refused
    click leaves ``current`` untouched.

    Args:
        current: The selection before the click.
        clicked: The day the user clicked.
        active: Every pending or approved stay.
        max_stay_nights: Length ceiling applied to the completed stay.

    Returns:
        The new selection, or ``current`` with the refusal reason.
    """
    day = normalize(clicked)
    intervals = list(active)

    if not current.in_progress:
        result = _start_selection(day, intervals)
        return result if result.accepted else SelectionResult(current, result.reason, result.message)

    if day == current.check_in:
        return SelectionResult(selection=DateSelection(), cleared=True)
    if day < current.check_in:
        result = _start_selection(day, intervals)
        return result if result.accepted else SelectionResult(current, result.reason, result.message)

    validation = validate_candidate(
        DateInterval(current.check_in, day),
        intervals,
        max_stay_nights=max_stay_nights,
    )
    if not validation.accepted:
        return SelectionResult(current, validation.reason, validation.message)
    return SelectionResult(selection=DateSelection(current.check_in, day))
