"""Tests for date normalization, overlap rules and day classification."""

from datetime import date, datetime, timedelta, timezone

import pytest

from cottagebook.booking.intervals import (
    DateInterval,
    DayState,
    classify_day,
    normalize,
    overlaps,
    same_day,
)


def _iv(start: str, end: str) -> DateInterval:
    return DateInterval(date.fromisoformat(start), date.fromisoformat(end))


class TestNormalize:
    """Tests for reducing dates and datetimes to calendar days."""

    def test_date_is_returned_unchanged(self) -> None:
        assert normalize(date(2024, 1, 5)) == date(2024, 1, 5)

    def test_naive_datetime_drops_time(self) -> None:
        assert normalize(datetime(2024, 1, 5, 23, 59)) == date(2024, 1, 5)

    def test_aware_datetime_uses_local_calendar_day(self) -> None:
        value = datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc)
        assert normalize(value) == value.astimezone().date()

    @pytest.mark.parametrize(
        "value",
        [
            date(2024, 2, 29),
            datetime(2024, 1, 1, 0, 0),
            datetime(2024, 12, 31, 23, 59, 59),
            datetime(2024, 6, 1, 12, tzinfo=timezone(timedelta(hours=-10))),
        ],
    )
    def test_idempotent(self, value) -> None:
        assert normalize(normalize(value)) == normalize(value)


class TestSameDay:
    """Tests for calendar-day equality."""

    def test_time_of_day_ignored(self) -> None:
        assert same_day(datetime(2024, 3, 1, 1, 0), datetime(2024, 3, 1, 22, 30))

    def test_date_and_datetime_compare(self) -> None:
        assert same_day(date(2024, 3, 1), datetime(2024, 3, 1, 9, 15))

    def test_value_is_same_day_as_itself(self) -> None:
        now = datetime.now()
        assert same_day(now, now)

    def test_different_days(self) -> None:
        assert not same_day(date(2024, 3, 1), date(2024, 3, 2))

    def test_missing_value_is_never_same_day(self) -> None:
        assert not same_day(None, date(2024, 3, 1))
        assert not same_day(date(2024, 3, 1), None)
        assert not same_day(None, None)


class TestDateInterval:
    """Tests for building stay intervals."""

    def test_of_normalizes_datetimes(self) -> None:
        interval = DateInterval.of(datetime(2024, 1, 1, 15), datetime(2024, 1, 4, 10))
        assert interval == DateInterval(date(2024, 1, 1), date(2024, 1, 4))
        assert interval.nights == 3

    def test_contains_interior_excludes_endpoints(self) -> None:
        interval = _iv("2024-01-01", "2024-01-04")
        assert not interval.contains_interior(date(2024, 1, 1))
        assert interval.contains_interior(date(2024, 1, 2))
        assert not interval.contains_interior(date(2024, 1, 4))


class TestOverlaps:
    """Tests for the changeover-aware overlap rule."""

    def test_disjoint(self) -> None:
        assert not overlaps(_iv("2024-01-01", "2024-01-05"), _iv("2024-01-10", "2024-01-15"))

    def test_changeover_after_existing(self) -> None:
        assert not overlaps(_iv("2024-01-10", "2024-01-20"), _iv("2024-01-01", "2024-01-10"))

    def test_changeover_before_existing(self) -> None:
        assert not overlaps(_iv("2024-01-01", "2024-01-10"), _iv("2024-01-10", "2024-01-20"))

    def test_partial_overlap(self) -> None:
        assert overlaps(_iv("2024-01-05", "2024-01-15"), _iv("2024-01-01", "2024-01-10"))

    def test_contained(self) -> None:
        assert overlaps(_iv("2024-01-03", "2024-01-05"), _iv("2024-01-01", "2024-01-10"))

    def test_containing(self) -> None:
        assert overlaps(_iv("2023-12-20", "2024-01-20"), _iv("2024-01-01", "2024-01-10"))

    def test_same_arrival_day(self) -> None:
        assert overlaps(_iv("2024-01-01", "2024-01-03"), _iv("2024-01-01", "2024-01-10"))

    def test_same_departure_day(self) -> None:
        assert overlaps(_iv("2024-01-08", "2024-01-10"), _iv("2024-01-01", "2024-01-10"))

    def test_identical(self) -> None:
        assert overlaps(_iv("2024-01-01", "2024-01-10"), _iv("2024-01-01", "2024-01-10"))

    def test_symmetric_for_true_overlaps(self) -> None:
        a, b = _iv("2024-01-01", "2024-01-10"), _iv("2024-01-05", "2024-01-15")
        assert overlaps(a, b) == overlaps(b, a)


class TestClassifyDay:
    """Tests for classifying a single day."""

    A = _iv("2024-01-01", "2024-01-10")
    B = _iv("2024-01-10", "2024-01-20")

    def test_free_with_no_bookings(self) -> None:
        assert classify_day(date(2024, 1, 5), []) is DayState.FREE

    def test_interior(self) -> None:
        assert classify_day(date(2024, 1, 5), [self.A]) is DayState.INTERIOR

    def test_arrival_day_is_checkin_only(self) -> None:
        assert classify_day(date(2024, 1, 1), [self.A]) is DayState.CHECKIN_ONLY

    def test_departure_day_is_checkout_only(self) -> None:
        assert classify_day(date(2024, 1, 10), [self.A]) is DayState.CHECKOUT_ONLY

    def test_back_to_back_changeover_is_fully_blocked(self) -> None:
        assert classify_day(date(2024, 1, 10), [self.A, self.B]) is DayState.FULLY_BLOCKED_EDGE

    def test_interior_wins_over_edges(self) -> None:
        # Malformed data: an arrival inside another stay still reads as interior.
        inner = _iv("2024-01-05", "2024-01-06")
        assert classify_day(date(2024, 1, 5), [inner, self.A]) is DayState.INTERIOR

    def test_day_after_departure_is_free(self) -> None:
        assert classify_day(date(2024, 1, 21), [self.A, self.B]) is DayState.FREE

    def test_accepts_datetime(self) -> None:
        assert classify_day(datetime(2024, 1, 5, 18, 30), [self.A]) is DayState.INTERIOR


class TestDayStateFlags:
    """Tests for the check-in and check-out flags of each day state."""

    @pytest.mark.parametrize(
        "state, can_check_in, can_check_out, disabled",
        [
            (DayState.FREE, True, True, False),
            (DayState.INTERIOR, False, False, True),
            (DayState.CHECKOUT_ONLY, True, False, False),
            (DayState.CHECKIN_ONLY, False, True, False),
            (DayState.FULLY_BLOCKED_EDGE, False, False, True),
        ],
    )
    def test_flags(self, state, can_check_in, can_check_out, disabled) -> None:
        assert state.can_check_in is can_check_in
        assert state.can_check_out is can_check_out
        assert state.disabled is disabled
