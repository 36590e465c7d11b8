"""In-memory booking store for exercising the lifecycle controller without a database."""

import uuid
from datetime import date, datetime

import pytest

from cottagebook.booking.errors import BookingNotFoundError, StaleStateError
from cottagebook.booking.intervals import DateInterval
from cottagebook.booking.lifecycle import BookingDetails, BookingLifecycle
from cottagebook.booking.status import BookingStatus
from cottagebook.models.approval import Approval
from cottagebook.models.booking import Booking, new_cancel_token
from cottagebook.models.cancellation import Cancellation


class FakeStore:
    """Dict-backed store with the same compare-and-swap contract as the SQL one.

    ``before_write`` runs just before a status/date write, letting a test
    simulate another request changing the row in between read and write.
    """

    def __init__(self) -> None:
        self.bookings: dict[uuid.UUID, Booking] = {}
        self.approvals: list[Approval] = []
        self.cancellations: list[Cancellation] = []
        self.lock_calls = 0
        self.before_write = None

    def add(self, check_in: date, check_out: date, status: BookingStatus = BookingStatus.PENDING) -> Booking:
        booking = Booking(
            id=uuid.uuid4(),
            guest_name="Seeded Guest",
            guest_email="seeded@example.com",
            check_in=check_in,
            check_out=check_out,
            adults=2,
            grandchildren_over21=0,
            children_16plus=0,
            students=0,
            family_member=False,
            status=status,
            cancel_token=new_cancel_token(),
        )
        self.bookings[booking.id] = booking
        return booking

    # -- BookingStore -------------------------------------------------------

    async def lock_calendar(self) -> None:
        self.lock_calls += 1

    async def list_active_intervals(self, statuses, exclude_id=None):
        return [
            DateInterval(b.check_in, b.check_out, b.id)
            for b in self.bookings.values()
            if b.status in statuses and b.id != exclude_id
        ]

    async def get_booking(self, booking_id):
        try:
            return self.bookings[booking_id]
        except KeyError:
            raise BookingNotFoundError(booking_id) from None

    async def get_booking_by_cancel_token(self, token):
        for booking in self.bookings.values():
            if booking.cancel_token == token:
                return booking
        raise BookingNotFoundError("for cancellation link")

    async def create_booking(self, details: BookingDetails):
        booking = Booking(
            id=uuid.uuid4(),
            **details.as_fields(),
            status=BookingStatus.PENDING,
            cancel_token=new_cancel_token(),
        )
        self.bookings[booking.id] = booking
        return booking

    async def update_booking_status(self, booking_id, expected, new_status):
        booking = self._check(booking_id, expected)
        booking.status = new_status
        return booking

    async def update_booking_dates(self, booking_id, expected, check_in, check_out):
        booking = self._check(booking_id, expected)
        booking.check_in = check_in
        booking.check_out = check_out
        return booking

    async def append_approval(self, booking_id, user_id, action, comment=None):
        approval = Approval(
            id=uuid.uuid4(),
            booking_id=booking_id,
            user_id=user_id,
            action=action,
            comment=comment,
            created_at=datetime.now(),
        )
        self.approvals.append(approval)
        return approval

    async def append_cancellation(self, booking_id, reason):
        cancellation = Cancellation(id=uuid.uuid4(), booking_id=booking_id, reason=reason, created_at=datetime.now())
        self.cancellations.append(cancellation)
        return cancellation

    async def get_latest_cancellation_reason(self, booking_id):
        reasons = [c.reason for c in self.cancellations if c.booking_id == booking_id]
        return reasons[-1] if reasons else None

    def _check(self, booking_id, expected) -> Booking:
        if self.before_write is not None:
            self.before_write()
        booking = self.bookings.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        if booking.status != expected:
            raise StaleStateError(booking_id, expected.value, BookingStatus(booking.status).value)
        return booking


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def lifecycle(store, notifier) -> BookingLifecycle:
    return BookingLifecycle(store, notifier, max_stay_nights=21)


@pytest.fixture
def details() -> BookingDetails:
    return BookingDetails(
        guest_name="Jane Guest",
        guest_email="jane@example.com",
        check_in=date(2024, 6, 1),
        check_out=date(2024, 6, 8),
        adults=2,
        children_16plus=1,
    )
