"""Tests for the SQL booking store: persistence and compare-and-swap writes."""

import uuid
from datetime import date

import pytest
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from cottagebook.booking.errors import BookingNotFoundError, StaleStateError
from cottagebook.booking.lifecycle import BookingDetails, BookingLifecycle
from cottagebook.booking.status import ACTIVE_STATUSES, ApprovalAction, BookingStatus
from cottagebook.models.booking import Booking
from cottagebook.models.user import User
from cottagebook.services.booking_store import SqlBookingStore


def _details(check_in: date, check_out: date, name: str = "Jane Guest") -> BookingDetails:
    return BookingDetails(
        guest_name=name,
        guest_email="jane@example.com",
        check_in=check_in,
        check_out=check_out,
        adults=2,
    )


@pytest.fixture
def sql_store(db_session: AsyncSession) -> SqlBookingStore:
    return SqlBookingStore(db_session)


class TestCreateAndRead:
    """Tests for persisting and reading bookings."""

    async def test_create_booking_persists_pending(self, sql_store) -> None:
        booking = await sql_store.create_booking(_details(date(2024, 6, 1), date(2024, 6, 8)))

        assert isinstance(booking.id, uuid.UUID)
        assert booking.status is BookingStatus.PENDING
        assert len(booking.cancel_token) >= 32
        assert booking.created_at is not None
        assert booking.reference == f"2024-{booking.id.hex[:6].upper()}"

    async def test_get_by_cancel_token(self, sql_store) -> None:
        booking = await sql_store.create_booking(_details(date(2024, 6, 1), date(2024, 6, 8)))
        found = await sql_store.get_booking_by_cancel_token(booking.cancel_token)
        assert found.id == booking.id

    async def test_unknown_token_does_not_leak_it(self, sql_store) -> None:
        with pytest.raises(BookingNotFoundError) as exc_info:
            await sql_store.get_booking_by_cancel_token("secret-token-value")
        assert "secret-token-value" not in str(exc_info.value)

    async def test_get_missing_booking(self, sql_store) -> None:
        with pytest.raises(BookingNotFoundError):
            await sql_store.get_booking(uuid.uuid4())

    async def test_list_active_intervals_filters_and_excludes(self, sql_store) -> None:
        keep = await sql_store.create_booking(_details(date(2024, 6, 1), date(2024, 6, 8)))
        other = await sql_store.create_booking(_details(date(2024, 6, 8), date(2024, 6, 10)))
        gone = await sql_store.create_booking(_details(date(2024, 7, 1), date(2024, 7, 3)))
        await sql_store.update_booking_status(gone.id, BookingStatus.PENDING, BookingStatus.REJECTED)

        intervals = await sql_store.list_active_intervals(ACTIVE_STATUSES)
        assert {i.booking_id for i in intervals} == {keep.id, other.id}

        without_self = await sql_store.list_active_intervals(ACTIVE_STATUSES, exclude_id=keep.id)
        assert [i.booking_id for i in without_self] == [other.id]

    async def test_lock_is_noop_on_sqlite(self, sql_store) -> None:
        await sql_store.lock_calendar()


class TestCompareAndSwap:
    """Tests for conditional status and date writes."""

    async def test_status_update_when_expected_matches(self, sql_store) -> None:
        booking = await sql_store.create_booking(_details(date(2024, 6, 1), date(2024, 6, 8)))

        updated = await sql_store.update_booking_status(booking.id, BookingStatus.PENDING, BookingStatus.APPROVED)

        assert updated.status is BookingStatus.APPROVED

    async def test_stale_status_raises_and_leaves_row(self, sql_store, db_session) -> None:
        booking = await sql_store.create_booking(_details(date(2024, 6, 1), date(2024, 6, 8)))
        # Another request rejected it in the meantime.
        await db_session.execute(
            update(Booking).where(Booking.id == booking.id).values(status=BookingStatus.REJECTED)
        )

        with pytest.raises(StaleStateError) as exc_info:
            await sql_store.update_booking_status(booking.id, BookingStatus.PENDING, BookingStatus.APPROVED)

        assert exc_info.value.actual == "rejected"
        reread = await sql_store.get_booking(booking.id)
        assert reread.status is BookingStatus.REJECTED

    async def test_date_update_is_conditional(self, sql_store) -> None:
        booking = await sql_store.create_booking(_details(date(2024, 6, 1), date(2024, 6, 8)))

        with pytest.raises(StaleStateError):
            await sql_store.update_booking_dates(
                booking.id, BookingStatus.APPROVED, date(2024, 6, 2), date(2024, 6, 9)
            )

        moved = await sql_store.update_booking_dates(
            booking.id, BookingStatus.PENDING, date(2024, 6, 2), date(2024, 6, 9)
        )
        assert (moved.check_in, moved.check_out) == (date(2024, 6, 2), date(2024, 6, 9))

    async def test_missing_row(self, sql_store) -> None:
        with pytest.raises(BookingNotFoundError):
            await sql_store.update_booking_status(uuid.uuid4(), BookingStatus.PENDING, BookingStatus.APPROVED)


class TestHistory:
    """Tests for approval and cancellation records."""

    async def test_approval_and_cancellation_records(self, sql_store, approver_user: User) -> None:
        booking = await sql_store.create_booking(_details(date(2024, 6, 1), date(2024, 6, 8)))

        approval = await sql_store.append_approval(booking.id, approver_user.id, ApprovalAction.APPROVED, "ok")
        assert approval.action is ApprovalAction.APPROVED
        assert approval.created_at is not None

        assert await sql_store.get_latest_cancellation_reason(booking.id) is None
        await sql_store.append_cancellation(booking.id, "change of plans")
        assert await sql_store.get_latest_cancellation_reason(booking.id) == "change of plans"

        reread = await sql_store.get_booking(booking.id)
        assert [a.comment for a in reread.approvals] == ["ok"]
        assert [c.reason for c in reread.cancellations] == ["change of plans"]


class TestLifecycleOnSql:
    """Tests for the lifecycle running against the SQL store."""

    async def test_edit_rejected_by_neighbour_keeps_dates(self, sql_store, notifier, approver_user: User) -> None:
        lifecycle = BookingLifecycle(sql_store, notifier)
        x = (await lifecycle.submit(_details(date(2024, 7, 1), date(2024, 7, 10), "X"))).booking
        y = (await lifecycle.submit(_details(date(2024, 7, 10), date(2024, 7, 20), "Y"))).booking
        await lifecycle.approve(x.id, approver_user.id)
        await lifecycle.approve(y.id, approver_user.id)

        result = await lifecycle.edit_dates(x.id, approver_user.id, check_out=date(2024, 7, 12))

        assert result.reason is not None and result.reason.value == "overlap"
        reread = await sql_store.get_booking(x.id)
        assert (reread.check_in, reread.check_out) == (date(2024, 7, 1), date(2024, 7, 10))
        assert reread.status is BookingStatus.APPROVED
