"""SQLAlchemy implementation of the booking datastore.

All methods run inside the caller's session/transaction; nothing here commits.
"""

import logging
import uuid
from collections.abc import Collection
from datetime import date

from sqlalchemy import select, text, update
from sqlalchemy.ext.asyncio import AsyncSession

from cottagebook.booking.errors import BookingNotFoundError, StaleStateError
from cottagebook.booking.intervals import DateInterval
from cottagebook.booking.lifecycle import BookingDetails
from cottagebook.booking.status import ApprovalAction, BookingStatus
from cottagebook.models.approval import Approval
from cottagebook.models.booking import Booking, new_cancel_token
from cottagebook.models.cancellation import Cancellation

logger = logging.getLogger(__name__)

# Arbitrary constant shared by every process; one cottage means one calendar.
CALENDAR_LOCK_KEY = 724_310_001


class SqlBookingStore:
    """Booking persistence backed by an ``AsyncSession``."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def lock_calendar(self) -> None:
        """Serialize validate-then-write windows until the transaction ends.

        Uses a PostgreSQL transaction-scoped advisory lock. Other dialects get
        no lock.
        """
        if self._db.get_bind().dialect.name != "postgresql":
            return
        await self._db.execute(
            text("SELECT pg_advisory_xact_lock(:key)"),
            {"key": CALENDAR_LOCK_KEY},
        )

    async def list_active_intervals(
        self,
        statuses: Collection[BookingStatus],
        exclude_id: uuid.UUID | None = None,
    ) -> list[DateInterval]:
        query = select(Booking.id, Booking.check_in, Booking.check_out).where(
            Booking.status.in_(list(statuses))
        )
        if exclude_id is not None:
            query = query.where(Booking.id != exclude_id)

        result = await self._db.execute(query.order_by(Booking.check_in))
        return [DateInterval(row.check_in, row.check_out, row.id) for row in result.all()]

    async def get_booking(self, booking_id: uuid.UUID) -> Booking:
        booking = await self._db.get(Booking, booking_id, populate_existing=True)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    async def get_booking_by_cancel_token(self, token: str) -> Booking:
        result = await self._db.execute(
            select(Booking)
            .where(Booking.cancel_token == token)
            .execution_options(populate_existing=True)
        )
        booking = result.scalar_one_or_none()
        if booking is None:
            # Never echo the token back into logs or messages.
            raise BookingNotFoundError("for cancellation link")
        return booking

    async def create_booking(self, details: BookingDetails) -> Booking:
        booking = Booking(
            **details.as_fields(),
            status=BookingStatus.PENDING,
            cancel_token=new_cancel_token(),
        )
        self._db.add(booking)
        await self._db.flush()
        await self._db.refresh(booking)
        return booking

    async def update_booking_status(
        self,
        booking_id: uuid.UUID,
        expected: BookingStatus,
        new_status: BookingStatus,
    ) -> Booking:
        return await self._compare_and_set(booking_id, expected, status=new_status)

    async def update_booking_dates(
        self,
        booking_id: uuid.UUID,
        expected: BookingStatus,
        check_in: date,
        check_out: date,
    ) -> Booking:
        return await self._compare_and_set(booking_id, expected, check_in=check_in, check_out=check_out)

    async def append_approval(
        self,
        booking_id: uuid.UUID,
        user_id: uuid.UUID,
        action: ApprovalAction,
        comment: str | None = None,
    ) -> Approval:
        approval = Approval(booking_id=booking_id, user_id=user_id, action=action, comment=comment)
        self._db.add(approval)
        await self._db.flush()
        await self._db.refresh(approval)
        return approval

    async def append_cancellation(self, booking_id: uuid.UUID, reason: str) -> Cancellation:
        cancellation = Cancellation(booking_id=booking_id, reason=reason)
        self._db.add(cancellation)
        await self._db.flush()
        await self._db.refresh(cancellation)
        return cancellation

    async def get_latest_cancellation_reason(self, booking_id: uuid.UUID) -> str | None:
        result = await self._db.execute(
            select(Cancellation.reason)
            .where(Cancellation.booking_id == booking_id)
            .order_by(Cancellation.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def _compare_and_set(
        self, booking_id: uuid.UUID, expected: BookingStatus, **values: object
    ) -> Booking:
        """UPDATE the booking only if its stored status is still ``expected``."""
        result = await self._db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.status == expected)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        booking = await self._db.get(Booking, booking_id, populate_existing=True)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        if result.rowcount == 0:
            raise StaleStateError(booking_id, expected.value, BookingStatus(booking.status).value)
        return booking
