"""Bookings API router.

Guests submit requests and read the availability calendar without logging in.
Everything that changes an existing booking (approve, reject, move dates,
cancel) is approver-only and goes through :class:`BookingLifecycle`.
"""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cottagebook.api.deps import get_current_approver, get_db, get_lifecycle, raise_for_result
from cottagebook.booking.availability import DateSelection, advance_selection, classify_range
from cottagebook.booking.lifecycle import BookingLifecycle
from cottagebook.booking.status import ACTIVE_STATUSES, BookingStatus
from cottagebook.config import settings
from cottagebook.models.booking import Booking
from cottagebook.models.user import User
from cottagebook.schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
    CalendarDay,
    CalendarResponse,
    CancelRequest,
    DateEditRequest,
    DecisionRequest,
    SelectionRequest,
    SelectionResponse,
)
from cottagebook.services.booking_store import SqlBookingStore

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])

# Longest calendar window a single request may ask for.
MAX_CALENDAR_MONTHS = 24


def _months_between(start: date, end: date) -> int:
    return (end.year - start.year) * 12 + end.month - start.month


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a stay",
)
async def create_booking(
    body: BookingCreate,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
) -> Booking:
    """Submit a booking request. It is created ``pending`` and approvers are emailed."""
    result = await lifecycle.submit(body.to_details())
    raise_for_result(result)
    return result.booking


@router.get(
    "/calendar",
    response_model=CalendarResponse,
    summary="Day-by-day availability",
)
async def get_calendar(
    from_month: date = Query(..., description="Any day in the first month to show"),
    to_month: date = Query(..., description="Any day in the last month to show"),
    db: AsyncSession = Depends(get_db),
) -> CalendarResponse:
    """Classify every day of the requested months against the active bookings."""
    months = _months_between(from_month, to_month)
    if months < 0:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="to_month must not be before from_month",
        )
    if months >= MAX_CALENDAR_MONTHS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"At most {MAX_CALENDAR_MONTHS} months can be requested at once",
        )

    active = await SqlBookingStore(db).list_active_intervals(ACTIVE_STATUSES)
    states = classify_range(from_month, to_month, active)
    days = [CalendarDay(date=day, state=state) for day, state in states.items()]
    return CalendarResponse(from_date=days[0].date, to_date=days[-1].date, days=days)


@router.post(
    "/selection",
    response_model=SelectionResponse,
    summary="Apply one click to a calendar selection",
)
async def advance_calendar_selection(
    body: SelectionRequest,
    db: AsyncSession = Depends(get_db),
) -> SelectionResponse:
    """Work out the next selection for a calendar click.

    A refused click returns the previous selection with ``accepted`` false and
    a message to display.
    """
    current = DateSelection(body.check_in, body.check_out)
    active = await SqlBookingStore(db).list_active_intervals(ACTIVE_STATUSES)
    result = advance_selection(current, body.clicked, active, max_stay_nights=settings.max_stay_nights)
    return SelectionResponse(
        check_in=result.selection.check_in,
        check_out=result.selection.check_out,
        accepted=result.accepted,
        cleared=result.cleared,
        reason=result.reason.value if result.reason is not None else None,
        message=result.message,
    )


# ---------------------------------------------------------------------------
# Approver endpoints
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List bookings",
)
async def list_bookings(
    status_filter: str | None = Query(None, alias="status", description="pending, approved, rejected or cancelled"),
    check_in_from: date | None = Query(None, description="Bookings with check_in >= this date"),
    check_in_to: date | None = Query(None, description="Bookings with check_in <= this date"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(50, ge=1, le=200, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_approver),
) -> dict:
    """Return bookings ordered by arrival date, optionally filtered."""
    filters = []
    if status_filter is not None:
        try:
            filters.append(Booking.status == BookingStatus(status_filter))
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unknown booking status {status_filter!r}",
            ) from None
    if check_in_from is not None:
        filters.append(Booking.check_in >= check_in_from)
    if check_in_to is not None:
        filters.append(Booking.check_in <= check_in_to)

    total = (await db.execute(select(func.count()).select_from(Booking).where(*filters))).scalar_one()
    result = await db.execute(
        select(Booking).where(*filters).order_by(Booking.check_in, Booking.created_at).offset(skip).limit(limit)
    )
    return {"items": list(result.scalars().all()), "total": total}


@router.get(
    "/{booking_id}",
    response_model=BookingDetailResponse,
    summary="Booking detail with approval and cancellation history",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_approver),
) -> Booking:
    booking = await db.get(Booking, booking_id, populate_existing=True)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found",
        )
    return booking


@router.post(
    "/{booking_id}/approve",
    response_model=BookingResponse,
    summary="Approve a pending booking",
)
async def approve_booking(
    booking_id: uuid.UUID,
    body: DecisionRequest | None = None,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    current_user: User = Depends(get_current_approver),
) -> Booking:
    result = await lifecycle.approve(booking_id, current_user.id, body.comment if body else None)
    raise_for_result(result)
    return result.booking


@router.post(
    "/{booking_id}/reject",
    response_model=BookingResponse,
    summary="Reject a pending booking",
)
async def reject_booking(
    booking_id: uuid.UUID,
    body: DecisionRequest | None = None,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    current_user: User = Depends(get_current_approver),
) -> Booking:
    result = await lifecycle.reject(booking_id, current_user.id, body.comment if body else None)
    raise_for_result(result)
    return result.booking


@router.patch(
    "/{booking_id}/dates",
    response_model=BookingResponse,
    summary="Move a booking's check-in and/or check-out",
)
async def edit_booking_dates(
    booking_id: uuid.UUID,
    body: DateEditRequest,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    current_user: User = Depends(get_current_approver),
) -> Booking:
    """Re-validate the moved stay against every other active booking, then save it."""
    result = await lifecycle.edit_dates(
        booking_id,
        current_user.id,
        check_in=body.check_in,
        check_out=body.check_out,
    )
    raise_for_result(result)
    return result.booking


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel an approved booking on the guest's behalf",
)
async def cancel_booking(
    booking_id: uuid.UUID,
    body: CancelRequest,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    current_user: User = Depends(get_current_approver),
) -> Booking:
    result = await lifecycle.cancel(booking_id, current_user.id, body.reason)
    raise_for_result(result)
    return result.booking
