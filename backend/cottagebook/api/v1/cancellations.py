"""Guest self-service cancellation through the emailed link.

The link carries the booking's ``cancel_token``; holding it is the only
authorization needed.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cottagebook.api.deps import get_db, get_lifecycle, raise_for_result
from cottagebook.booking.errors import BookingNotFoundError
from cottagebook.booking.lifecycle import BookingLifecycle
from cottagebook.schemas.booking import CancelLinkSummary, CancelRequest
from cottagebook.services.booking_store import SqlBookingStore

router = APIRouter(prefix="/api/v1/cancel", tags=["cancellations"])


@router.get("/{token}", response_model=CancelLinkSummary, summary="Booking behind a cancel link")
async def get_cancel_link(token: str, db: AsyncSession = Depends(get_db)) -> CancelLinkSummary:
    """Show the guest what they are about to cancel, or why they no longer can."""
    store = SqlBookingStore(db)
    try:
        booking = await store.get_booking_by_cancel_token(token)
    except BookingNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="This cancellation link is not valid.",
        ) from None

    return CancelLinkSummary(
        reference=booking.reference,
        guest_name=booking.guest_name,
        check_in=booking.check_in,
        check_out=booking.check_out,
        status=booking.status,
        cancellation_reason=await store.get_latest_cancellation_reason(booking.id),
    )


@router.post("/{token}", response_model=CancelLinkSummary, summary="Cancel through the link")
async def cancel_with_link(
    token: str,
    body: CancelRequest,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
) -> CancelLinkSummary:
    result = await lifecycle.cancel_with_token(token, body.reason)
    raise_for_result(result)
    booking = result.booking
    return CancelLinkSummary(
        reference=booking.reference,
        guest_name=booking.guest_name,
        check_in=booking.check_in,
        check_out=booking.check_out,
        status=booking.status,
        cancellation_reason=result.record.reason,
    )
