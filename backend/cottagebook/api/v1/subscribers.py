"""Sunny-days mailing list: public subscribe and unsubscribe."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cottagebook.api.deps import get_db
from cottagebook.models.subscriber import Subscriber, SubscriberStatus
from cottagebook.schemas.subscriber import SubscribeRequest, SubscriberResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/subscribers", tags=["subscribers"])


@router.post(
    "",
    response_model=SubscriberResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Subscribe to sunny-week alerts",
)
async def subscribe(
    body: SubscribeRequest,
    db: AsyncSession = Depends(get_db),
) -> Subscriber:
    """Add an active subscriber, or reactivate one who left earlier.

    An address that is already active is refused with 409.
    """
    email = body.email.lower()
    result = await db.execute(select(Subscriber).where(Subscriber.email == email))
    subscriber = result.scalar_one_or_none()

    if subscriber is not None and subscriber.status is SubscriberStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This email is already subscribed!",
        )

    if subscriber is None:
        subscriber = Subscriber(name=body.name, email=email, status=SubscriberStatus.ACTIVE)
        db.add(subscriber)
    else:
        subscriber.name = body.name
        subscriber.status = SubscriberStatus.ACTIVE

    await db.flush()
    await db.refresh(subscriber)
    logger.info("Subscriber %s active", subscriber.id)
    return subscriber


@router.post(
    "/{subscriber_id}/unsubscribe",
    response_model=SubscriberResponse,
    summary="Stop sunny-week alerts",
)
async def unsubscribe(
    subscriber_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> Subscriber:
    """Target of the link in every alert email. Repeating it is harmless."""
    subscriber = await db.get(Subscriber, subscriber_id)
    if subscriber is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subscriber not found",
        )

    subscriber.status = SubscriberStatus.UNSUBSCRIBED
    await db.flush()
    await db.refresh(subscriber)
    logger.info("Subscriber %s unsubscribed", subscriber.id)
    return subscriber
