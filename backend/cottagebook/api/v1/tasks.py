"""Scheduled job endpoints, called by an external cron."""

import logging
import secrets
from datetime import date

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cottagebook.api.deps import get_db, get_email_notifier, get_weather_client
from cottagebook.config import settings
from cottagebook.services.notifications import EmailNotifier
from cottagebook.services.reminders import run_daily_tasks
from cottagebook.services.weather import WeatherClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"])


def require_cron_secret(
    authorization: str | None = Header(None),
    key: str | None = Query(None, description="Alternative to the Authorization header"),
) -> None:
    """Accept ``Authorization: Bearer <cron_secret>`` or ``?key=<cron_secret>``.

    With no secret configured every call is refused.
    """
    expected = settings.cron_secret
    supplied = key
    if authorization and authorization.lower().startswith("bearer "):
        supplied = authorization[len("bearer ") :]

    if not expected or not supplied or not secrets.compare_digest(supplied.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )


@router.post("/daily", dependencies=[Depends(require_cron_secret)], summary="Send the day's reminders")
async def daily_tasks(
    today: date | None = Query(None, description="Override the run date (defaults to today)"),
    db: AsyncSession = Depends(get_db),
    notifier: EmailNotifier = Depends(get_email_notifier),
    weather: WeatherClient = Depends(get_weather_client),
) -> dict[str, int]:
    counts = await run_daily_tasks(db, notifier, weather, today)
    logger.info("Daily tasks finished: %s", counts)
    return counts
