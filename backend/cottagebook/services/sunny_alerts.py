"""Weekly alert to mailing-list subscribers when a sunny week is still free."""

import logging
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cottagebook.booking.status import BookingStatus
from cottagebook.config import settings
from cottagebook.models.subscriber import Subscriber, SubscriberStatus
from cottagebook.services.booking_store import SqlBookingStore
from cottagebook.services.notifications import EmailNotifier
from cottagebook.services.weather import WeatherClient, build_week

logger = logging.getLogger(__name__)


def alert_window_start(today: date) -> date | None:
    """First day of the window to advertise, or ``None`` when today is not alert day."""
    if today.weekday() != settings.sunny_alert_weekday:
        return None
    return today + timedelta(days=settings.sunny_alert_lead_days)


async def send_sunny_alerts(
    db: AsyncSession,
    notifier: EmailNotifier,
    weather: WeatherClient,
    today: date,
) -> int:
    """Email every active subscriber if enough sunny days are free. Returns emails sent.

    A forecast failure skips the alert for this week. A failing subscriber
    email is logged and does not stop the others.
    """
    start = alert_window_start(today)
    if start is None:
        return 0

    try:
        forecast = await weather.daily_forecast()
    except Exception:
        logger.exception("Weather forecast unavailable, skipping sunny-week alert")
        return 0

    approved = await SqlBookingStore(db).list_active_intervals({BookingStatus.APPROVED})
    week = build_week(forecast, start, approved, settings.sunny_alert_window_days)
    sunny_free = sum(1 for day in week if day.sunny_and_free)
    if sunny_free < settings.sunny_alert_min_days:
        logger.info("Sunny-week alert for %s skipped: %d sunny free day(s)", start, sunny_free)
        return 0

    result = await db.execute(
        select(Subscriber).where(Subscriber.status == SubscriberStatus.ACTIVE).order_by(Subscriber.email)
    )
    subscribers = list(result.scalars().all())
    sent = 0
    for subscriber in subscribers:
        try:
            await notifier.send_sunny_week_alert(subscriber, week)
        except Exception:
            logger.exception("Sunny-week alert to subscriber %s failed", subscriber.id)
            continue
        sent += 1
    logger.info(
        "Sunny-week alert for %s: %d sunny free day(s), %d of %d subscriber(s) emailed",
        start,
        sunny_free,
        sent,
        len(subscribers),
    )
    return sent
