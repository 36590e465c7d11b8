"""Daily job: cleaner departure lists, guest arrival emails and the weekly sunny-days alert."""

import logging
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cottagebook.booking.status import BookingStatus
from cottagebook.config import settings
from cottagebook.models.booking import Booking
from cottagebook.services.notifications import EmailNotifier
from cottagebook.services.sunny_alerts import send_sunny_alerts
from cottagebook.services.weather import WeatherClient

logger = logging.getLogger(__name__)


async def _approved_where(db: AsyncSession, *criteria) -> list[Booking]:
    result = await db.execute(
        select(Booking)
        .where(Booking.status == BookingStatus.APPROVED, *criteria)
        .order_by(Booking.check_in)
    )
    return list(result.scalars().all())


async def run_daily_tasks(
    db: AsyncSession,
    notifier: EmailNotifier,
    weather: WeatherClient,
    today: date | None = None,
) -> dict[str, int]:
    """Send the day's reminders and return how many emails of each kind went out.

    Cleaners get one email listing every approved stay that ends
    ``cleaner_reminder_days`` from ``today``. Each guest whose approved stay
    starts ``guest_reminder_days`` from ``today`` gets an arrival reminder.
    On alert day, active subscribers hear about a sunny free week.

    Each step logs its own failures, so one broken email never stops the
    rest of the run.
    """
    today = today or date.today()

    departure_day = today + timedelta(days=settings.cleaner_reminder_days)
    departures = await _approved_where(db, Booking.check_out == departure_day)
    try:
        cleaners_emailed = await notifier.send_cleaner_reminder(departures)
    except Exception:
        logger.exception("Cleaner reminder for %s failed", departure_day)
        cleaners_emailed = 0
    logger.info(
        "Cleaner reminder for %s: %d departure(s), %d cleaner(s) emailed",
        departure_day,
        len(departures),
        cleaners_emailed,
    )

    arrival_day = today + timedelta(days=settings.guest_reminder_days)
    arrivals = await _approved_where(db, Booking.check_in == arrival_day)
    guests_emailed = 0
    for booking in arrivals:
        try:
            await notifier.send_arrival_reminder(booking)
        except Exception:
            logger.exception("Arrival reminder for booking %s failed", booking.id)
            continue
        guests_emailed += 1
    logger.info("Arrival reminders for %s: %d of %d sent", arrival_day, guests_emailed, len(arrivals))

    sunny_alerts = await send_sunny_alerts(db, notifier, weather, today)

    return {"cleaner": cleaners_emailed, "guests": guests_emailed, "sunny_alerts": sunny_alerts}
