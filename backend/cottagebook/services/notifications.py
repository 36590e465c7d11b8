"""Email notifications for booking, recommendation and mailing-list events.

:class:`EmailNotifier` does the work: it resolves recipients by role and
sends rendered templates. :class:`BackgroundNotifier` is what request
handlers use; it defers every call to FastAPI background tasks so emails go
out after the response is produced and can never fail the request.
"""

import logging
from collections.abc import Iterable

from fastapi import BackgroundTasks
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cottagebook.booking.status import ApprovalAction
from cottagebook.models.booking import Booking
from cottagebook.models.recommendation import Recommendation
from cottagebook.models.subscriber import Subscriber
from cottagebook.models.user import APPROVER_ROLES, ROLE_ADMIN, ROLE_CLEANER, User
from cottagebook.services.email_client import EmailClient, EmailMessage
from cottagebook.services.email_templates import (
    comment_block,
    departures_list,
    format_date,
    render,
    render_booking,
    render_recommendation,
    render_sunny_week,
)
from cottagebook.services.weather import WeekDay

logger = logging.getLogger(__name__)


class EmailNotifier:
    """Sends every notification the service produces."""

    def __init__(
        self,
        client: EmailClient,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        self._client = client
        self._session_factory = session_factory

    async def _users_with_roles(self, roles: Iterable[str]) -> list[User]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(User).where(User.role.in_(list(roles)), User.is_active.is_(True)).order_by(User.email)
            )
            return list(result.scalars().all())

    async def _emails_for_roles(self, roles: Iterable[str]) -> list[str]:
        return [user.email for user in await self._users_with_roles(roles)]

    async def _send(self, to: list[str], rendered: tuple[str, str]) -> None:
        subject, html = rendered
        await self._client.send(EmailMessage(to=to, subject=subject, html=html))

    # -- booking lifecycle --------------------------------------------------

    async def notify_approvers(self, booking: Booking) -> None:
        recipients = await self._emails_for_roles(APPROVER_ROLES)
        if not recipients:
            logger.warning("No approvers to notify about booking %s", booking.id)
            return
        await self._send(recipients, render_booking("approval_request", booking))

    async def notify_guest_of_decision(
        self, booking: Booking, decision: ApprovalAction, comment: str | None = None
    ) -> None:
        if decision is ApprovalAction.APPROVED:
            rendered = render_booking(
                "booking_approved", booking, {"comment": comment_block("A note from us:", comment)}
            )
        else:
            rendered = render_booking(
                "booking_rejected", booking, {"comment": comment_block("Reason from the approver:", comment)}
            )
        await self._send([booking.guest_email], rendered)

    async def notify_guest_of_cancellation(self, booking: Booking, reason: str) -> None:
        await self._send(
            [booking.guest_email],
            render_booking("guest_cancellation", booking, reason=reason),
        )

    async def notify_approvers_of_cancellation(self, booking: Booking, reason: str) -> None:
        recipients = await self._emails_for_roles(APPROVER_ROLES)
        if not recipients:
            logger.warning("No approvers to notify about cancellation of booking %s", booking.id)
            return
        await self._send(
            recipients,
            render_booking("approver_cancellation", booking, reason=reason),
        )

    # -- recommendations and reminders -------------------------------------

    async def notify_admins_of_recommendation(self, recommendation: Recommendation) -> None:
        recipients = await self._emails_for_roles([ROLE_ADMIN])
        if not recipients:
            logger.info("No admin users to notify about recommendation %s", recommendation.id)
            return
        await self._send(recipients, render_recommendation(recommendation))

    async def send_cleaner_reminder(self, bookings: list[Booking]) -> int:
        """Email each cleaner the list of upcoming departures. Returns emails sent."""
        if not bookings:
            return 0
        cleaners = await self._users_with_roles([ROLE_CLEANER])
        for cleaner in cleaners:
            await self._send(
                [cleaner.email],
                render(
                    "cleaner_reminder",
                    {"departures": departures_list(bookings)},
                    cleaner_name=cleaner.name,
                    check_out=format_date(bookings[0].check_out),
                ),
            )
        return len(cleaners)

    async def send_arrival_reminder(self, booking: Booking) -> None:
        await self._send([booking.guest_email], render_booking("arrival_reminder", booking))

    async def send_sunny_week_alert(self, subscriber: Subscriber, week: list[WeekDay]) -> None:
        await self._send([subscriber.email], render_sunny_week(subscriber, week))


class BackgroundNotifier:
    """Schedules notifier calls to run after the response has been sent.

    The calls run outside the request, each with its own error handling, so a
    failing email can neither slow down nor undo the transition it follows.
    """

    def __init__(self, tasks: BackgroundTasks, notifier: EmailNotifier) -> None:
        self._tasks = tasks
        self._notifier = notifier

    def _schedule(self, method: str, *args: object) -> None:
        self._tasks.add_task(_run_safely, getattr(self._notifier, method), method, *args)

    async def notify_approvers(self, booking: Booking) -> None:
        self._schedule("notify_approvers", booking)

    async def notify_guest_of_decision(
        self, booking: Booking, decision: ApprovalAction, comment: str | None = None
    ) -> None:
        self._schedule("notify_guest_of_decision", booking, decision, comment)

    async def notify_guest_of_cancellation(self, booking: Booking, reason: str) -> None:
        self._schedule("notify_guest_of_cancellation", booking, reason)

    async def notify_approvers_of_cancellation(self, booking: Booking, reason: str) -> None:
        self._schedule("notify_approvers_of_cancellation", booking, reason)

    async def notify_admins_of_recommendation(self, recommendation: Recommendation) -> None:
        self._schedule("notify_admins_of_recommendation", recommendation)


async def _run_safely(call, name: str, *args: object) -> None:
    try:
        await call(*args)
    except Exception:
        logger.exception("Background notification %s failed", name)
