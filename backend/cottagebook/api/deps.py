"""Shared API dependencies: single import point for all routers.

Re-exports the database session and authentication dependencies and builds
the booking lifecycle controller for each request::

    from cottagebook.api.deps import get_db, get_current_approver, get_lifecycle
"""

from fastapi import BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cottagebook.auth.dependencies import get_current_approver, get_current_user
from cottagebook.booking.errors import ErrorKind
from cottagebook.booking.lifecycle import BookingLifecycle, TransitionResult
from cottagebook.config import settings
from cottagebook.database import async_session_factory, get_db
from cottagebook.services.booking_store import SqlBookingStore
from cottagebook.services.email_client import EmailClient
from cottagebook.services.notifications import BackgroundNotifier, EmailNotifier
from cottagebook.services.weather import WeatherClient

__all__ = [
    "get_db",
    "get_current_user",
    "get_current_approver",
    "get_email_notifier",
    "get_notifier",
    "get_lifecycle",
    "get_weather_client",
    "raise_for_result",
]


def get_email_notifier() -> EmailNotifier:
    """The notifier that actually sends, for jobs that await delivery."""
    return EmailNotifier(EmailClient(), async_session_factory)


def get_weather_client() -> WeatherClient:
    return WeatherClient()


def get_notifier(
    background_tasks: BackgroundTasks,
    notifier: EmailNotifier = Depends(get_email_notifier),
) -> BackgroundNotifier:
    """Notifier for request handlers: sends after the response, never raises."""
    return BackgroundNotifier(background_tasks, notifier)


def get_lifecycle(
    db: AsyncSession = Depends(get_db),
    notifier: BackgroundNotifier = Depends(get_notifier),
) -> BookingLifecycle:
    return BookingLifecycle(
        SqlBookingStore(db),
        notifier,
        max_stay_nights=settings.max_stay_nights,
        enforce_max_stay_on_edit=settings.enforce_max_stay_on_edit,
    )


# ---------------------------------------------------------------------------
# Result -> HTTP mapping
# ---------------------------------------------------------------------------

_CONFLICT_REASONS = {"overlap", "edge_blocked"}


def _status_for(result: TransitionResult) -> int:
    if result.error is ErrorKind.NOT_FOUND:
        return status.HTTP_404_NOT_FOUND
    if result.error is ErrorKind.VALIDATION:
        if result.reason is not None and result.reason.value in _CONFLICT_REASONS:
            return status.HTTP_409_CONFLICT
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    return status.HTTP_409_CONFLICT


def raise_for_result(result: TransitionResult) -> None:
    """Turn a failed lifecycle result into an ``HTTPException``.

    The body is ``{"detail": {"code", "reason", "message"}}`` so clients can
    branch on ``code`` and show ``message`` as-is.
    """
    if result.ok:
        return
    raise HTTPException(
        status_code=_status_for(result),
        detail={
            "code": result.error.value,
            "reason": result.reason.value if result.reason is not None else None,
            "message": result.message,
        },
    )
