"""Booking lifecycle controller.

Owns the status machine of a booking::

    (new) -> pending -> approved -> cancelled
                    \\-> rejected

and mediates the side effects of each transition. The datastore and the
notifier are reached only through the :class:`BookingStore` and
:class:`Notifier` protocols below.

Every transition re-reads current state from the store and writes with the
status it read as a precondition, so a concurrent change surfaces as
``stale_state`` instead of being silently overwritten.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Collection
from dataclasses import asdict, dataclass
from datetime import date
from typing import Protocol

from cottagebook.booking.availability import RejectionReason, ValidationResult, validate_candidate
from cottagebook.booking.errors import BookingError, ErrorKind
from cottagebook.booking.intervals import DateInterval
from cottagebook.booking.status import (
    ACTIVE_STATUSES,
    ApprovalAction,
    BookingStatus,
    can_transition,
)
from cottagebook.models.approval import Approval
from cottagebook.models.booking import Booking
from cottagebook.models.cancellation import Cancellation

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Collaborator interfaces
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BookingDetails:
    """Everything a guest submits with a booking request."""

    guest_name: str
    guest_email: str
    check_in: date
    check_out: date
    adults: int = 0
    grandchildren_over21: int = 0
    children_16plus: int = 0
    students: int = 0
    family_member: bool = False

    def as_fields(self) -> dict:
        return asdict(self)


class BookingStore(Protocol):
    """Persistence operations the controller relies on.

    Status and date updates are compare-and-swap on ``expected``: they raise
    :class:`~cottagebook.booking.errors.StaleStateError` when the stored
    status differs and ``BookingNotFoundError`` when the row is missing.
    """

    async def lock_calendar(self) -> None: ...

    async def list_active_intervals(
        self,
        statuses: Collection[BookingStatus],
        exclude_id: uuid.UUID | None = None,
    ) -> list[DateInterval]: ...

    async def get_booking(self, booking_id: uuid.UUID) -> Booking: ...

    async def get_booking_by_cancel_token(self, token: str) -> Booking: ...

    async def create_booking(self, details: BookingDetails) -> Booking: ...

    async def update_booking_status(
        self,
        booking_id: uuid.UUID,
        expected: BookingStatus,
        new_status: BookingStatus,
    ) -> Booking: ...

    async def update_booking_dates(
        self,
        booking_id: uuid.UUID,
        expected: BookingStatus,
        check_in: date,
        check_out: date,
    ) -> Booking: ...

    async def append_approval(
        self,
        booking_id: uuid.UUID,
        user_id: uuid.UUID,
        action: ApprovalAction,
        comment: str | None = None,
    ) -> Approval: ...

    async def append_cancellation(self, booking_id: uuid.UUID, reason: str) -> Cancellation: ...

    async def get_latest_cancellation_reason(self, booking_id: uuid.UUID) -> str | None: ...


class Notifier(Protocol):
    """Best-effort outbound notifications. Failures never undo a transition."""

    async def notify_approvers(self, booking: Booking) -> None: ...

    async def notify_guest_of_decision(
        self, booking: Booking, decision: ApprovalAction, comment: str | None = None
    ) -> None: ...

    async def notify_guest_of_cancellation(self, booking: Booking, reason: str) -> None: ...

    async def notify_approvers_of_cancellation(self, booking: Booking, reason: str) -> None: ...


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a lifecycle operation.

    On success ``booking`` holds the updated record and ``record`` the history
    row written (if any). On failure ``error`` says which kind, and for
    validation failures ``reason`` says which rule was broken.
    """

    booking: Booking | None = None
    record: Approval | Cancellation | None = None
    error: ErrorKind | None = None
    reason: RejectionReason | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, error: ErrorKind, message: str, booking: Booking | None = None) -> TransitionResult:
        return cls(booking=booking, error=error, message=message)

    @classmethod
    def rejected(cls, validation: ValidationResult, booking: Booking | None = None) -> TransitionResult:
        return cls(
            booking=booking,
            error=ErrorKind.VALIDATION,
            reason=validation.reason,
            message=validation.message,
        )

    @classmethod
    def from_error(cls, exc: BookingError) -> TransitionResult:
        return cls(error=exc.kind, message=str(exc))


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class BookingLifecycle:
    """Drives booking status transitions against a store and a notifier."""

    def __init__(
        self,
        store: BookingStore,
        notifier: Notifier,
        *,
        max_stay_nights: int | None = 21,
        enforce_max_stay_on_edit: bool = False,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._max_stay_nights = max_stay_nights
        self._enforce_max_stay_on_edit = enforce_max_stay_on_edit

    # -- guest operations ---------------------------------------------------

    async def submit(self, details: BookingDetails) -> TransitionResult:
        """Create a ``pending`` booking if the requested stay is available."""
        candidate = DateInterval.of(details.check_in, details.check_out)

        await self._store.lock_calendar()
        active = await self._store.list_active_intervals(ACTIVE_STATUSES)
        validation = validate_candidate(candidate, active, max_stay_nights=self._max_stay_nights)
        if not validation.accepted:
            logger.info(
                "Rejected booking request %s -> %s: %s",
                candidate.check_in,
                candidate.check_out,
                validation.reason.value,
            )
            return TransitionResult.rejected(validation)

        booking = await self._store.create_booking(details)
        logger.info(
            "Created pending booking %s (%s -> %s)", booking.id, booking.check_in, booking.check_out
        )
        await self._notify("notify_approvers", booking)
        return TransitionResult(booking=booking)

    async def cancel_with_token(self, token: str, reason: str) -> TransitionResult:
        """Guest self-service cancellation through the emailed link."""
        try:
            booking = await self._store.get_booking_by_cancel_token(token)
        except BookingError as exc:
            return TransitionResult.from_error(exc)
        return await self._cancel(booking, reason, acting_user_id=None)

    # -- approver operations ------------------------------------------------

    async def approve(
        self, booking_id: uuid.UUID, acting_user_id: uuid.UUID | None, comment: str | None = None
    ) -> TransitionResult:
        return await self._decide(booking_id, acting_user_id, ApprovalAction.APPROVED, comment)

    async def reject(
        self, booking_id: uuid.UUID, acting_user_id: uuid.UUID | None, comment: str | None = None
    ) -> TransitionResult:
        return await self._decide(booking_id, acting_user_id, ApprovalAction.REJECTED, comment)

    async def cancel(
        self, booking_id: uuid.UUID, acting_user_id: uuid.UUID | None, reason: str
    ) -> TransitionResult:
        if acting_user_id is None:
            return TransitionResult.failure(
                ErrorKind.INVALID_TRANSITION, "Cancelling on behalf of a guest requires an acting user."
            )
        try:
            booking = await self._store.get_booking(booking_id)
        except BookingError as exc:
            return TransitionResult.from_error(exc)
        return await self._cancel(booking, reason, acting_user_id=acting_user_id)

    async def edit_dates(
        self,
        booking_id: uuid.UUID,
        acting_user_id: uuid.UUID | None,
        *,
        check_in: date | None = None,
        check_out: date | None = None,
    ) -> TransitionResult:
        """Move one or both ends of an active booking.

        An end that is not given stays where it is. The moved stay is
        re-validated against every *other* active booking; on rejection
        nothing is written.
        """
        if acting_user_id is None:
            return TransitionResult.failure(ErrorKind.INVALID_TRANSITION, "Editing dates requires an acting user.")
        if check_in is None and check_out is None:
            return TransitionResult.failure(
                ErrorKind.INVALID_TRANSITION, "Provide a new check-in or check-out date."
            )

        await self._store.lock_calendar()
        try:
            booking = await self._store.get_booking(booking_id)
        except BookingError as exc:
            return TransitionResult.from_error(exc)

        current = BookingStatus(booking.status)
        if current not in ACTIVE_STATUSES:
            return TransitionResult.failure(
                ErrorKind.INVALID_TRANSITION,
                f"Dates of a {current.value} booking cannot be changed.",
                booking,
            )

        candidate = DateInterval.of(
            check_in if check_in is not None else booking.check_in,
            check_out if check_out is not None else booking.check_out,
            booking.id,
        )
        active = await self._store.list_active_intervals(ACTIVE_STATUSES, exclude_id=booking.id)
        validation = validate_candidate(
            candidate,
            active,
            max_stay_nights=self._max_stay_nights if self._enforce_max_stay_on_edit else None,
            exclude_booking_id=booking.id,
        )
        if not validation.accepted:
            logger.info("Rejected date edit for booking %s: %s", booking.id, validation.reason.value)
            return TransitionResult.rejected(validation, booking)

        try:
            updated = await self._store.update_booking_dates(
                booking.id, current, candidate.check_in, candidate.check_out
            )
        except BookingError as exc:
            logger.warning("Date edit for booking %s lost a race: %s", booking_id, exc)
            return TransitionResult.from_error(exc)

        logger.info(
            "User %s moved booking %s to %s -> %s",
            acting_user_id,
            updated.id,
            updated.check_in,
            updated.check_out,
        )
        return TransitionResult(booking=updated)

    # -- internals ----------------------------------------------------------

    async def _decide(
        self,
        booking_id: uuid.UUID,
        acting_user_id: uuid.UUID | None,
        action: ApprovalAction,
        comment: str | None,
    ) -> TransitionResult:
        if acting_user_id is None:
            return TransitionResult.failure(
                ErrorKind.INVALID_TRANSITION, f"A booking can only be {action.value} by an identified user."
            )
        try:
            booking = await self._store.get_booking(booking_id)
        except BookingError as exc:
            return TransitionResult.from_error(exc)

        current = BookingStatus(booking.status)
        target = BookingStatus(action.value)
        if not can_transition(current, target):
            return TransitionResult.failure(
                ErrorKind.INVALID_TRANSITION,
                f"Cannot mark a {current.value} booking as {target.value}.",
                booking,
            )

        try:
            updated = await self._store.update_booking_status(booking.id, current, target)
        except BookingError as exc:
            logger.warning("Decision on booking %s lost a race: %s", booking_id, exc)
            return TransitionResult.from_error(exc)

        comment = comment.strip() if comment and comment.strip() else None
        approval = await self._store.append_approval(updated.id, acting_user_id, action, comment)
        logger.info("User %s %s booking %s", acting_user_id, action.value, updated.id)

        await self._notify("notify_guest_of_decision", updated, action, comment)
        return TransitionResult(booking=updated, record=approval)

    async def _cancel(
        self, booking: Booking, reason: str, acting_user_id: uuid.UUID | None
    ) -> TransitionResult:
        reason = (reason or "").strip()
        if not reason:
            return TransitionResult.failure(
                ErrorKind.INVALID_TRANSITION, "Please give a reason for cancelling.", booking
            )

        current = BookingStatus(booking.status)
        if not can_transition(current, BookingStatus.CANCELLED):
            message = (
                "Booking already cancelled."
                if current is BookingStatus.CANCELLED
                else f"A {current.value} booking cannot be cancelled."
            )
            return TransitionResult.failure(ErrorKind.INVALID_TRANSITION, message, booking)

        try:
            updated = await self._store.update_booking_status(booking.id, current, BookingStatus.CANCELLED)
        except BookingError as exc:
            logger.warning("Cancellation of booking %s lost a race: %s", booking.id, exc)
            return TransitionResult.from_error(exc)

        cancellation = await self._store.append_cancellation(updated.id, reason)
        logger.info(
            "Booking %s cancelled by %s", updated.id, acting_user_id if acting_user_id else "guest"
        )

        await self._notify("notify_guest_of_cancellation", updated, reason)
        await self._notify("notify_approvers_of_cancellation", updated, reason)
        return TransitionResult(booking=updated, record=cancellation)

    async def _notify(self, method: str, *args: object) -> None:
        """Fire a notifier call; a failure is logged and never propagated."""
        try:
            await getattr(self._notifier, method)(*args)
        except Exception:
            logger.exception("Notifier call %s failed; transition already recorded", method)
