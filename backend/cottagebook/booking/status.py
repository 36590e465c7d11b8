"""Booking status values and the transitions allowed between them."""

import enum


class _CaseInsensitiveEnum(str, enum.Enum):
    """String enum that accepts any casing of its values ("Pending" -> pending)."""

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None


class BookingStatus(_CaseInsensitiveEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


class ApprovalAction(_CaseInsensitiveEnum):
    APPROVED = "approved"
    REJECTED = "rejected"


ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.APPROVED})
TERMINAL_STATUSES = frozenset({BookingStatus.REJECTED, BookingStatus.CANCELLED})

# Status changes only. Date edits keep the status and are allowed from ACTIVE_STATUSES.
ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.APPROVED, BookingStatus.REJECTED}),
    BookingStatus.APPROVED: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.REJECTED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    """Check whether a booking may move from one status to another.

    Args:
        current: The status stored on the booking.
        target: The status being requested.

    Returns:
        True if ``ALLOWED_TRANSITIONS`` permits the move.
    """
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())
