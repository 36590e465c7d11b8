"""Error taxonomy for the booking core.

Expected outcomes (validation, invalid transition, stale state, not found)
reach callers as :class:`ErrorKind` values on a result object. The exceptions
below are raised by the datastore adapter and converted by the lifecycle
controller; anything else escaping the datastore is an infrastructure failure.
"""

import enum
import uuid


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    INVALID_TRANSITION = "invalid_transition"
    STALE_STATE = "stale_state"
    NOT_FOUND = "not_found"


class BookingError(Exception):
    """Base class for datastore outcomes the lifecycle controller understands."""

    kind: ErrorKind


class BookingNotFoundError(BookingError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, key: uuid.UUID | str) -> None:
        super().__init__(f"Booking {key} not found")
        self.key = key


class StaleStateError(BookingError):
    """The stored status no longer matches the status the caller read."""

    kind = ErrorKind.STALE_STATE

    def __init__(self, booking_id: uuid.UUID, expected: str, actual: str) -> None:
        super().__init__(
            f"Booking {booking_id} is {actual}, expected {expected}; it was changed by someone else"
        )
        self.booking_id = booking_id
        self.expected = expected
        self.actual = actual
