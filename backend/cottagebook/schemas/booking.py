"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field

from cottagebook.booking.intervals import DayState
from cottagebook.booking.lifecycle import BookingDetails
from cottagebook.booking.status import ApprovalAction, BookingStatus

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """A guest's booking request.

    Date order and availability are checked by the lifecycle controller, not
    here, so that every rejection carries the same reason codes.
    """

    guest_name: str = Field(..., min_length=1, max_length=255)
    guest_email: EmailStr
    check_in: date
    check_out: date
    adults: int = Field(1, ge=0)
    grandchildren_over21: int = Field(0, ge=0)
    children_16plus: int = Field(0, ge=0)
    students: int = Field(0, ge=0)
    family_member: bool = False

    def to_details(self) -> BookingDetails:
        return BookingDetails(
            guest_name=self.guest_name.strip(),
            guest_email=str(self.guest_email),
            check_in=self.check_in,
            check_out=self.check_out,
            adults=self.adults,
            grandchildren_over21=self.grandchildren_over21,
            children_16plus=self.children_16plus,
            students=self.students,
            family_member=self.family_member,
        )


class DateEditRequest(BaseModel):
    """Move one or both ends of a booking. Omitted ends stay where they are."""

    check_in: date | None = None
    check_out: date | None = None


class DecisionRequest(BaseModel):
    comment: str | None = Field(None, max_length=2000)


class CancelRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=2000)


class SelectionRequest(BaseModel):
    """One click on the availability calendar.

    ``check_in``/``check_out`` describe the selection before the click.
    """

    check_in: date | None = None
    check_out: date | None = None
    clicked: date


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    id: uuid.UUID
    reference: str
    guest_name: str
    guest_email: str
    check_in: date
    check_out: date
    nights: int
    adults: int
    grandchildren_over21: int
    children_16plus: int
    students: int
    family_member: bool
    status: BookingStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ApprovalResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    action: ApprovalAction
    comment: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CancellationResponse(BaseModel):
    id: uuid.UUID
    reason: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingDetailResponse(BookingResponse):
    """A booking with its approval and cancellation history, oldest first."""

    approvals: list[ApprovalResponse] = []
    cancellations: list[CancellationResponse] = []


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int


class CancelLinkSummary(BaseModel):
    """What a guest sees after following their cancellation link."""

    reference: str
    guest_name: str
    check_in: date
    check_out: date
    status: BookingStatus
    cancellation_reason: str | None = None

    model_config = ConfigDict(from_attributes=True)


class CalendarDay(BaseModel):
    date: date
    state: DayState

    @computed_field
    @property
    def can_check_in(self) -> bool:
        return self.state.can_check_in

    @computed_field
    @property
    def can_check_out(self) -> bool:
        return self.state.can_check_out

    @computed_field
    @property
    def disabled(self) -> bool:
        return self.state.disabled


class CalendarResponse(BaseModel):
    from_date: date
    to_date: date
    days: list[CalendarDay]


class SelectionResponse(BaseModel):
    check_in: date | None = None
    check_out: date | None = None
    accepted: bool
    cleared: bool = False
    reason: str | None = None
    message: str | None = None
