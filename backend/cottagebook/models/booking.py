"""Booking model: a guest's request to stay at the cottage."""

import secrets
import uuid
from datetime import date

from sqlalchemy import Boolean, Date, Enum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cottagebook.booking.intervals import DateInterval
from cottagebook.booking.status import BookingStatus
from cottagebook.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


def new_cancel_token() -> str:
    """Unguessable, URL-safe secret for the guest's cancellation link."""
    return secrets.token_urlsafe(32)


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A stay over ``[check_in, check_out)`` and the party requesting it."""

    __tablename__ = "bookings"

    guest_name: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)

    adults: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    grandchildren_over21: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    children_16plus: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    students: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    family_member: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    status: Mapped[BookingStatus] = mapped_column(
        Enum(
            BookingStatus,
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True,
    )
    cancel_token: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        index=True,
        nullable=False,
        default=new_cancel_token,
    )

    # Relationships
    approvals: Mapped[list["Approval"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="booking", lazy="selectin", order_by="Approval.created_at"
    )
    cancellations: Mapped[list["Cancellation"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="booking", lazy="selectin", order_by="Cancellation.created_at"
    )

    __table_args__ = (Index("ix_bookings_check_in_check_out", "check_in", "check_out"),)

    @property
    def interval(self) -> DateInterval:
        return DateInterval.of(self.check_in, self.check_out, self.id)

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    @property
    def reference(self) -> str:
        """Short booking number quoted to guests, e.g. ``2024-3F2A9C``."""
        return f"{self.check_in.year}-{self.id.hex[:6].upper()}"

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, check_in={self.check_in}, check_out={self.check_out}, status={self.status})>"
        )
