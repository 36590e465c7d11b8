"""Approval model: append-only record of an approve/reject decision."""

import uuid

from sqlalchemy import Enum, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cottagebook.booking.status import ApprovalAction
from cottagebook.database import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class Approval(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """Who decided on a booking request, how, and when. Never updated."""

    __tablename__ = "approvals"

    booking_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    action: Mapped[ApprovalAction] = mapped_column(
        Enum(
            ApprovalAction,
            native_enum=False,
            length=20,
            values_callable=lambda actions: [a.value for a in actions],
        ),
        nullable=False,
    )
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    booking: Mapped["Booking"] = relationship(back_populates="approvals", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    def __repr__(self) -> str:
        return f"<Approval(booking_id={self.booking_id}, action={self.action}, user_id={self.user_id})>"
