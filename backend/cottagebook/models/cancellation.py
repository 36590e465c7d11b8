"""Cancellation model: append-only record of why a booking was cancelled."""

import uuid

from sqlalchemy import ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cottagebook.database import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class Cancellation(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """A cancellation reason. The most recent one per booking is authoritative."""

    __tablename__ = "cancellations"

    booking_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)

    booking: Mapped["Booking"] = relationship(back_populates="cancellations", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    def __repr__(self) -> str:
        return f"<Cancellation(booking_id={self.booking_id}, created_at={self.created_at})>"
