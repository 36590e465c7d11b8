"""Subscriber model: people who asked to hear about sunny free weeks."""

import enum

from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from cottagebook.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class SubscriberStatus(str, enum.Enum):
    ACTIVE = "active"
    UNSUBSCRIBED = "unsubscribed"


class Subscriber(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A mailing-list entry. Only ``active`` subscribers receive alerts."""

    __tablename__ = "subscribers"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    status: Mapped[SubscriberStatus] = mapped_column(
        Enum(
            SubscriberStatus,
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=SubscriberStatus.ACTIVE,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Subscriber(id={self.id}, email={self.email!r}, status={self.status})>"
