"""Recommendation model: local places suggested by guests and family."""

import enum

from sqlalchemy import JSON, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cottagebook.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class RecommendationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Recommendation(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A pub, beach, walk or shop worth visiting. Shown publicly once approved."""

    __tablename__ = "recommendations"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(String(512), default=None)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    tags: Mapped[list] = mapped_column(JSON, default=list)
    photos: Mapped[list] = mapped_column(JSON, default=list)  # public image URLs
    submitted_by: Mapped[str | None] = mapped_column(String(255), default=None)
    status: Mapped[RecommendationStatus] = mapped_column(
        Enum(
            RecommendationStatus,
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=RecommendationStatus.PENDING,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Recommendation(id={self.id}, name={self.name!r}, status={self.status})>"
