"""User model: approvers, admins and cleaners."""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from cottagebook.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

ROLE_ADMIN = "admin"
ROLE_APPROVER = "approver"
ROLE_CLEANER = "cleaner"

APPROVER_ROLES = frozenset({ROLE_ADMIN, ROLE_APPROVER})
VALID_ROLES = APPROVER_ROLES | {ROLE_CLEANER}


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A member of the family or staff who works the booking dashboard."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    role: Mapped[str] = mapped_column(String(50), default=ROLE_APPROVER, nullable=False, index=True)

    @property
    def is_approver(self) -> bool:
        return self.role in APPROVER_ROLES

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role!r}>"
