"""Async SQLAlchemy engine, session factory, declarative base and column mixins."""

import uuid
from collections.abc import AsyncIterator
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from cottagebook.config import settings


def _engine_options(url: str) -> dict:
    """Pool sizing for server databases; SQLite (local runs) keeps its default pool."""
    options: dict = {"echo": settings.debug}
    if make_url(url).get_backend_name() != "sqlite":
        options.update(pool_pre_ping=True, pool_size=5, max_overflow=10)
    return options


engine = create_async_engine(settings.async_database_url, **_engine_options(settings.async_database_url))

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


class UUIDPrimaryKeyMixin:
    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)


class CreatedAtMixin:
    """For insert-only history rows (approvals, cancellations)."""

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())


class TimestampMixin(CreatedAtMixin):
    """For rows that are edited after creation."""

    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
    )


async def get_db() -> AsyncIterator[AsyncSession]:
    """One session and one transaction per request.

    Committed when the handler returns, rolled back if it raises. Booking
    writes rely on this: the calendar lock, the re-read of active bookings and
    the write all happen in the same transaction.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
