"""Shared test configuration and fixtures.

Each test gets a fresh in-memory SQLite database (aiosqlite) and a session
wrapped in a transaction that rolls back afterwards. The PostgreSQL advisory
lock is skipped on SQLite, which is fine for single-connection tests.
"""

import uuid
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from cottagebook.api.deps import get_email_notifier, get_notifier, get_weather_client
from cottagebook.auth.jwt import create_token_pair
from cottagebook.auth.passwords import hash_password
from cottagebook.database import Base, get_db
from cottagebook.main import app
from cottagebook.models.user import ROLE_ADMIN, ROLE_APPROVER, ROLE_CLEANER, User
from cottagebook.services.weather import DayForecast

TEST_PASSWORD = "testpass123"


# ---------------------------------------------------------------------------
# Recording notifier and fake forecast
# ---------------------------------------------------------------------------


class RecordingNotifier:
    """Stands in for the email notifier and remembers every call."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.fail = False

    async def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if self.fail:
            raise RuntimeError(f"{name} failed")

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]

    async def notify_approvers(self, booking) -> None:
        await self._record("notify_approvers", booking)

    async def notify_guest_of_decision(self, booking, decision, comment=None) -> None:
        await self._record("notify_guest_of_decision", booking, decision, comment)

    async def notify_guest_of_cancellation(self, booking, reason) -> None:
        await self._record("notify_guest_of_cancellation", booking, reason)

    async def notify_approvers_of_cancellation(self, booking, reason) -> None:
        await self._record("notify_approvers_of_cancellation", booking, reason)

    async def notify_admins_of_recommendation(self, recommendation) -> None:
        await self._record("notify_admins_of_recommendation", recommendation)

    async def send_cleaner_reminder(self, bookings) -> int:
        await self._record("send_cleaner_reminder", list(bookings))
        return 1 if bookings else 0

    async def send_arrival_reminder(self, booking) -> None:
        await self._record("send_arrival_reminder", booking)

    async def send_sunny_week_alert(self, subscriber, week) -> None:
        await self._record("send_sunny_week_alert", subscriber, list(week))


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


class FakeWeatherClient:
    """Serves a fixed forecast instead of calling Open-Meteo."""

    def __init__(self) -> None:
        self.forecast: list[DayForecast] = []
        self.calls = 0
        self.error: Exception | None = None

    async def daily_forecast(self, days: int = 16) -> list[DayForecast]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.forecast)


@pytest.fixture
def weather() -> FakeWeatherClient:
    return FakeWeatherClient()


# ---------------------------------------------------------------------------
# Database: fresh in-memory SQLite per test
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, notifier: RecordingNotifier, weather: FakeWeatherClient
) -> AsyncGenerator[AsyncClient, None]:
    """httpx AsyncClient wired to the test session, the recording notifier and the fake forecast."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_email_notifier] = lambda: notifier
    app.dependency_overrides[get_weather_client] = lambda: weather

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: users by role
# ---------------------------------------------------------------------------


async def _make_user(db_session: AsyncSession, role: str, name: str) -> User:
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"{role}-{unique}@test.com",
        hashed_password=hash_password(TEST_PASSWORD),
        name=name,
        is_active=True,
        role=role,
    )
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


def _headers_for(user: User) -> dict[str, str]:
    tokens = create_token_pair(str(user.id), user.role)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest_asyncio.fixture
async def approver_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, ROLE_APPROVER, "Approver")


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, ROLE_ADMIN, "Admin")


@pytest_asyncio.fixture
async def cleaner_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, ROLE_CLEANER, "Cleaner")


@pytest_asyncio.fixture
async def auth_headers(approver_user: User) -> dict[str, str]:
    """Authorization headers for an approver."""
    return _headers_for(approver_user)


@pytest_asyncio.fixture
async def cleaner_headers(cleaner_user: User) -> dict[str, str]:
    return _headers_for(cleaner_user)
