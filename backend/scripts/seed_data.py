"""Seed the database with dashboard users and a realistic booking calendar.

Creates one account per role plus a handful of bookings around today,
including a back-to-back changeover so the calendar shows every day state.

Run from ``backend/``:
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, timedelta
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete

from cottagebook.auth.passwords import hash_password
from cottagebook.booking.status import ApprovalAction, BookingStatus
from cottagebook.database import async_session_factory, engine
from cottagebook.models import (
    Approval,
    Booking,
    Cancellation,
    Recommendation,
    RecommendationStatus,
    Subscriber,
    SubscriberStatus,
    User,
)
from cottagebook.models.booking import new_cancel_token
from cottagebook.models.user import ROLE_ADMIN, ROLE_APPROVER, ROLE_CLEANER

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

USERS = [
    {"email": "admin@cornerstones.example.com", "password": "admin1234", "name": "Margaret", "role": ROLE_ADMIN},
    {"email": "approver@cornerstones.example.com", "password": "approve1234", "name": "David", "role": ROLE_APPROVER},
    {"email": "cleaner@cornerstones.example.com", "password": "clean1234", "name": "Sue", "role": ROLE_CLEANER},
]

RECOMMENDATIONS = [
    {
        "name": "The Ship Inn",
        "address": "Harbour Road",
        "description": "Harbour-side pub with a good Sunday roast. Dogs welcome in the bar.",
        "category": "Pubs",
        "tags": ["food", "dog friendly"],
        "status": RecommendationStatus.APPROVED,
    },
    {
        "name": "Porthmeor Beach",
        "address": None,
        "description": "Sandy surf beach ten minutes' walk away; lifeguarded in summer.",
        "category": "Beaches",
        "tags": ["surf", "family"],
        "status": RecommendationStatus.APPROVED,
    },
    {
        "name": "Coast path to Zennor",
        "address": None,
        "description": "Six miles of cliff path. Bus back from Zennor in the afternoon.",
        "category": "Walks",
        "tags": ["walking"],
        "status": RecommendationStatus.PENDING,
    },
]


SUBSCRIBERS = [
    {"name": "Holly Trevail", "email": "holly@example.com", "status": SubscriberStatus.ACTIVE},
    {"name": "Ian Rowe", "email": "ian@example.com", "status": SubscriberStatus.UNSUBSCRIBED},
]


def _build_bookings(today: date) -> list[dict]:
    """Stays relative to ``today``: ``(offset_days, nights, status, guest)``."""
    plan = [
        (-20, 7, BookingStatus.APPROVED, ("Alice Hughes", "alice@example.com", True)),
        (3, 4, BookingStatus.APPROVED, ("Ben Carter", "ben@example.com", False)),
        # Arrives the day Ben leaves: a fully occupied changeover day.
        (7, 7, BookingStatus.APPROVED, ("Chloe Evans", "chloe@example.com", True)),
        (21, 5, BookingStatus.PENDING, ("Dan Price", "dan@example.com", False)),
        (30, 3, BookingStatus.REJECTED, ("Erin Walsh", "erin@example.com", False)),
        (40, 10, BookingStatus.CANCELLED, ("Faye Morgan", "faye@example.com", True)),
    ]
    bookings = []
    for offset, nights, status, (name, email, family) in plan:
        check_in = today + timedelta(days=offset)
        bookings.append(
            {
                "guest_name": name,
                "guest_email": email,
                "check_in": check_in,
                "check_out": check_in + timedelta(days=nights),
                "adults": 2,
                "grandchildren_over21": 1 if family else 0,
                "children_16plus": 1,
                "students": 0,
                "family_member": family,
                "status": status,
            }
        )
    return bookings


async def seed() -> None:
    """Wipe and re-create all seed data. Safe to run repeatedly."""
    async with async_session_factory() as session:
        for model in (Approval, Cancellation, Booking, Recommendation, Subscriber, User):
            await session.execute(delete(model))
        await session.flush()

        # ------------------------------------------------------------------
        # 1. Users
        # ------------------------------------------------------------------
        users: dict[str, User] = {}
        for data in USERS:
            user = User(
                email=data["email"],
                hashed_password=hash_password(data["password"]),
                name=data["name"],
                role=data["role"],
                is_active=True,
            )
            session.add(user)
            users[data["role"]] = user
        await session.flush()
        print(f"Created {len(users)} users")

        # ------------------------------------------------------------------
        # 2. Bookings with their history
        # ------------------------------------------------------------------
        approver = users[ROLE_APPROVER]
        bookings = _build_bookings(date.today())
        for data in bookings:
            booking = Booking(**data, cancel_token=new_cancel_token())
            session.add(booking)
            await session.flush()

            if booking.status in (BookingStatus.APPROVED, BookingStatus.CANCELLED):
                session.add(Approval(booking_id=booking.id, user_id=approver.id, action=ApprovalAction.APPROVED))
            elif booking.status is BookingStatus.REJECTED:
                session.add(
                    Approval(
                        booking_id=booking.id,
                        user_id=approver.id,
                        action=ApprovalAction.REJECTED,
                        comment="The family are using the cottage that week.",
                    )
                )
            if booking.status is BookingStatus.CANCELLED:
                session.add(Cancellation(booking_id=booking.id, reason="Change of plans."))
            print(f"   {booking.guest_name}: {booking.check_in} -> {booking.check_out} ({booking.status.value})")

        # ------------------------------------------------------------------
        # 3. Recommendations
        # ------------------------------------------------------------------
        for data in RECOMMENDATIONS:
            session.add(Recommendation(photos=[], submitted_by="Margaret", **data))

        # ------------------------------------------------------------------
        # 4. Sunny-week mailing list
        # ------------------------------------------------------------------
        for data in SUBSCRIBERS:
            session.add(Subscriber(**data))

        await session.commit()

    print()
    print("=" * 60)
    print("Seed Summary")
    print("=" * 60)
    for data in USERS:
        print(f"   {data['role']:<9} {data['email']} / {data['password']}")
    print(f"   Bookings:        {len(bookings)}")
    print(f"   Recommendations: {len(RECOMMENDATIONS)}")
    print(f"   Subscribers:     {len(SUBSCRIBERS)}")
    print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
