"""SQLAlchemy models for the cottage booking service.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from cottagebook.models.approval import Approval
from cottagebook.models.booking import Booking
from cottagebook.models.cancellation import Cancellation
from cottagebook.models.recommendation import Recommendation, RecommendationStatus
from cottagebook.models.subscriber import Subscriber, SubscriberStatus
from cottagebook.models.user import User

__all__ = [
    "Approval",
    "Booking",
    "Cancellation",
    "Recommendation",
    "RecommendationStatus",
    "Subscriber",
    "SubscriberStatus",
    "User",
]
