"""Pydantic v2 schemas for the sunny-days mailing list."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from cottagebook.models.subscriber import SubscriberStatus


class SubscribeRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    consent: bool = Field(..., description="Must be true: the subscriber agrees to receive alert emails")

    @field_validator("consent")
    @classmethod
    def _consent_given(cls, value: bool) -> bool:
        if not value:
            raise ValueError("Please agree to receive emails before subscribing.")
        return value


class SubscriberResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    status: SubscriberStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
