"""Pydantic v2 schemas for local recommendations."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from cottagebook.models.recommendation import RecommendationStatus


class RecommendationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str | None = Field(None, max_length=512)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    tags: list[str] = []
    photos: list[HttpUrl] = []
    submitted_by: str | None = Field(None, max_length=255)


class RecommendationUpdate(BaseModel):
    """Approver edit. Only the fields sent are changed."""

    name: str | None = Field(None, min_length=1, max_length=255)
    address: str | None = Field(None, max_length=512)
    description: str | None = Field(None, min_length=1)
    category: str | None = Field(None, min_length=1, max_length=100)
    tags: list[str] | None = None
    photos: list[HttpUrl] | None = None
    submitted_by: str | None = Field(None, max_length=255)


class RecommendationDecision(BaseModel):
    action: RecommendationStatus = Field(..., description="approved or rejected")


class RecommendationResponse(BaseModel):
    id: uuid.UUID
    name: str
    address: str | None = None
    description: str
    category: str
    tags: list[str]
    photos: list[str]
    submitted_by: str | None = None
    status: RecommendationStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RecommendationListResponse(BaseModel):
    items: list[RecommendationResponse]
    total: int
