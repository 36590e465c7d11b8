"""Local recommendations: anyone may suggest, approvers publish."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cottagebook.api.deps import get_current_approver, get_db, get_notifier
from cottagebook.models.recommendation import Recommendation, RecommendationStatus
from cottagebook.models.user import User
from cottagebook.schemas.recommendation import (
    RecommendationCreate,
    RecommendationDecision,
    RecommendationListResponse,
    RecommendationResponse,
    RecommendationUpdate,
)
from cottagebook.services.notifications import BackgroundNotifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/recommendations", tags=["recommendations"])


async def _get_recommendation(db: AsyncSession, recommendation_id: uuid.UUID) -> Recommendation:
    recommendation = await db.get(Recommendation, recommendation_id)
    if recommendation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Recommendation not found",
        )
    return recommendation


async def _list(db: AsyncSession, *filters) -> dict:
    total = (await db.execute(select(func.count()).select_from(Recommendation).where(*filters))).scalar_one()
    result = await db.execute(
        select(Recommendation).where(*filters).order_by(Recommendation.category, Recommendation.name)
    )
    return {"items": list(result.scalars().all()), "total": total}


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=RecommendationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Suggest a local recommendation",
)
async def submit_recommendation(
    body: RecommendationCreate,
    db: AsyncSession = Depends(get_db),
    notifier: BackgroundNotifier = Depends(get_notifier),
) -> Recommendation:
    """Store a suggestion as ``pending`` and let the admins know."""
    recommendation = Recommendation(**body.model_dump(mode="json"), status=RecommendationStatus.PENDING)
    db.add(recommendation)
    await db.flush()
    await db.refresh(recommendation)
    logger.info("Recommendation %s submitted (%s)", recommendation.id, recommendation.category)

    await notifier.notify_admins_of_recommendation(recommendation)
    return recommendation


@router.get(
    "",
    response_model=RecommendationListResponse,
    summary="Published recommendations",
)
async def list_recommendations(
    category: str | None = Query(None, description="Filter by category"),
    db: AsyncSession = Depends(get_db),
) -> dict:
    filters = [Recommendation.status == RecommendationStatus.APPROVED]
    if category:
        filters.append(Recommendation.category == category)
    return await _list(db, *filters)


# ---------------------------------------------------------------------------
# Approvers
# ---------------------------------------------------------------------------


@router.get(
    "/review",
    response_model=RecommendationListResponse,
    summary="Recommendations by review status",
)
async def review_recommendations(
    status_filter: RecommendationStatus = Query(RecommendationStatus.PENDING, alias="status"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_approver),
) -> dict:
    return await _list(db, Recommendation.status == status_filter)


@router.post(
    "/{recommendation_id}/decision",
    response_model=RecommendationResponse,
    summary="Approve or reject a recommendation",
)
async def decide_recommendation(
    recommendation_id: uuid.UUID,
    body: RecommendationDecision,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_approver),
) -> Recommendation:
    if body.action is RecommendationStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="action must be approved or rejected",
        )

    recommendation = await _get_recommendation(db, recommendation_id)
    recommendation.status = body.action
    await db.flush()
    await db.refresh(recommendation)
    logger.info("User %s marked recommendation %s %s", current_user.id, recommendation.id, body.action.value)
    return recommendation


@router.put(
    "/{recommendation_id}",
    response_model=RecommendationResponse,
    summary="Edit a recommendation",
)
async def update_recommendation(
    recommendation_id: uuid.UUID,
    body: RecommendationUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_approver),
) -> Recommendation:
    """Partially update a recommendation. Its review status is left alone."""
    recommendation = await _get_recommendation(db, recommendation_id)

    for field, value in body.model_dump(mode="json", exclude_unset=True).items():
        setattr(recommendation, field, value)

    await db.flush()
    await db.refresh(recommendation)
    return recommendation
