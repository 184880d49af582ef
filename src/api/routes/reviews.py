from __future__ import annotations

from fastapi import APIRouter, Depends, status
from src.api.deps import get_review_service
from src.api.schemas.courses import ReviewCreate, ReviewCreated
from src.domain.services import ReviewService

router = APIRouter(tags=["Reviews"])


@router.post("/reviews", response_model=ReviewCreated, status_code=status.HTTP_201_CREATED)
async def create_review(
    payload: ReviewCreate,
    service: ReviewService = Depends(get_review_service),
) -> ReviewCreated:
    """Rate a completed application (once per application)."""
    review_id = await service.submit_review(
        user_id=payload.user_id,
        application_id=payload.application_id,
        rating=payload.rating,
    )
    return ReviewCreated(review_id=review_id)
