"""Review submission gated on application completion."""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import insert, select
from src.domain.errors import (
    AlreadyExistsError,
    DuplicateReviewError,
    IneligibleStateError,
    NotFoundError,
    OutOfRangeError,
    PersistenceError,
)
from src.infrastructure.db.gateway import Database
from src.infrastructure.db.models import (
    ApplicationModel,
    ApplicationStatus,
    ReviewModel,
    UserModel,
)

logger = structlog.get_logger()

MIN_RATING = 1
MAX_RATING = 5


class ReviewService:
    """Service for course reviews."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def submit_review(self, *, user_id: int, application_id: int, rating: int) -> int:
        """Store a visible review for a completed application owned by ``user_id``."""
        if isinstance(rating, bool) or not isinstance(rating, int):
            raise OutOfRangeError()
        if not MIN_RATING <= rating <= MAX_RATING:
            raise OutOfRangeError()

        application = await self.db.query_one(
            select(ApplicationModel.id, ApplicationModel.status).where(
                ApplicationModel.id == application_id,
                ApplicationModel.user_id == user_id,
            )
        )
        if application is None:
            raise NotFoundError("Application not found")

        if application["status"] != ApplicationStatus.COMPLETED.value:
            raise IneligibleStateError()

        existing = await self.db.query_one(
            select(ReviewModel.id).where(
                ReviewModel.application_id == application_id,
                ReviewModel.user_id == user_id,
            )
        )
        if existing is not None:
            raise DuplicateReviewError()

        try:
            created = await self.db.execute(
                insert(ReviewModel).values(
                    user_id=user_id,
                    application_id=application_id,
                    rating=rating,
                    is_visible=True,
                )
            )
        except AlreadyExistsError as exc:
            # a concurrent submission won the race to the unique constraint
            raise DuplicateReviewError() from exc

        if created.insert_id is None:
            raise PersistenceError("Review could not be created")

        logger.info(
            "review_created",
            review_id=created.insert_id,
            user_id=user_id,
            application_id=application_id,
            rating=rating,
        )
        return created.insert_id

    async def list_for_course(self, course_id: int) -> list[dict[str, Any]]:
        """Visible reviews of a course with the reviewer's name, newest first."""
        return await self.db.query(
            select(
                ReviewModel.rating,
                ReviewModel.created_at,
                UserModel.name,
                UserModel.surname,
            )
            .join(ApplicationModel, ReviewModel.application_id == ApplicationModel.id)
            .join(UserModel, ReviewModel.user_id == UserModel.id)
            .where(
                ApplicationModel.course_id == course_id,
                ReviewModel.is_visible == True,  # noqa: E712
            )
            .order_by(ReviewModel.created_at.desc(), ReviewModel.id.desc())
        )
