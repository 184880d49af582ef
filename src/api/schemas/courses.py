from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from .common import CamelModel, Envelope


class CourseItem(CamelModel):
    course_id: int
    name: str
    price: float
    description: str | None = None
    duration_hours: int | None = None


class CoursesResponse(Envelope):
    courses: list[CourseItem]


class ReviewCreate(CamelModel):
    user_id: int
    application_id: int
    # range and type are checked by the review service so any value reaches it
    rating: Any = Field(..., description="Integer from 1 to 5")


class ReviewCreated(Envelope):
    message: str | None = Field(default="Review submitted")
    review_id: int


class CourseReviewItem(CamelModel):
    rating: int
    created_at: datetime
    name: str
    surname: str


class CourseReviewsResponse(Envelope):
    reviews: list[CourseReviewItem]
