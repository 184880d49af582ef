from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from src.api.deps import get_course_service, get_review_service
from src.api.schemas.courses import (
    CourseItem,
    CourseReviewItem,
    CourseReviewsResponse,
    CoursesResponse,
)
from src.domain.services import CourseService, ReviewService

router = APIRouter(tags=["Courses"])


@router.get("/courses", response_model=CoursesResponse)
async def list_courses(service: CourseService = Depends(get_course_service)) -> CoursesResponse:
    """Return courses open for enrollment."""
    courses = await service.list_active()
    return CoursesResponse(courses=[CourseItem.model_validate(row) for row in courses])


@router.get("/course-reviews", response_model=CourseReviewsResponse)
async def list_course_reviews(
    course_id: int = Query(..., alias="courseId"),
    service: ReviewService = Depends(get_review_service),
) -> CourseReviewsResponse:
    """Return visible reviews of a course, newest first."""
    reviews = await service.list_for_course(course_id)
    return CourseReviewsResponse(reviews=[CourseReviewItem.model_validate(row) for row in reviews])
