"""Integration tests for the course catalog and review endpoints."""

from __future__ import annotations

import pytest
from fastapi import status
from httpx import ASGITransport, AsyncClient
from src.api.deps import get_course_service
from src.api.main import app
from src.domain.services import ApplicationService
from src.infrastructure.db.gateway import Database

from tests.utils import create_course, create_user, future_date


async def _completed_application(database: Database, user_id: int, course_id: int) -> int:
    service = ApplicationService(database)
    application_id = await service.create(
        user_id=user_id,
        course_id=course_id,
        desired_start_date=future_date(),
        payment_method="phone_transfer",
    )
    await service.transition_status(application_id, "completed")
    return application_id


@pytest.mark.asyncio
async def test_courses_lists_active_only(async_client: AsyncClient, database: Database) -> None:
    await create_course(database, name="Python basics")
    await create_course(database, name="Archived", is_active=False)

    response = await async_client.get("/courses")

    assert response.status_code == status.HTTP_200_OK
    courses = response.json()["courses"]
    assert [course["name"] for course in courses] == ["Python basics"]
    assert courses[0]["durationHours"] == 72
    assert "courseId" in courses[0]


@pytest.mark.asyncio
async def test_review_flow(async_client: AsyncClient, database: Database) -> None:
    user_id = await create_user(database, name="Anna", surname="Smirnova")
    course_id = await create_course(database)
    application_id = await _completed_application(database, user_id, course_id)

    created = await async_client.post(
        "/reviews", json={"userId": user_id, "applicationId": application_id, "rating": 5}
    )
    duplicate = await async_client.post(
        "/reviews", json={"userId": user_id, "applicationId": application_id, "rating": 1}
    )
    listed = await async_client.get("/course-reviews", params={"courseId": course_id})
    mine = await async_client.get("/user-applications", params={"userId": user_id})

    assert created.status_code == status.HTTP_201_CREATED
    assert isinstance(created.json()["reviewId"], int)
    assert duplicate.status_code == status.HTTP_409_CONFLICT
    assert duplicate.json()["message"] == "You have already reviewed this application"
    reviews = listed.json()["reviews"]
    assert [(r["name"], r["surname"], r["rating"]) for r in reviews] == [("Anna", "Smirnova", 5)]
    assert mine.json()["applications"][0]["hasReview"] is True
    assert mine.json()["applications"][0]["rating"] == 5


@pytest.mark.asyncio
async def test_review_before_completion(async_client: AsyncClient, database: Database) -> None:
    user_id = await create_user(database)
    course_id = await create_course(database)
    application_id = await ApplicationService(database).create(
        user_id=user_id,
        course_id=course_id,
        desired_start_date=future_date(),
        payment_method="cash",
    )

    response = await async_client.post(
        "/reviews", json={"userId": user_id, "applicationId": application_id, "rating": 4}
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["message"] == "Reviews can only be left for completed courses"


@pytest.mark.asyncio
@pytest.mark.parametrize("rating", [0, 6])
async def test_review_rating_out_of_range(
    async_client: AsyncClient, database: Database, rating: int
) -> None:
    user_id = await create_user(database)
    course_id = await create_course(database)
    application_id = await _completed_application(database, user_id, course_id)

    response = await async_client.post(
        "/reviews", json={"userId": user_id, "applicationId": application_id, "rating": rating}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Rating must be between 1 and 5"


@pytest.mark.asyncio
async def test_review_of_unknown_application(async_client: AsyncClient, database: Database) -> None:
    user_id = await create_user(database)

    response = await async_client.post(
        "/reviews", json={"userId": user_id, "applicationId": 404, "rating": 3}
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
@pytest.mark.parametrize("rating", [True, 4.5, "abc"])
async def test_review_rating_must_be_an_integer(
    async_client: AsyncClient, database: Database, rating
) -> None:
    user_id = await create_user(database)
    course_id = await create_course(database)
    application_id = await _completed_application(database, user_id, course_id)

    response = await async_client.post(
        "/reviews", json={"userId": user_id, "applicationId": application_id, "rating": rating}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Rating must be between 1 and 5"


@pytest.mark.asyncio
async def test_unexpected_error_uses_error_envelope() -> None:
    class BrokenCourses:
        async def list_active(self):
            raise RuntimeError("boom")

    app.dependency_overrides[get_course_service] = lambda: BrokenCourses()
    transport = ASGITransport(app=app, raise_app_exceptions=False)  # type: ignore
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/courses")
    finally:
        app.dependency_overrides.pop(get_course_service, None)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"success": False, "message": "Internal server error"}
