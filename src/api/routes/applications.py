from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query, status
from src.api.deps import get_application_service
from src.api.schemas.applications import (
    ApplicationCreate,
    ApplicationCreated,
    UserApplicationItem,
    UserApplicationsResponse,
)
from src.domain.services import ApplicationService

router = APIRouter(tags=["Applications"])
logger = structlog.get_logger()


@router.post("/applications", response_model=ApplicationCreated, status_code=status.HTTP_201_CREATED)
async def create_application(
    payload: ApplicationCreate,
    service: ApplicationService = Depends(get_application_service),
) -> ApplicationCreated:
    """Submit an enrollment application for an active course."""
    application_id = await service.create(
        user_id=payload.user_id,
        course_id=payload.course_id,
        desired_start_date=payload.start_date,
        payment_method=payload.payment_method,
    )
    return ApplicationCreated(application_id=application_id)


@router.get("/user-applications", response_model=UserApplicationsResponse)
async def list_user_applications(
    user_id: int = Query(..., alias="userId"),
    service: ApplicationService = Depends(get_application_service),
) -> UserApplicationsResponse:
    """Return a user's applications with course details and review presence."""
    rows = await service.list_for_user(user_id)
    return UserApplicationsResponse(
        applications=[UserApplicationItem.model_validate(row) for row in rows]
    )
