"""Admin panel routes: application queue, status changes and audit trail."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from src.api.deps import get_application_service, require_roles
from src.api.schemas.applications import (
    AdminApplicationItem,
    AdminApplicationsResponse,
    HistoryEntry,
    HistoryResponse,
    StatusChange,
    StatusUpdate,
    StatusUpdateResponse,
)
from src.domain import User
from src.domain.services import ApplicationService

router = APIRouter(prefix="/admin-applications", tags=["Admin"])
logger = structlog.get_logger()


@router.get("", response_model=AdminApplicationsResponse)
async def list_applications(
    service: ApplicationService = Depends(get_application_service),
    admin: User = Depends(require_roles(["admin"])),
) -> AdminApplicationsResponse:
    """Return every application, new first, then in progress, then completed."""
    rows = await service.list_all()
    return AdminApplicationsResponse(
        applications=[AdminApplicationItem.model_validate(row) for row in rows]
    )


@router.put("/{application_id}/status", response_model=StatusUpdateResponse)
async def update_status(
    application_id: int,
    payload: StatusUpdate,
    service: ApplicationService = Depends(get_application_service),
    admin: User = Depends(require_roles(["admin"])),
) -> StatusUpdateResponse:
    """Change an application's status (any status to any other)."""
    logger.info(
        "application_status_change_requested",
        application_id=application_id,
        new_status=payload.new_status,
        admin_id=payload.admin_id,
        token_user=admin.user_id,
    )
    result = await service.transition_status(
        application_id, payload.new_status, acting_admin_id=payload.admin_id
    )
    return StatusUpdateResponse(
        message="Application status updated" if result.changed else "Status already set",
        data=StatusChange(
            application_id=result.application_id,
            old_status=result.old_status,
            new_status=result.new_status,
        ),
    )


@router.get("/{application_id}/history", response_model=HistoryResponse)
async def application_history(
    application_id: int,
    service: ApplicationService = Depends(get_application_service),
    admin: User = Depends(require_roles(["admin"])),
) -> HistoryResponse:
    """Return the status audit trail of an application, oldest first."""
    rows = await service.history(application_id)
    return HistoryResponse(history=[HistoryEntry.model_validate(row) for row in rows])
