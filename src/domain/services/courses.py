"""Read-only course catalog."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from src.infrastructure.db.gateway import Database
from src.infrastructure.db.models import CourseModel


class CourseService:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def list_active(self) -> list[dict[str, Any]]:
        """Return every course that is open for enrollment."""
        return await self.db.query(
            select(
                CourseModel.id.label("course_id"),
                CourseModel.name,
                CourseModel.price,
                CourseModel.description,
                CourseModel.duration_hours,
            )
            .where(CourseModel.is_active == True)  # noqa: E712
            .order_by(CourseModel.id)
        )
