"""
Application workflow: creation, status transitions and the status audit trail.

Every status written to an application is paired, in the same transaction,
with exactly one row in ``application_status_history``. The first history row
of an application always has ``old_status = NULL``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Any

import structlog
from sqlalchemy import case, func, insert, select, update
from src.domain.errors import (
    InvalidDateError,
    InvalidPaymentMethodError,
    InvalidStatusError,
    NotFoundError,
    PersistenceError,
)
from src.infrastructure.db.gateway import Database, Transaction
from src.infrastructure.db.models import (
    SENTINEL_ADMIN_ID,
    ApplicationModel,
    ApplicationStatus,
    CourseModel,
    PaymentMethod,
    ReviewModel,
    StatusHistoryModel,
    UserModel,
    UserRole,
)

logger = structlog.get_logger()

CREATED_COMMENT = "created"
SYSTEM_CHANGE_COMMENT = "Status changed by system administrator"


@dataclass(slots=True)
class TransitionResult:
    """Outcome of a status transition.

    ``changed`` is False for a no-op request (status already set); nothing
    is written in that case.
    """

    application_id: int
    old_status: str
    new_status: str
    changed: bool


class ApplicationService:
    """Enrollment applications and their status lifecycle."""

    def __init__(self, db: Database, *, today: Callable[[], date] = date.today) -> None:
        self.db = db
        self._today = today

    async def create(
        self,
        *,
        user_id: int,
        course_id: int,
        desired_start_date: date,
        payment_method: str,
    ) -> int:
        """Create an application in status ``new`` together with its first history entry."""
        if payment_method not in PaymentMethod.values():
            raise InvalidPaymentMethodError()

        async with self.db.transaction() as tx:
            user = await tx.query_one(select(UserModel.id).where(UserModel.id == user_id))
            if user is None:
                raise NotFoundError("User not found")

            course = await tx.query_one(
                select(CourseModel.id).where(
                    CourseModel.id == course_id,
                    CourseModel.is_active == True,  # noqa: E712
                )
            )
            if course is None:
                raise NotFoundError("Course not found or inactive")

            if desired_start_date < self._today():
                raise InvalidDateError()

            created = await tx.execute(
                insert(ApplicationModel).values(
                    user_id=user_id,
                    course_id=course_id,
                    desired_start_date=desired_start_date,
                    payment_method=PaymentMethod(payment_method),
                    status=ApplicationStatus.NEW,
                )
            )
            if created.insert_id is None:
                raise PersistenceError("Application could not be created")

            await self._record_history(
                tx,
                application_id=created.insert_id,
                old_status=None,
                new_status=ApplicationStatus.NEW.value,
                changed_by=user_id,
                comment=CREATED_COMMENT,
            )

        logger.info(
            "application_created",
            application_id=created.insert_id,
            user_id=user_id,
            course_id=course_id,
            payment_method=payment_method,
        )
        return created.insert_id

    async def transition_status(
        self,
        application_id: int,
        new_status: str,
        acting_admin_id: int | None = None,
    ) -> TransitionResult:
        """Move an application to ``new_status`` and append the audit entry.

        Any status may move to any other. Setting the current status again is
        a no-op that writes nothing. Read, update, attribution check and
        history insert run in one transaction on one connection.
        """
        if new_status not in ApplicationStatus.values():
            raise InvalidStatusError()

        async with self.db.transaction() as tx:
            current = await tx.query_one(
                select(ApplicationModel.status)
                .where(ApplicationModel.id == application_id)
                .with_for_update()
            )
            if current is None:
                raise NotFoundError("Application not found")

            old_status = current["status"]
            if old_status == new_status:
                logger.info(
                    "application_status_unchanged",
                    application_id=application_id,
                    status=old_status,
                )
                return TransitionResult(application_id, old_status, new_status, changed=False)

            updated = await tx.execute(
                update(ApplicationModel)
                .where(ApplicationModel.id == application_id)
                .values(status=ApplicationStatus(new_status), updated_at=func.now())
            )
            if updated.affected_rows == 0:
                raise PersistenceError("Application could not be updated")

            changed_by, comment = await self._attribute(tx, acting_admin_id)
            await self._record_history(
                tx,
                application_id=application_id,
                old_status=old_status,
                new_status=new_status,
                changed_by=changed_by,
                comment=comment,
            )

        logger.info(
            "application_status_changed",
            application_id=application_id,
            old_status=old_status,
            new_status=new_status,
            changed_by=changed_by,
        )
        return TransitionResult(application_id, old_status, new_status, changed=True)

    async def history(self, application_id: int) -> list[dict[str, Any]]:
        """Return the audit trail of an application, oldest entry first."""
        exists = await self.db.query_one(
            select(ApplicationModel.id).where(ApplicationModel.id == application_id)
        )
        if exists is None:
            raise NotFoundError("Application not found")

        return await self.db.query(
            select(
                StatusHistoryModel.id.label("history_id"),
                StatusHistoryModel.application_id,
                StatusHistoryModel.old_status,
                StatusHistoryModel.new_status,
                StatusHistoryModel.changed_by,
                StatusHistoryModel.change_comment,
                StatusHistoryModel.changed_at,
            )
            .where(StatusHistoryModel.application_id == application_id)
            .order_by(StatusHistoryModel.id)
        )

    async def get(self, application_id: int) -> dict[str, Any]:
        row = await self.db.query_one(
            select(
                ApplicationModel.id.label("application_id"),
                ApplicationModel.user_id,
                ApplicationModel.course_id,
                ApplicationModel.desired_start_date,
                ApplicationModel.payment_method,
                ApplicationModel.status,
                ApplicationModel.created_at,
                ApplicationModel.updated_at,
            ).where(ApplicationModel.id == application_id)
        )
        if row is None:
            raise NotFoundError("Application not found")
        return row

    async def list_for_user(self, user_id: int) -> list[dict[str, Any]]:
        """Applications of one user with course data and review presence, newest first."""
        rows = await self.db.query(
            select(
                ApplicationModel.id.label("application_id"),
                ApplicationModel.user_id,
                ApplicationModel.desired_start_date,
                ApplicationModel.payment_method,
                ApplicationModel.status,
                ApplicationModel.created_at,
                CourseModel.name.label("course_name"),
                CourseModel.price,
                ReviewModel.rating,
                ReviewModel.id.label("review_id"),
            )
            .join(CourseModel, ApplicationModel.course_id == CourseModel.id)
            .outerjoin(ReviewModel, ApplicationModel.id == ReviewModel.application_id)
            .where(ApplicationModel.user_id == user_id)
            .order_by(ApplicationModel.created_at.desc(), ApplicationModel.id.desc())
        )
        for row in rows:
            row["has_review"] = row["review_id"] is not None
        return rows

    async def list_all(self) -> list[dict[str, Any]]:
        """All applications for the admin panel.

        Ordered by status priority (new, in_progress, completed), then newest first.
        """
        priority = case(
            {value: ApplicationStatus.priority(value) for value in ApplicationStatus.values()},
            value=ApplicationModel.status,
        )
        return await self.db.query(
            select(
                ApplicationModel.id.label("application_id"),
                ApplicationModel.status,
                ApplicationModel.desired_start_date,
                ApplicationModel.payment_method,
                ApplicationModel.created_at,
                ApplicationModel.updated_at,
                UserModel.id.label("user_id"),
                UserModel.name.label("user_name"),
                UserModel.surname.label("user_surname"),
                UserModel.email.label("user_email"),
                CourseModel.id.label("course_id"),
                CourseModel.name.label("course_name"),
                CourseModel.price,
            )
            .join(UserModel, ApplicationModel.user_id == UserModel.id)
            .join(CourseModel, ApplicationModel.course_id == CourseModel.id)
            .order_by(priority, ApplicationModel.created_at.desc(), ApplicationModel.id.desc())
        )

    async def _attribute(
        self, tx: Transaction, acting_admin_id: int | None
    ) -> tuple[int | None, str]:
        """Resolve who a status change is credited to.

        Only a persisted account with role ``admin`` is credited. The sentinel
        administrator, unknown ids and non-admin accounts yield an unattributed
        change instead of failing the transition.
        """
        if acting_admin_id is None or acting_admin_id == SENTINEL_ADMIN_ID:
            return None, SYSTEM_CHANGE_COMMENT

        admin = await tx.query_one(
            select(UserModel.id).where(
                UserModel.id == acting_admin_id,
                UserModel.role == UserRole.ADMIN,
            )
        )
        if admin is None:
            logger.warning("status_change_unattributed", acting_admin_id=acting_admin_id)
            return None, SYSTEM_CHANGE_COMMENT
        return acting_admin_id, f"Status changed by administrator ID: {acting_admin_id}"

    async def _record_history(
        self,
        tx: Transaction,
        *,
        application_id: int,
        old_status: str | None,
        new_status: str,
        changed_by: int | None,
        comment: str,
    ) -> int | None:
        entry = await tx.execute(
            insert(StatusHistoryModel).values(
                application_id=application_id,
                old_status=ApplicationStatus(old_status) if old_status else None,
                new_status=ApplicationStatus(new_status),
                changed_by=changed_by,
                change_comment=comment,
            )
        )
        return entry.insert_id
