"""Unit tests for the application workflow engine."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from sqlalchemy import func, select
from src.domain.errors import (
    InvalidDateError,
    InvalidPaymentMethodError,
    InvalidStatusError,
    NotFoundError,
    PersistenceError,
)
from src.domain.services.applications import (
    CREATED_COMMENT,
    SYSTEM_CHANGE_COMMENT,
    ApplicationService,
)
from src.infrastructure.db.gateway import Database
from src.infrastructure.db.models import (
    SENTINEL_ADMIN_ID,
    ApplicationModel,
    ApplicationStatus,
    StatusHistoryModel,
    UserRole,
)

from tests.utils import create_course, create_user

TODAY = date(2026, 3, 10)


@pytest.fixture()
def service(database: Database) -> ApplicationService:
    return ApplicationService(database, today=lambda: TODAY)


async def _new_application(database: Database, service: ApplicationService) -> int:
    user_id = await create_user(database, handle="learner")
    course_id = await create_course(database)
    return await service.create(
        user_id=user_id,
        course_id=course_id,
        desired_start_date=TODAY + timedelta(days=3),
        payment_method="cash",
    )


async def _count(database: Database, model) -> int:
    row = await database.query_one(select(func.count(model.id).label("total")))
    assert row is not None
    return row["total"]


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_round_trip(self, database: Database, service: ApplicationService) -> None:
        user_id = await create_user(database)
        course_id = await create_course(database)
        start = TODAY + timedelta(days=14)

        application_id = await service.create(
            user_id=user_id,
            course_id=course_id,
            desired_start_date=start,
            payment_method="cash",
        )

        stored = await service.get(application_id)
        assert stored["status"] == "new"
        assert stored["payment_method"] == "cash"
        assert stored["desired_start_date"] == start
        assert stored["user_id"] == user_id

    @pytest.mark.asyncio
    async def test_create_writes_initial_history_entry(
        self, database: Database, service: ApplicationService
    ) -> None:
        application_id = await _new_application(database, service)

        history = await service.history(application_id)

        assert len(history) == 1
        entry = history[0]
        assert entry["old_status"] is None
        assert entry["new_status"] == "new"
        assert entry["change_comment"] == CREATED_COMMENT
        assert entry["changed_by"] is not None

    @pytest.mark.asyncio
    async def test_start_date_today_is_accepted(
        self, database: Database, service: ApplicationService
    ) -> None:
        user_id = await create_user(database)
        course_id = await create_course(database)

        application_id = await service.create(
            user_id=user_id,
            course_id=course_id,
            desired_start_date=TODAY,
            payment_method="phone_transfer",
        )

        assert application_id > 0

    @pytest.mark.asyncio
    async def test_past_start_date_is_rejected_without_insert(
        self, database: Database, service: ApplicationService
    ) -> None:
        user_id = await create_user(database)
        course_id = await create_course(database)

        with pytest.raises(InvalidDateError):
            await service.create(
                user_id=user_id,
                course_id=course_id,
                desired_start_date=TODAY - timedelta(days=1),
                payment_method="cash",
            )

        assert await _count(database, ApplicationModel) == 0
        assert await _count(database, StatusHistoryModel) == 0

    @pytest.mark.asyncio
    async def test_unknown_payment_method(self, database: Database, service: ApplicationService) -> None:
        user_id = await create_user(database)
        course_id = await create_course(database)

        with pytest.raises(InvalidPaymentMethodError):
            await service.create(
                user_id=user_id,
                course_id=course_id,
                desired_start_date=TODAY,
                payment_method="card",
            )

    @pytest.mark.asyncio
    async def test_unknown_user(self, database: Database, service: ApplicationService) -> None:
        course_id = await create_course(database)

        with pytest.raises(NotFoundError):
            await service.create(
                user_id=999,
                course_id=course_id,
                desired_start_date=TODAY,
                payment_method="cash",
            )

    @pytest.mark.asyncio
    async def test_inactive_course_counts_as_missing(
        self, database: Database, service: ApplicationService
    ) -> None:
        user_id = await create_user(database)
        course_id = await create_course(database, is_active=False)

        with pytest.raises(NotFoundError):
            await service.create(
                user_id=user_id,
                course_id=course_id,
                desired_start_date=TODAY,
                payment_method="cash",
            )

        assert await _count(database, ApplicationModel) == 0


class TestTransitionStatus:
    @pytest.mark.asyncio
    async def test_transition_records_history(
        self, database: Database, service: ApplicationService
    ) -> None:
        application_id = await _new_application(database, service)
        admin_id = await create_user(database, handle="boss", role=UserRole.ADMIN)

        result = await service.transition_status(application_id, "in_progress", admin_id)

        assert result.changed is True
        assert (result.old_status, result.new_status) == ("new", "in_progress")
        history = await service.history(application_id)
        assert [(h["old_status"], h["new_status"]) for h in history] == [
            (None, "new"),
            ("new", "in_progress"),
        ]
        assert history[-1]["changed_by"] == admin_id
        assert history[-1]["change_comment"] == f"Status changed by administrator ID: {admin_id}"
        assert (await service.get(application_id))["status"] == "in_progress"

    @pytest.mark.asyncio
    async def test_same_status_is_a_no_op(self, database: Database, service: ApplicationService) -> None:
        application_id = await _new_application(database, service)
        await service.transition_status(application_id, "completed")
        before = await service.history(application_id)

        first = await service.transition_status(application_id, "completed")
        second = await service.transition_status(application_id, "completed")

        assert first.changed is False and second.changed is False
        assert (first.old_status, first.new_status) == ("completed", "completed")
        assert await service.history(application_id) == before

    @pytest.mark.asyncio
    async def test_history_length_matches_distinct_transitions(
        self, database: Database, service: ApplicationService
    ) -> None:
        application_id = await _new_application(database, service)

        for status in ("in_progress", "in_progress", "completed", "new", "new", "completed"):
            await service.transition_status(application_id, status)

        history = await service.history(application_id)
        # initial entry + in_progress, completed, new, completed
        assert len(history) == 5
        assert history[0]["old_status"] is None
        assert [h["new_status"] for h in history] == [
            "new",
            "in_progress",
            "completed",
            "new",
            "completed",
        ]

    @pytest.mark.asyncio
    async def test_backward_transition_is_allowed(
        self, database: Database, service: ApplicationService
    ) -> None:
        application_id = await _new_application(database, service)
        await service.transition_status(application_id, "completed")

        result = await service.transition_status(application_id, "new")

        assert (result.old_status, result.new_status) == ("completed", "new")

    @pytest.mark.asyncio
    async def test_non_admin_actor_is_not_credited(
        self, database: Database, service: ApplicationService
    ) -> None:
        application_id = await _new_application(database, service)
        regular_user = await create_user(database, handle="plain", role=UserRole.USER)

        result = await service.transition_status(application_id, "completed", regular_user)

        assert result.changed is True
        entry = (await service.history(application_id))[-1]
        assert entry["changed_by"] is None
        assert entry["change_comment"] == SYSTEM_CHANGE_COMMENT

    @pytest.mark.asyncio
    @pytest.mark.parametrize("actor", [None, SENTINEL_ADMIN_ID, 4242])
    async def test_system_attribution(
        self, database: Database, service: ApplicationService, actor: int | None
    ) -> None:
        application_id = await _new_application(database, service)

        await service.transition_status(application_id, "in_progress", actor)

        entry = (await service.history(application_id))[-1]
        assert entry["changed_by"] is None
        assert entry["change_comment"] == SYSTEM_CHANGE_COMMENT

    @pytest.mark.asyncio
    async def test_invalid_status_is_rejected(
        self, database: Database, service: ApplicationService
    ) -> None:
        application_id = await _new_application(database, service)

        with pytest.raises(InvalidStatusError):
            await service.transition_status(application_id, "archived")

        assert len(await service.history(application_id)) == 1

    @pytest.mark.asyncio
    async def test_missing_application(self, service: ApplicationService) -> None:
        with pytest.raises(NotFoundError):
            await service.transition_status(12345, "completed")

    @pytest.mark.asyncio
    async def test_failed_history_insert_rolls_back_status(
        self, database: Database, service: ApplicationService, monkeypatch
    ) -> None:
        application_id = await _new_application(database, service)

        async def broken_history(*args, **kwargs):
            raise PersistenceError()

        monkeypatch.setattr(service, "_record_history", broken_history)

        with pytest.raises(PersistenceError):
            await service.transition_status(application_id, "completed")

        assert (await service.get(application_id))["status"] == "new"
        assert await _count(database, StatusHistoryModel) == 1


class TestListings:
    @pytest.mark.asyncio
    async def test_admin_listing_orders_by_status_priority(
        self, database: Database, service: ApplicationService
    ) -> None:
        user_id = await create_user(database)
        course_id = await create_course(database)
        ids = []
        for _ in range(3):
            ids.append(
                await service.create(
                    user_id=user_id,
                    course_id=course_id,
                    desired_start_date=TODAY,
                    payment_method="cash",
                )
            )
        await service.transition_status(ids[0], "completed")
        await service.transition_status(ids[1], "in_progress")

        rows = await service.list_all()

        assert [row["status"] for row in rows] == ["new", "in_progress", "completed"]
        assert [row["application_id"] for row in rows] == [ids[2], ids[1], ids[0]]
        assert rows[0]["user_email"] == "student@example.com"

    @pytest.mark.asyncio
    async def test_user_listing_flags_reviews(
        self, database: Database, service: ApplicationService
    ) -> None:
        application_id = await _new_application(database, service)

        rows = await service.list_for_user(1)

        assert len(rows) == 1
        assert rows[0]["application_id"] == application_id
        assert rows[0]["course_name"] == "Python basics"
        assert rows[0]["has_review"] is False
        assert rows[0]["review_id"] is None

    @pytest.mark.asyncio
    async def test_history_of_missing_application(self, service: ApplicationService) -> None:
        with pytest.raises(NotFoundError):
            await service.history(77)


def test_status_priority_follows_declaration_order() -> None:
    assert [ApplicationStatus.priority(value) for value in ("new", "in_progress", "completed")] == [
        1,
        2,
        3,
    ]
