from __future__ import annotations

from datetime import date, datetime

from pydantic import Field, field_validator

from .common import CamelModel, Envelope


class ApplicationCreate(CamelModel):
    user_id: int
    course_id: int
    start_date: date | datetime = Field(..., description="Calendar date; a time part is ignored")
    payment_method: str = Field(..., description="cash or phone_transfer")

    @field_validator("start_date")
    @classmethod
    def _calendar_date(cls, value: date | datetime) -> date:
        return value.date() if isinstance(value, datetime) else value


class ApplicationCreated(Envelope):
    message: str | None = Field(default="Application created")
    application_id: int


class UserApplicationItem(CamelModel):
    application_id: int
    user_id: int
    desired_start_date: date
    payment_method: str
    status: str
    created_at: datetime
    course_name: str
    price: float
    rating: int | None = None
    review_id: int | None = None
    has_review: bool = False


class UserApplicationsResponse(Envelope):
    applications: list[UserApplicationItem]


class AdminApplicationItem(CamelModel):
    application_id: int
    status: str
    desired_start_date: date
    payment_method: str
    created_at: datetime
    updated_at: datetime
    user_id: int
    user_name: str
    user_surname: str
    user_email: str
    course_id: int
    course_name: str
    price: float


class AdminApplicationsResponse(Envelope):
    applications: list[AdminApplicationItem]


class StatusUpdate(CamelModel):
    new_status: str = Field(..., description="new, in_progress or completed")
    admin_id: int | None = Field(default=None, description="Administrator credited with the change")


class StatusChange(CamelModel):
    application_id: int
    old_status: str
    new_status: str


class StatusUpdateResponse(Envelope):
    data: StatusChange


class HistoryEntry(CamelModel):
    history_id: int
    application_id: int
    old_status: str | None = None
    new_status: str
    changed_by: int | None = None
    change_comment: str | None = None
    changed_at: datetime


class HistoryResponse(Envelope):
    history: list[HistoryEntry]
