from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from functools import lru_cache
from itertools import count

from sqlalchemy import insert
from src.core.auth import create_access_token
from src.domain.services.auth_service import hash_password
from src.infrastructure.db.gateway import Database
from src.infrastructure.db.models import CourseModel, UserModel, UserRole

DEFAULT_PASSWORD = "secret-pass-1"

_phone_numbers = count(1000)


@lru_cache
def _default_hash() -> str:
    # bcrypt is deliberately slow; hash the shared password once
    return hash_password(DEFAULT_PASSWORD)


def auth_headers(user_id: int = 0, role: str = "admin") -> dict[str, str]:
    token = create_access_token(user_id, roles=[role])
    return {"Authorization": f"Bearer {token}"}


def future_date(days: int = 7) -> date:
    return date.today() + timedelta(days=days)


async def create_user(
    db: Database,
    *,
    handle: str = "student",
    email: str | None = None,
    phone: str | None = None,
    role: UserRole = UserRole.USER,
    name: str = "Ivan",
    surname: str = "Petrov",
) -> int:
    result = await db.execute(
        insert(UserModel).values(
            name=name,
            surname=surname,
            handle=handle,
            email=email or f"{handle}@example.com",
            phone=phone or f"+7900{next(_phone_numbers):07d}",
            password_hash=_default_hash(),
            role=role,
        )
    )
    assert result.insert_id is not None
    return result.insert_id


async def create_course(
    db: Database,
    *,
    name: str = "Python basics",
    price: Decimal = Decimal("15000.00"),
    is_active: bool = True,
) -> int:
    result = await db.execute(
        insert(CourseModel).values(
            name=name,
            price=price,
            description=f"{name} course",
            duration_hours=72,
            is_active=is_active,
        )
    )
    assert result.insert_id is not None
    return result.insert_id
