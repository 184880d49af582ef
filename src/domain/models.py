from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.infrastructure.db.models import SENTINEL_ADMIN_ID


@dataclass(slots=True)
class User:
    """Represents an authenticated actor within the system."""

    user_id: int
    email: str = ""
    roles: list[str] = field(default_factory=list)


def sentinel_admin_profile(login: str) -> dict[str, Any]:
    """Public profile of the built-in administrator that has no users row."""
    return {
        "user_id": SENTINEL_ADMIN_ID,
        "name": login,
        "surname": "System",
        "handle": "admin",
        "email": "admin@system",
        "role": "admin",
    }
