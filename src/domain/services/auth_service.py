"""Authentication service with password hashing and user management."""

from __future__ import annotations

import secrets
from typing import Any

import structlog
from passlib.context import CryptContext
from sqlalchemy import insert, or_, select
from src.core.auth import create_access_token
from src.core.config import Settings, get_settings
from src.domain.errors import (
    AlreadyExistsError,
    AuthenticationError,
    InvalidInputError,
    PermissionDeniedError,
)
from src.domain.models import sentinel_admin_profile
from src.infrastructure.db.errors import DUPLICATE_MESSAGES
from src.infrastructure.db.gateway import Database
from src.infrastructure.db.models import SENTINEL_ADMIN_ID, UserModel, UserRole

logger = structlog.get_logger()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Columns returned to clients; the password hash never leaves this module
PUBLIC_USER_COLUMNS = (
    UserModel.id.label("user_id"),
    UserModel.name,
    UserModel.surname,
    UserModel.handle,
    UserModel.email,
    UserModel.role,
)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


class AuthService:
    """Registration, login and the user directory."""

    def __init__(self, db: Database, settings: Settings | None = None) -> None:
        self.db = db
        self.settings = settings or get_settings()

    async def register(
        self,
        *,
        name: str,
        surname: str,
        handle: str,
        email: str,
        phone: str,
        password: str,
        personal_data: bool,
        privacy_policy: bool,
    ) -> int:
        """
        Register a new user with role ``user``.

        Returns:
            id of the created user
        """
        required = (name, surname, handle, email, phone, password)
        if not all(value and value.strip() for value in required):
            raise InvalidInputError("All fields are required")
        if not (personal_data and privacy_policy):
            raise InvalidInputError(
                "Consent to personal data processing and the privacy policy is required"
            )

        email = email.strip().lower()
        handle = handle.strip()
        await logger.ainfo("register_attempt", email=email, handle=handle)

        taken = await self.db.query(
            select(UserModel.email, UserModel.handle).where(
                or_(UserModel.email == email, UserModel.handle == handle)
            )
        )
        if taken:
            field = "email" if any(row["email"] == email for row in taken) else "handle"
            await logger.awarning("register_duplicate", field=field, email=email)
            raise AlreadyExistsError(DUPLICATE_MESSAGES[field], field=field)

        # Unique constraints still guard email/handle/phone against races and
        # duplicate phones; the gateway reports them as AlreadyExistsError
        created = await self.db.execute(
            insert(UserModel).values(
                name=name.strip(),
                surname=surname.strip(),
                handle=handle,
                email=email,
                phone=phone.strip(),
                password_hash=hash_password(password),
                role=UserRole.USER,
            )
        )

        await logger.ainfo("user_registered", user_id=created.insert_id, email=email)
        return created.insert_id

    async def login(self, *, email: str, password: str) -> tuple[dict[str, Any], str]:
        """
        Authenticate a user with email and password.

        Returns:
            (public user data, access token)
        """
        email = email.strip().lower()
        await logger.ainfo("login_attempt", email=email)

        row = await self.db.query_one(
            select(*PUBLIC_USER_COLUMNS, UserModel.password_hash).where(UserModel.email == email)
        )
        if row is None:
            await logger.awarning("login_user_not_found", email=email)
            raise AuthenticationError("No user with this email")

        if not verify_password(password, row.pop("password_hash")):
            await logger.awarning("login_invalid_password", email=email)
            raise AuthenticationError("Invalid password")

        await logger.ainfo("login_success", user_id=row["user_id"], email=email)
        return row, self._issue_token(row)

    async def admin_login(self, *, login: str, password: str) -> tuple[dict[str, Any], str]:
        """
        Authenticate an administrator by email or handle.

        The configured sentinel credentials yield the built-in administrator
        (``user_id`` 0) without a database lookup.
        """
        if self._is_sentinel(login, password):
            profile = sentinel_admin_profile(self.settings.admin_login)
            await logger.ainfo("admin_login_success", user_id=SENTINEL_ADMIN_ID, sentinel=True)
            return profile, self._issue_token(profile)

        normalized = login.strip()
        row = await self.db.query_one(
            select(*PUBLIC_USER_COLUMNS, UserModel.password_hash).where(
                or_(UserModel.email == normalized.lower(), UserModel.handle == normalized)
            )
        )
        if row is None:
            await logger.awarning("admin_login_user_not_found", login=normalized)
            raise AuthenticationError("No user with this login")

        if row["role"] != UserRole.ADMIN.value:
            await logger.awarning("admin_login_forbidden", user_id=row["user_id"], role=row["role"])
            raise PermissionDeniedError()

        if not verify_password(password, row.pop("password_hash")):
            await logger.awarning("admin_login_invalid_password", user_id=row["user_id"])
            raise AuthenticationError("Invalid password")

        await logger.ainfo("admin_login_success", user_id=row["user_id"], sentinel=False)
        return row, self._issue_token(row)

    async def list_users(self) -> list[dict[str, Any]]:
        """Return every user without password hashes."""
        return await self.db.query(
            select(
                UserModel.id.label("user_id"),
                UserModel.name,
                UserModel.surname,
                UserModel.handle,
                UserModel.email,
                UserModel.phone,
                UserModel.role,
                UserModel.created_at,
            ).order_by(UserModel.id)
        )

    def _is_sentinel(self, login: str, password: str) -> bool:
        if not self.settings.sentinel_admin_enabled:
            return False
        login_matches = secrets.compare_digest(login.encode(), self.settings.admin_login.encode())
        password_matches = secrets.compare_digest(
            password.encode(), (self.settings.admin_password or "").encode()
        )
        return login_matches and password_matches

    def _issue_token(self, user: dict[str, Any]) -> str:
        return create_access_token(
            subject=user["user_id"],
            roles=[user["role"]],
            email=user.get("email"),
        )
