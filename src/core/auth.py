"""Signed bearer tokens issued at login and checked on admin routes."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import jwt
from src.core.config import get_settings


class TokenError(Exception):
    """Raised when a token cannot be decoded or validated."""


@dataclass(frozen=True, slots=True)
class TokenClaims:
    user_id: int
    roles: tuple[str, ...]
    email: str = field(default="")


def create_access_token(
    subject: str | int,
    *,
    roles: Sequence[str],
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Generate a signed JWT access token for a user id."""
    settings = get_settings()
    _ensure_roles(roles, settings.allowed_roles)

    now = datetime.now(UTC)
    ttl = expires_delta or timedelta(seconds=settings.access_token_ttl_seconds)
    payload = {
        # JWT requires a string subject; user ids are integers
        "sub": str(subject),
        "roles": list(roles),
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
        "iss": settings.app_name,
    }
    if email:
        payload["email"] = email

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Decode and validate a JWT access token."""
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.app_name,
            options={"require": ["sub", "roles", "exp"]},
        )
    except jwt.PyJWTError as exc:  # pragma: no cover - third-party raises numerous subclasses
        raise TokenError("Invalid token") from exc

    _ensure_roles(payload.get("roles", []), settings.allowed_roles)
    return payload


def read_claims(token: str) -> TokenClaims:
    """Decode a token into the numeric user id and roles it was issued for."""
    payload = decode_access_token(token)
    subject = str(payload["sub"])
    if not subject.isdigit():
        raise TokenError("Token subject is not a user id")
    return TokenClaims(
        user_id=int(subject),
        roles=tuple(payload["roles"]),
        email=payload.get("email", ""),
    )


def _ensure_roles(roles: Iterable[str], allowed: Iterable[str]) -> None:
    unknown = [role for role in roles if role not in allowed]
    if unknown:
        raise TokenError(f"Unsupported role(s): {', '.join(unknown)}")
