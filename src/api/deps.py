from __future__ import annotations

from collections.abc import Callable, Sequence

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from src.core.auth import TokenError, read_claims
from src.core.config import get_settings
from src.domain import User
from src.domain.services import ApplicationService, AuthService, CourseService, ReviewService
from src.infrastructure.db.gateway import Database

bearer_scheme = HTTPBearer(auto_error=False)


def get_database(request: Request) -> Database:
    """Return the process-wide gateway opened by the application lifespan."""
    return request.app.state.database


def get_application_service(db: Database = Depends(get_database)) -> ApplicationService:  # noqa: B008
    return ApplicationService(db)


def get_review_service(db: Database = Depends(get_database)) -> ReviewService:  # noqa: B008
    return ReviewService(db)


def get_course_service(db: Database = Depends(get_database)) -> CourseService:  # noqa: B008
    return CourseService(db)


def get_auth_service(db: Database = Depends(get_database)) -> AuthService:  # noqa: B008
    return AuthService(db, get_settings())


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
) -> User:
    """Resolve the authenticated user from a bearer token."""
    if credentials is None:
        raise _unauthorized("Missing bearer token")

    try:
        claims = read_claims(credentials.credentials)
    except TokenError as exc:
        raise _unauthorized(str(exc)) from exc

    if not claims.roles:
        raise _forbidden("Token missing required roles")

    return User(user_id=claims.user_id, email=claims.email, roles=list(claims.roles))


def require_roles(required_roles: Sequence[str]) -> Callable[[User], User]:
    """Dependency factory enforcing that the authenticated user has one of the required roles."""
    settings = get_settings()
    allowed = set(settings.allowed_roles)

    invalid_roles = [role for role in required_roles if role not in allowed]
    if invalid_roles:
        joined_roles = ", ".join(invalid_roles)
        raise ValueError(f"Unsupported role(s) requested: {joined_roles}")

    required = set(required_roles)

    def dependency(user: User = Depends(get_current_user)) -> User:  # noqa: B008
        if not required.intersection(user.roles):
            raise _forbidden("Insufficient role privileges")
        return user

    return dependency


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
