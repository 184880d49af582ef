"""Authentication routes - registration, user and administrator login, user directory."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, status
from src.api.deps import get_auth_service, require_roles
from src.api.schemas.auth import (
    AdminLoginRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserItem,
    UserProfile,
    UsersResponse,
)
from src.domain import User
from src.domain.services import AuthService

logger = structlog.get_logger()
router = APIRouter(tags=["authentication"])


@router.post(
    "/reg",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    description="Create a user account. Both consent flags must be set.",
)
async def register(
    payload: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> RegisterResponse:
    """Register a new user."""
    user_id = await service.register(
        name=payload.name,
        surname=payload.surname,
        handle=payload.handle,
        email=payload.email,
        phone=payload.phone,
        password=payload.password,
        personal_data=payload.personal_data,
        privacy_policy=payload.privacy_policy,
    )
    return RegisterResponse(user_id=user_id)


@router.post(
    "/auth",
    response_model=LoginResponse,
    summary="User login",
    description="Authenticate user with email and password.",
)
async def login(
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    user, token = await service.login(email=payload.email, password=payload.password)
    return LoginResponse(user=UserProfile.model_validate(user), access_token=token)


@router.post("/admin-login", response_model=LoginResponse, include_in_schema=False)
@router.post(
    "/admin-auth",
    response_model=LoginResponse,
    summary="Administrator login",
    description="Authenticate an administrator by email or handle; returns an admin token.",
)
async def admin_login(
    payload: AdminLoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    user, token = await service.admin_login(login=payload.login, password=payload.password)
    return LoginResponse(user=UserProfile.model_validate(user), access_token=token)


@router.get("/users", response_model=UsersResponse, summary="List users (admin-only)")
async def list_users(
    service: AuthService = Depends(get_auth_service),
    admin: User = Depends(require_roles(["admin"])),
) -> UsersResponse:
    users = await service.list_users()
    return UsersResponse(users=[UserItem.model_validate(row) for row in users])
