"""Pydantic schemas for registration, login and user listing endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, EmailStr, Field

from .common import CamelModel, Envelope

# --- Request Schemas ---


class RegisterRequest(CamelModel):
    """Request schema for user registration."""

    name: str = Field(..., max_length=100, description="First name")
    surname: str = Field(
        ...,
        max_length=100,
        validation_alias=AliasChoices("surname", "surename"),
        description="Last name",
    )
    handle: str = Field(
        ...,
        max_length=50,
        validation_alias=AliasChoices("handle", "nick"),
        description="Unique public nickname",
    )
    email: EmailStr = Field(..., description="User email address")
    phone: str = Field(..., max_length=32, description="Contact phone number")
    password: str = Field(..., min_length=1, max_length=72, description="Password")
    personal_data: bool = Field(default=False, description="Consent to personal data processing")
    privacy_policy: bool = Field(default=False, description="Acceptance of the privacy policy")


class LoginRequest(CamelModel):
    """Request schema for user login."""

    email: str = Field(..., description="User email address")
    password: str = Field(..., description="User password")


class AdminLoginRequest(CamelModel):
    """Administrator login by email or handle."""

    login: str = Field(
        ...,
        validation_alias=AliasChoices("email", "login", "username"),
        description="Email, handle or the built-in administrator login",
    )
    password: str = Field(..., description="Password")


# --- Response Schemas ---


class UserProfile(CamelModel):
    """Public user data returned after login."""

    user_id: int
    name: str
    surname: str
    handle: str
    email: str
    role: str


class UserItem(UserProfile):
    phone: str
    created_at: datetime


class RegisterResponse(Envelope):
    message: str | None = Field(default="Registration successful")
    user_id: int


class LoginResponse(Envelope):
    message: str | None = Field(default="Login successful")
    user: UserProfile
    access_token: str
    token_type: str = Field(default="bearer")


class UsersResponse(Envelope):
    users: list[UserItem]
