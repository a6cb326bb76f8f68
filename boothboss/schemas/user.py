"""Pydantic schemas for accounts and authentication."""

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field

from boothboss.models.user import UserRole
from boothboss.schemas.common import BaseSchema

# === Auth Schemas ===


class RegisterRequest(BaseSchema):
    """Self-service signup."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    name: str | None = Field(default=None, max_length=255)
    username: str | None = Field(default=None, min_length=3, max_length=64)
    organization_name: str | None = Field(default=None, max_length=255)


class LoginRequest(BaseSchema):
    """Email/password login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseSchema):
    """Bearer token issued on login or registration."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: "UserResponse"


# === User Schemas ===


class UserResponse(BaseSchema):
    """Public view of a user account."""

    id: UUID
    email: str
    name: str | None
    username: str | None
    role: UserRole
    organization_name: str | None
    media_count: int
    emails_sent: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class AdminUserCreate(BaseSchema):
    """Admin-created account."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    name: str | None = Field(default=None, max_length=255)
    username: str | None = Field(default=None, min_length=3, max_length=64)
    role: UserRole = UserRole.CUSTOMER
    organization_name: str | None = Field(default=None, max_length=255)


class AdminUserUpdate(BaseSchema):
    """Admin edits to an account. Only provided fields change."""

    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=8, max_length=128)
    name: str | None = Field(default=None, max_length=255)
    username: str | None = Field(default=None, min_length=3, max_length=64)
    role: UserRole | None = None
    organization_name: str | None = Field(default=None, max_length=255)
    is_active: bool | None = None


TokenResponse.model_rebuild()
