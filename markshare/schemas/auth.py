"""Authentication schemas."""

from datetime import datetime

from pydantic import Field

from markshare.models.user import UserRole
from markshare.schemas.common import BaseSchema


class LoginRequest(BaseSchema):
    """Login request schema."""

    username: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6)


class TokenResponse(BaseSchema):
    """Token response schema."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class RefreshTokenRequest(BaseSchema):
    """Refresh token request schema."""

    refresh_token: str


class UserCreate(BaseSchema):
    """User creation schema."""

    name: str = Field(..., min_length=2, max_length=255)
    username: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8)
    role: UserRole = UserRole.TEACHER


class UserResponse(BaseSchema):
    """User response schema."""

    id: int
    name: str
    username: str
    role: UserRole
    is_active: bool
    last_login_at: datetime | None
    created_at: datetime
    updated_at: datetime


class CurrentUserResponse(BaseSchema):
    """Current user with the permissions granted by their role."""

    user: UserResponse
    permissions: list[str]
