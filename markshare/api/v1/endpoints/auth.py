"""Authentication endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from markshare.core.database import get_db
from markshare.core.dependencies import CurrentUserContext, UserContext, require_permission
from markshare.models.audit import AuditAction
from markshare.schemas.auth import (
    CurrentUserResponse,
    LoginRequest,
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserResponse,
)
from markshare.services.audit import AuditService
from markshare.services.auth import AuthService

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
def login(
    request: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    http_request: Request,
):
    """
    Authenticate user and return access/refresh tokens.
    """
    service = AuthService(db)
    user, tokens = service.login(request)

    # Audit log
    audit = AuditService(db)
    audit.log(
        action=AuditAction.USER_LOGIN,
        resource_type="user",
        resource_id=str(user.id),
        user_id=user.id,
        ip_address=http_request.client.host if http_request.client else None,
        user_agent=http_request.headers.get("user-agent"),
    )

    return tokens


@router.post("/refresh", response_model=TokenResponse)
def refresh_token(
    request: RefreshTokenRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Refresh access token using a valid refresh token.
    """
    service = AuthService(db)
    return service.refresh_tokens(request.refresh_token)


@router.get("/me", response_model=CurrentUserResponse)
def get_current_user_info(context: UserContext):
    """Get the current user and the permissions their role grants."""
    return CurrentUserResponse(
        user=UserResponse.model_validate(context.user),
        permissions=sorted(context.permissions),
    )


@router.post("/users", response_model=UserResponse)
def create_user(
    request: UserCreate,
    context: Annotated[CurrentUserContext, Depends(require_permission("user:create"))],
    db: Annotated[Session, Depends(get_db)],
    http_request: Request,
):
    """Create a staff account (admin only)."""
    service = AuthService(db)
    user = service.create_user(request)

    # Audit log
    audit = AuditService(db)
    audit.log(
        action=AuditAction.USER_CREATED,
        resource_type="user",
        resource_id=str(user.id),
        user_id=context.user_id,
        description=f"User '{user.username}' created with role {user.role.value}",
        ip_address=http_request.client.host if http_request.client else None,
    )

    return user
