"""FastAPI dependency injection utilities."""

from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from markshare.core.database import get_db
from markshare.core.exceptions import AuthenticationError, PermissionDeniedError
from markshare.core.security import verify_access_token
from markshare.models.user import User, UserRole

TEACHER_PERMISSIONS = frozenset({
    "class:view",
    "subject:view",
    "exam:view",
    "student:view",
    "student:create",
    "student:update",
    "student:delete",
    "student:upload",
    "marks:view",
    "marks:save",
    "marks:delete",
    "report:view",
})

ADMIN_PERMISSIONS = TEACHER_PERMISSIONS | {
    "exam:create",
    "exam:delete",
    "user:create",
    "data:seed",
}

ROLE_PERMISSIONS: dict[UserRole, frozenset[str]] = {
    UserRole.ADMIN: frozenset(ADMIN_PERMISSIONS),
    UserRole.TEACHER: TEACHER_PERMISSIONS,
}


class CurrentUserContext:
    """Request-scoped context: the acting user, their role and permissions."""

    def __init__(
        self,
        user: User,
        permissions: frozenset[str] | None = None,
        request_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ):
        self.user = user
        self.permissions = permissions if permissions is not None else ROLE_PERMISSIONS[user.role]
        self.request_id = request_id
        self.ip_address = ip_address
        self.user_agent = user_agent

    @property
    def user_id(self) -> int:
        return self.user.id

    @property
    def role(self) -> UserRole:
        return self.user.role

    def has_permission(self, permission_key: str) -> bool:
        """Check if user has a specific permission."""
        return permission_key in self.permissions

    def require(self, permission_key: str) -> None:
        """Raise unless the user holds ``permission_key``."""
        if not self.has_permission(permission_key):
            raise PermissionDeniedError(
                f"Permission '{permission_key}' required",
                required_permission=permission_key,
            )


def get_current_user(
    db: Annotated[Session, Depends(get_db)],
    authorization: str = Header(..., description="Bearer token"),
) -> User:
    """Extract and validate the current user from JWT token."""
    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid authorization header format")

    token = authorization[7:]  # Remove "Bearer " prefix
    payload = verify_access_token(token)

    if not payload:
        raise AuthenticationError("Invalid or expired token")

    user_id_str = payload.get("sub")
    if not user_id_str:
        raise AuthenticationError("Invalid token payload")

    try:
        user_id = int(user_id_str)
    except ValueError:
        raise AuthenticationError("Invalid user ID in token")

    result = db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthenticationError("User account is deactivated")

    return user


def get_user_context(
    request: Request,
    user: Annotated[User, Depends(get_current_user)],
) -> CurrentUserContext:
    """Build the request-scoped context for the authenticated user."""
    return CurrentUserContext(
        user=user,
        request_id=getattr(request.state, "request_id", None),
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


def require_permission(permission_key: str):
    """Dependency factory that requires a specific permission."""

    def check_permission(
        context: Annotated[CurrentUserContext, Depends(get_user_context)],
    ) -> CurrentUserContext:
        context.require(permission_key)
        return context

    return check_permission


# Type aliases for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
UserContext = Annotated[CurrentUserContext, Depends(get_user_context)]
