"""Audit log model."""

import enum
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Enum, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from markshare.core.database import Base
from markshare.models.base import IDMixin, JSONType, utc_now


class AuditAction(str, enum.Enum):
    """Audit action types."""

    # User actions
    USER_CREATED = "USER_CREATED"
    USER_LOGIN = "USER_LOGIN"

    # Marks actions
    MARKS_SAVED = "MARKS_SAVED"
    MARK_DELETED = "MARK_DELETED"

    # Upload actions
    UPLOAD_COMPLETED = "UPLOAD_COMPLETED"

    # Data mutations
    DATA_CREATED = "DATA_CREATED"
    DATA_UPDATED = "DATA_UPDATED"
    DATA_DELETED = "DATA_DELETED"
    DATA_SEEDED = "DATA_SEEDED"


class AuditLog(Base, IDMixin):
    """Append-only audit log model."""

    __tablename__ = "audit_logs"

    # Actor
    user_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Action details
    action: Mapped[AuditAction] = mapped_column(
        Enum(AuditAction),
        nullable=False,
        index=True,
    )
    resource_type: Mapped[str] = mapped_column(String(100), nullable=False)
    resource_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Additional context (JSON)
    extra_data: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    # Request context
    ip_address: Mapped[str | None] = mapped_column(String(50), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Timestamp (append-only, no updated_at)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    # Relationships
    user: Mapped["User | None"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, action={self.action})>"


# Import to avoid circular imports
from markshare.models.user import User  # noqa: E402
