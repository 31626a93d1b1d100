"""Audit logging service."""

from typing import Any

from sqlalchemy.orm import Session

from markshare.models.audit import AuditAction, AuditLog


class AuditService:
    """Audit logging service - append-only."""

    def __init__(self, db: Session):
        self.db = db

    def log(
        self,
        action: AuditAction,
        resource_type: str,
        resource_id: str | None = None,
        user_id: int | None = None,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditLog:
        """Create an audit log entry."""
        log = AuditLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            description=description,
            extra_data=metadata,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.db.add(log)
        self.db.flush()
        return log
