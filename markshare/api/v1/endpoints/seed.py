"""Initial data seeding endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from markshare.api.v1.results import result_response
from markshare.core.database import get_db
from markshare.core.dependencies import CurrentUserContext, require_permission
from markshare.models.audit import AuditAction
from markshare.schemas.common import OperationResult
from markshare.services.audit import AuditService
from markshare.services.seed import SeedService

router = APIRouter()


@router.post("", response_model=OperationResult)
def seed_initial_data(
    context: Annotated[CurrentUserContext, Depends(require_permission("data:seed"))],
    db: Annotated[Session, Depends(get_db)],
    http_request: Request,
):
    """
    Populate an empty database with default classes, subjects, exams and
    sample students. Does nothing once any class exists.
    """
    service = SeedService(db)
    result = service.seed_initial_data()

    if result.success and result.details.get("seeded"):
        # Audit log
        audit = AuditService(db)
        audit.log(
            action=AuditAction.DATA_SEEDED,
            resource_type="database",
            user_id=context.user_id,
            metadata=result.details,
            ip_address=http_request.client.host if http_request.client else None,
        )

    return result_response(result)
