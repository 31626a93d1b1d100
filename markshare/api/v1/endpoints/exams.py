"""Exam endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from markshare.core.database import get_db
from markshare.core.dependencies import CurrentUserContext, require_permission
from markshare.models.audit import AuditAction
from markshare.schemas.common import MessageResponse
from markshare.schemas.exam import ExamCreate, ExamResponse
from markshare.services.audit import AuditService
from markshare.services.exam import ExamService

router = APIRouter()


@router.get("", response_model=list[ExamResponse])
def list_exams(
    context: Annotated[CurrentUserContext, Depends(require_permission("exam:view"))],
    db: Annotated[Session, Depends(get_db)],
):
    """List exams sorted by name."""
    service = ExamService(db)
    return service.list_exams()


@router.post("", response_model=ExamResponse)
def create_exam(
    request: ExamCreate,
    context: Annotated[CurrentUserContext, Depends(require_permission("exam:create"))],
    db: Annotated[Session, Depends(get_db)],
    http_request: Request,
):
    """Create an exam."""
    service = ExamService(db)
    exam = service.create_exam(request)

    # Audit log
    audit = AuditService(db)
    audit.log(
        action=AuditAction.DATA_CREATED,
        resource_type="exam",
        resource_id=str(exam.id),
        user_id=context.user_id,
        description=f"Exam '{exam.name}' created ({exam.total_marks} marks)",
        ip_address=http_request.client.host if http_request.client else None,
    )

    return exam


@router.delete("/{exam_id}", response_model=MessageResponse)
def delete_exam(
    exam_id: int,
    context: Annotated[CurrentUserContext, Depends(require_permission("exam:delete"))],
    db: Annotated[Session, Depends(get_db)],
    http_request: Request,
):
    """Delete an exam and every marks document recorded for it."""
    service = ExamService(db)
    removed = service.delete_exam(exam_id)

    # Audit log
    audit = AuditService(db)
    audit.log(
        action=AuditAction.DATA_DELETED,
        resource_type="exam",
        resource_id=str(exam_id),
        user_id=context.user_id,
        metadata={"marks_documents_deleted": removed},
        ip_address=http_request.client.host if http_request.client else None,
    )

    return MessageResponse(message="Exam deleted successfully")
