"""Marks entry, deletion and summary endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from markshare.api.v1.results import result_response
from markshare.core.database import get_db
from markshare.core.dependencies import CurrentUserContext, require_permission
from markshare.models.audit import AuditAction
from markshare.schemas.common import OperationResult
from markshare.schemas.marks import (
    BatchSaveMarksRequest,
    MarksDocumentResponse,
    MarksSummaryResponse,
    MarkWithExam,
    SaveMarksRequest,
)
from markshare.services.audit import AuditService
from markshare.services.marks import MarksService

router = APIRouter()


@router.get("", response_model=MarksDocumentResponse | None)
def get_marks(
    context: Annotated[CurrentUserContext, Depends(require_permission("marks:view"))],
    db: Annotated[Session, Depends(get_db)],
    class_id: int = Query(...),
    subject_id: int = Query(...),
    exam_id: int = Query(...),
):
    """Entries for one (class, subject, exam); null when nothing has been saved yet."""
    service = MarksService(db)
    return service.get_document(class_id, subject_id, exam_id)


@router.get("/by-subject", response_model=list[MarkWithExam])
def get_marks_for_subject(
    context: Annotated[CurrentUserContext, Depends(require_permission("marks:view"))],
    db: Annotated[Session, Depends(get_db)],
    class_id: int = Query(...),
    subject_id: int = Query(...),
):
    """Every entry for (class, subject) across all exams."""
    service = MarksService(db)
    return service.get_marks_for_subject(class_id, subject_id)


@router.get("/summary", response_model=MarksSummaryResponse)
def get_marks_summary(
    context: Annotated[CurrentUserContext, Depends(require_permission("marks:view"))],
    db: Annotated[Session, Depends(get_db)],
    class_id: int = Query(...),
    subject_id: int = Query(...),
    exam_id: int = Query(...),
):
    """Ranked marks with a WhatsApp-ready message and share link."""
    service = MarksService(db)
    return service.get_summary(class_id, subject_id, exam_id)


@router.post("", response_model=OperationResult)
def save_marks(
    request: SaveMarksRequest,
    context: Annotated[CurrentUserContext, Depends(require_permission("marks:save"))],
    db: Annotated[Session, Depends(get_db)],
    http_request: Request,
):
    """
    Save marks for one (class, subject, exam).

    Entries are merged by student: resubmitting a student's mark replaces it,
    other students' marks are kept.
    """
    service = MarksService(db)
    result = service.save_marks(request)

    if result.success and result.details.get("saved"):
        # Audit log
        audit = AuditService(db)
        audit.log(
            action=AuditAction.MARKS_SAVED,
            resource_type="marks",
            resource_id=str(result.details["document_id"]),
            user_id=context.user_id,
            description=f"{result.details['saved']} marks saved",
            metadata={
                "class_id": request.class_id,
                "subject_id": request.subject_id,
                "exam_id": request.exam_id,
            },
            ip_address=http_request.client.host if http_request.client else None,
        )

    return result_response(result)


@router.post("/batch", response_model=OperationResult)
def save_marks_batch(
    request: BatchSaveMarksRequest,
    context: Annotated[CurrentUserContext, Depends(require_permission("marks:save"))],
    db: Annotated[Session, Depends(get_db)],
    http_request: Request,
):
    """Save edits for several exams of one (class, subject)."""
    service = MarksService(db)
    result = service.save_marks_batch(request)

    saved_exam_ids = result.details.get("saved_exam_ids") or []
    if saved_exam_ids:
        # Audit log
        audit = AuditService(db)
        audit.log(
            action=AuditAction.MARKS_SAVED,
            resource_type="marks",
            user_id=context.user_id,
            description=f"Marks saved for {len(saved_exam_ids)} exams",
            metadata={
                "class_id": request.class_id,
                "subject_id": request.subject_id,
                "exam_ids": saved_exam_ids,
            },
            ip_address=http_request.client.host if http_request.client else None,
        )

    return result_response(result)


@router.delete("", response_model=OperationResult)
def delete_mark(
    context: Annotated[CurrentUserContext, Depends(require_permission("marks:delete"))],
    db: Annotated[Session, Depends(get_db)],
    http_request: Request,
    class_id: int = Query(...),
    subject_id: int = Query(...),
    exam_id: int = Query(...),
    student_id: int = Query(...),
):
    """Remove one student's mark. Deleting an absent mark succeeds."""
    service = MarksService(db)
    result = service.delete_mark(class_id, subject_id, exam_id, student_id)

    if result.success and result.details.get("removed"):
        # Audit log
        audit = AuditService(db)
        audit.log(
            action=AuditAction.MARK_DELETED,
            resource_type="marks",
            resource_id=str(student_id),
            user_id=context.user_id,
            metadata={
                "class_id": class_id,
                "subject_id": subject_id,
                "exam_id": exam_id,
                "document_deleted": result.details.get("document_deleted", False),
            },
            ip_address=http_request.client.host if http_request.client else None,
        )

    return result_response(result)
