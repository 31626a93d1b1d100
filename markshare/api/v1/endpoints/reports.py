"""Report endpoints."""

from io import BytesIO
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from markshare.api.v1.results import result_response
from markshare.core.database import get_db
from markshare.core.dependencies import CurrentUserContext, require_permission
from markshare.schemas.common import OperationResult
from markshare.schemas.report import ConsolidatedReport, ReportCard, ShareMessage
from markshare.services.report import ReportService
from markshare.services.report_comments import ReportCommentService

router = APIRouter()


def get_comment_service() -> ReportCommentService:
    return ReportCommentService()


@router.get("/consolidated", response_model=ConsolidatedReport)
def get_consolidated_report(
    context: Annotated[CurrentUserContext, Depends(require_permission("report:view"))],
    db: Annotated[Session, Depends(get_db)],
):
    """Every student with a recorded mark, one column per subject."""
    service = ReportService(db)
    return service.consolidated_report()


@router.get("/consolidated/message", response_model=ShareMessage)
def get_consolidated_message(
    context: Annotated[CurrentUserContext, Depends(require_permission("report:view"))],
    db: Annotated[Session, Depends(get_db)],
):
    """Consolidated report as a monospaced WhatsApp message."""
    service = ReportService(db)
    return service.consolidated_message()


@router.get("/consolidated/export")
def export_consolidated_report(
    context: Annotated[CurrentUserContext, Depends(require_permission("report:view"))],
    db: Annotated[Session, Depends(get_db)],
):
    """Download the consolidated report as Excel."""
    service = ReportService(db)
    content = service.export_consolidated_report()

    return StreamingResponse(
        BytesIO(content),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": "attachment; filename=consolidated_report.xlsx"},
    )


@router.get("/students/{student_id}", response_model=ReportCard)
def get_report_card(
    student_id: int,
    context: Annotated[CurrentUserContext, Depends(require_permission("report:view"))],
    db: Annotated[Session, Depends(get_db)],
):
    """Per-subject, per-exam breakdown for one student."""
    service = ReportService(db)
    return service.report_card(student_id)


@router.post("/students/{student_id}/summary", response_model=OperationResult)
def generate_report_card_summary(
    student_id: int,
    context: Annotated[CurrentUserContext, Depends(require_permission("report:view"))],
    db: Annotated[Session, Depends(get_db)],
    comments: Annotated[ReportCommentService, Depends(get_comment_service)],
):
    """AI-written comment for the report card and a short message for the parent."""
    card = ReportService(db).report_card(student_id)
    return result_response(comments.generate(card))
