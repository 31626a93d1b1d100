"""Report schemas."""

from pydantic import Field

from markshare.schemas.common import BaseSchema
from markshare.schemas.marks import MarkStatus

MISSING_MARK = "-"


class ConsolidatedReportRow(BaseSchema):
    """One student across every subject."""

    student_id: int
    student_name: str
    class_name: str
    marks: dict[str, int | str]
    total: int


class ConsolidatedReport(BaseSchema):
    """Denormalized cross-class, cross-subject report."""

    subjects: list[str]
    rows: list[ConsolidatedReportRow]


class ShareMessage(BaseSchema):
    """Formatted text ready for messaging."""

    message: str
    share_url: str


class ExamMarkDetail(BaseSchema):
    exam_name: str
    marks: int
    total_marks: int
    status: MarkStatus
    grade: str


class ReportCard(BaseSchema):
    """Per-student breakdown by subject and exam."""

    student_id: int
    student_name: str
    class_name: str
    subjects: dict[str, list[ExamMarkDetail]]
    total_scored: int
    total_possible: int
    percentage: float
    status: MarkStatus


class ReportCardSummary(BaseSchema):
    """Written comment for a report card and a message for the parent."""

    comment: str = Field(..., description="2-3 sentence comment addressed to the student")
    whatsapp_message: str = Field(..., description="Short message for the parent")
