"""Marks schemas."""

import enum
from datetime import date, datetime

from pydantic import Field

from markshare.schemas.common import BaseSchema


class MarkStatus(str, enum.Enum):
    """Derived pass/fail state of a mark."""

    PASS = "Pass"
    FAIL = "Fail"
    PENDING = "Pending"


# ==========================================
# Stored entries
# ==========================================

class MarkEntry(BaseSchema):
    """One student's mark inside a marks document (current schema)."""

    student_id: int
    student_name: str
    marks: int | None = None
    status: MarkStatus = MarkStatus.PENDING


class LegacyMarkEntry(BaseSchema):
    """Schema version 1 entry: camelCase keys, no status."""

    studentId: int
    studentName: str
    marks: int | None = None


# ==========================================
# Save requests
# ==========================================

class MarkInput(BaseSchema):
    """A mark submitted for one student. Status is derived server-side."""

    student_id: int
    student_name: str | None = None
    marks: int | None = None


class SaveMarksRequest(BaseSchema):
    """Marks for one (class, subject, exam)."""

    class_id: int | None = None
    subject_id: int | None = None
    exam_id: int | None = None
    exam_date: date | None = None
    marks: list[MarkInput] = []


class ExamMarksInput(BaseSchema):
    """Edited marks for one exam inside a batch save."""

    exam_id: int
    exam_date: date | None = None
    marks: list[MarkInput] = []


class BatchSaveMarksRequest(BaseSchema):
    """Edits across several exams of one (class, subject)."""

    class_id: int | None = None
    subject_id: int | None = None
    exams: list[ExamMarksInput] = Field(..., min_length=1)


# ==========================================
# Views
# ==========================================

class MarkWithExam(MarkEntry):
    """A stored entry annotated with its exam."""

    exam_id: int
    exam_name: str
    exam_date: date | None = None
    total_marks: int


class MarksDocumentResponse(BaseSchema):
    """Entries of one marks document."""

    class_id: int
    subject_id: int
    exam_id: int
    exam_name: str
    exam_date: date | None = None
    total_marks: int
    marks: list[MarkEntry]
    last_updated: datetime | None = None


class RankedStudent(BaseSchema):
    """A student's position in a ranked marks list."""

    rank: int
    rank_label: str
    name: str
    marks: int
    status: MarkStatus


class MarksSummaryResponse(BaseSchema):
    """Ranked marks for one (class, subject, exam) plus shareable text."""

    class_name: str
    subject_name: str
    exam_name: str
    total_marks: int
    students: list[RankedStudent]
    message: str
    share_url: str
