"""Exam schemas."""

from datetime import date

from pydantic import Field

from markshare.schemas.common import BaseSchema


class ExamCreate(BaseSchema):
    """Exam creation schema."""

    name: str = Field(..., min_length=1, max_length=255)
    total_marks: int = Field(..., gt=0)
    exam_date: date | None = None


class ExamResponse(BaseSchema):
    """Exam response schema."""

    id: int
    name: str
    total_marks: int
    exam_date: date | None = None
