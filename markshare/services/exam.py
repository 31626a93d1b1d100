"""Exam service."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from markshare.core.exceptions import NotFoundError, ValidationError
from markshare.models.exam import Exam
from markshare.models.marks import MarksDocument
from markshare.schemas.exam import ExamCreate, ExamResponse

logger = logging.getLogger(__name__)


class ExamService:
    """Exam management service."""

    def __init__(self, db: Session):
        self.db = db

    def list_exams(self) -> list[ExamResponse]:
        exams = self.db.execute(select(Exam)).scalars().all()
        ordered = sorted(exams, key=lambda e: e.name.casefold())
        return [ExamResponse.model_validate(e) for e in ordered]

    def get_exam(self, exam_id: int) -> Exam:
        exam = self.db.get(Exam, exam_id)
        if not exam:
            raise NotFoundError("Exam", str(exam_id))
        return exam

    def create_exam(self, request: ExamCreate) -> ExamResponse:
        """Create an exam."""
        if not request.name.strip():
            raise ValidationError("Exam name and total marks are required.")

        exam = Exam(
            name=request.name,
            total_marks=request.total_marks,
            exam_date=request.exam_date,
        )
        self.db.add(exam)
        self.db.flush()
        self.db.refresh(exam)
        return ExamResponse.model_validate(exam)

    def delete_exam(self, exam_id: int) -> int:
        """Delete an exam together with every marks document recorded for it."""
        exam = self.get_exam(exam_id)
        result = self.db.execute(
            delete(MarksDocument).where(MarksDocument.exam_id == exam_id)
        )
        self.db.delete(exam)
        self.db.flush()
        logger.info(f"Deleted exam {exam_id} and {result.rowcount} marks documents")
        return result.rowcount
