"""Exam model."""

from datetime import date

from sqlalchemy import CheckConstraint, Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from markshare.core.database import Base
from markshare.models.base import IDMixin, TimestampMixin


class Exam(Base, IDMixin, TimestampMixin):
    """An exam with a fixed total. The total bounds every mark recorded for it."""

    __tablename__ = "exams"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    total_marks: Mapped[int] = mapped_column(Integer, nullable=False)
    exam_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        CheckConstraint("total_marks > 0", name="ck_exam_total_marks_positive"),
    )

    def __repr__(self) -> str:
        return f"<Exam(id={self.id}, name={self.name}, total={self.total_marks})>"
