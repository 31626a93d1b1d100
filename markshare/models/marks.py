"""Marks document model."""

from datetime import date, datetime
from typing import Any

from sqlalchemy import BigInteger, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from markshare.core.database import Base
from markshare.models.base import IDMixin, JSONType, utc_now

# Version 1 entries carry no status; version 2 entries always do.
CURRENT_SCHEMA_VERSION = 2


class MarksDocument(Base, IDMixin):
    """
    All students' marks for one (class, subject, exam).

    Entries live in a JSON list keyed by student id. The list is always
    replaced wholesale, never mutated in place.
    """

    __tablename__ = "marks_documents"

    class_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("classes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    subject_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("subjects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    exam_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("exams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Denormalized exam details at the time of the last save
    exam_name: Mapped[str] = mapped_column(String(255), nullable=False)
    exam_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    total_marks: Mapped[int] = mapped_column(Integer, nullable=False)

    schema_version: Mapped[int] = mapped_column(
        Integer,
        default=CURRENT_SCHEMA_VERSION,
        nullable=False,
    )
    marks: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
    )
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint(
            "class_id", "subject_id", "exam_id",
            name="uq_marks_class_subject_exam",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<MarksDocument(class_id={self.class_id}, subject_id={self.subject_id}, "
            f"exam_id={self.exam_id}, entries={len(self.marks or [])})>"
        )
