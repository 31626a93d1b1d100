"""Student model."""

from sqlalchemy import BigInteger, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from markshare.core.database import Base
from markshare.models.base import IDMixin, TimestampMixin


class Student(Base, IDMixin, TimestampMixin):
    """Student model for managing student records."""

    __tablename__ = "students"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    class_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("classes.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # Relationships
    school_class: Mapped["SchoolClass"] = relationship(
        "SchoolClass",
        back_populates="students",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, name={self.name}, class_id={self.class_id})>"
