"""School class (standard) model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from markshare.core.database import Base
from markshare.models.base import IDMixin


class SchoolClass(Base, IDMixin):
    """A class/standard such as '6th Standard'. Seeded reference data."""

    __tablename__ = "classes"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    # Relationships
    students: Mapped[list["Student"]] = relationship(
        "Student",
        back_populates="school_class",
        lazy="select",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<SchoolClass(id={self.id}, name={self.name})>"
