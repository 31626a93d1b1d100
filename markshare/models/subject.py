"""Subject model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from markshare.core.database import Base
from markshare.models.base import IDMixin


class Subject(Base, IDMixin):
    """Subject reference data."""

    __tablename__ = "subjects"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Subject(id={self.id}, name={self.name})>"
