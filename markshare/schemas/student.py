"""Student schemas."""

from datetime import datetime

from pydantic import Field, field_validator

from markshare.schemas.common import BaseSchema


class StudentBase(BaseSchema):
    """Base student schema."""

    name: str = Field(..., min_length=1, max_length=255)
    class_id: int


class StudentCreate(StudentBase):
    """Student creation schema."""

    pass


class StudentBulkCreate(BaseSchema):
    """Several students for one class, given by name."""

    class_id: int
    names: list[str] = Field(..., min_length=1)

    @field_validator("names")
    @classmethod
    def strip_blank_names(cls, v: list[str]) -> list[str]:
        names = [name.strip() for name in v if name and name.strip()]
        if not names:
            raise ValueError("At least one non-blank student name is required")
        return names


class StudentUpdate(BaseSchema):
    """Student update schema."""

    name: str | None = Field(None, min_length=1, max_length=255)
    class_id: int | None = None


class StudentResponse(StudentBase):
    """Student response schema."""

    id: int
    class_name: str | None = None
    created_at: datetime
    updated_at: datetime


class StudentBulkResult(BaseSchema):
    """Result of a bulk student creation."""

    created: int
    message: str


class StudentUploadError(BaseSchema):
    """Error detail for a student upload row."""

    row: int
    column: str | None = None
    message: str


class StudentBulkUploadResult(BaseSchema):
    """Result of bulk student upload."""

    total_rows: int
    successful_rows: int
    failed_rows: int
    errors: list[StudentUploadError] = []
    message: str
