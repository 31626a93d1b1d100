"""Common schema utilities and base classes."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class MessageResponse(BaseSchema):
    """Simple message response."""

    message: str


class OperationResult(BaseSchema):
    """
    Discriminated success/failure result.

    Returned by operations that must never raise to their caller
    (marks saves, mark deletes, seeding, report-card comments).
    """

    success: bool
    message: str
    code: str | None = None
    details: dict[str, Any] = {}

    @classmethod
    def ok(cls, message: str, **details: Any) -> "OperationResult":
        return cls(success=True, message=message, details=details)

    @classmethod
    def fail(cls, message: str, code: str = "INTERNAL_ERROR", **details: Any) -> "OperationResult":
        return cls(success=False, message=message, code=code, details=details)
