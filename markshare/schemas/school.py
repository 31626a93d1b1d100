"""Class and subject schemas."""

from markshare.schemas.common import BaseSchema


class ClassResponse(BaseSchema):
    id: int
    name: str


class SubjectResponse(BaseSchema):
    id: int
    name: str
