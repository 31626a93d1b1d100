"""Class and subject reference data service."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from markshare.core.exceptions import NotFoundError
from markshare.models.school_class import SchoolClass
from markshare.models.subject import Subject
from markshare.schemas.school import ClassResponse, SubjectResponse
from markshare.services.grading import class_sort_key


class SchoolService:
    """Read access to classes and subjects."""

    def __init__(self, db: Session):
        self.db = db

    def list_classes(self) -> list[ClassResponse]:
        classes = self.db.execute(select(SchoolClass)).scalars().all()
        ordered = sorted(classes, key=lambda c: class_sort_key(c.name))
        return [ClassResponse.model_validate(c) for c in ordered]

    def list_subjects(self) -> list[SubjectResponse]:
        subjects = self.db.execute(select(Subject)).scalars().all()
        ordered = sorted(subjects, key=lambda s: s.name.casefold())
        return [SubjectResponse.model_validate(s) for s in ordered]

    def get_class(self, class_id: int) -> SchoolClass:
        school_class = self.db.get(SchoolClass, class_id)
        if not school_class:
            raise NotFoundError("Class", str(class_id))
        return school_class

    def get_subject(self, subject_id: int) -> Subject:
        subject = self.db.get(Subject, subject_id)
        if not subject:
            raise NotFoundError("Subject", str(subject_id))
        return subject

    def class_names(self) -> dict[int, str]:
        return dict(self.db.execute(select(SchoolClass.id, SchoolClass.name)).all())

    def subject_names(self) -> dict[int, str]:
        return dict(self.db.execute(select(Subject.id, Subject.name)).all())
