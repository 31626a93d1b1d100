"""Class and subject endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from markshare.core.database import get_db
from markshare.core.dependencies import CurrentUserContext, require_permission
from markshare.schemas.school import ClassResponse, SubjectResponse
from markshare.services.school import SchoolService

router = APIRouter()


@router.get("/classes", response_model=list[ClassResponse])
def list_classes(
    context: Annotated[CurrentUserContext, Depends(require_permission("class:view"))],
    db: Annotated[Session, Depends(get_db)],
):
    """List classes in school order (Jr. KG, Sr. KG, 1st ... 10th)."""
    return SchoolService(db).list_classes()


@router.get("/subjects", response_model=list[SubjectResponse])
def list_subjects(
    context: Annotated[CurrentUserContext, Depends(require_permission("subject:view"))],
    db: Annotated[Session, Depends(get_db)],
):
    """List subjects by name."""
    return SchoolService(db).list_subjects()
