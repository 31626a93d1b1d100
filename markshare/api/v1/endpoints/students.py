"""Student management endpoints."""

from io import BytesIO
from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from markshare.core.config import settings
from markshare.core.database import get_db
from markshare.core.dependencies import CurrentUserContext, require_permission
from markshare.core.exceptions import UploadError
from markshare.models.audit import AuditAction
from markshare.schemas.common import MessageResponse
from markshare.schemas.student import (
    StudentBulkCreate,
    StudentBulkResult,
    StudentBulkUploadResult,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
)
from markshare.services.audit import AuditService
from markshare.services.student import StudentService

router = APIRouter()


@router.post("", response_model=StudentResponse)
def create_student(
    request: StudentCreate,
    context: Annotated[CurrentUserContext, Depends(require_permission("student:create"))],
    db: Annotated[Session, Depends(get_db)],
    http_request: Request,
):
    """Create a new student."""
    service = StudentService(db)
    student = service.create_student(request)

    # Audit log
    audit = AuditService(db)
    audit.log(
        action=AuditAction.DATA_CREATED,
        resource_type="student",
        resource_id=str(student.id),
        user_id=context.user_id,
        description=f"Student '{student.name}' created",
        ip_address=http_request.client.host if http_request.client else None,
    )

    return student


@router.post("/bulk", response_model=StudentBulkResult)
def create_students(
    request: StudentBulkCreate,
    context: Annotated[CurrentUserContext, Depends(require_permission("student:create"))],
    db: Annotated[Session, Depends(get_db)],
    http_request: Request,
):
    """Add several students to one class by name."""
    service = StudentService(db)
    result = service.create_students(request)

    # Audit log
    audit = AuditService(db)
    audit.log(
        action=AuditAction.DATA_CREATED,
        resource_type="student",
        user_id=context.user_id,
        description=f"{result.created} students added to class {request.class_id}",
        ip_address=http_request.client.host if http_request.client else None,
    )

    return result


@router.get("", response_model=list[StudentResponse])
def list_students(
    context: Annotated[CurrentUserContext, Depends(require_permission("student:view"))],
    db: Annotated[Session, Depends(get_db)],
    class_id: int | None = Query(None),
):
    """List students sorted by name, optionally for one class."""
    service = StudentService(db)
    return service.list_students(class_id)


@router.get("/template")
def download_student_template(
    context: Annotated[CurrentUserContext, Depends(require_permission("student:upload"))],
    db: Annotated[Session, Depends(get_db)],
):
    """Download Excel template for student bulk upload."""
    service = StudentService(db)
    content = service.generate_template()

    return StreamingResponse(
        BytesIO(content),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": "attachment; filename=students_template.xlsx"},
    )


@router.post("/upload", response_model=StudentBulkUploadResult)
def bulk_upload_students(
    context: Annotated[CurrentUserContext, Depends(require_permission("student:upload"))],
    db: Annotated[Session, Depends(get_db)],
    http_request: Request,
    file: UploadFile = File(...),
):
    """
    Bulk upload students from Excel file.

    Download the template first to see the expected format.
    Partial success is allowed - invalid rows will be skipped.
    """
    if not file.filename:
        raise UploadError("No file provided")

    if not file.filename.endswith(".xlsx"):
        raise UploadError("Only .xlsx files are allowed")

    content = file.file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise UploadError(f"File size exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit")

    service = StudentService(db)
    result = service.bulk_upload(content)

    # Audit log
    audit = AuditService(db)
    audit.log(
        action=AuditAction.UPLOAD_COMPLETED,
        resource_type="student_upload",
        user_id=context.user_id,
        description=f"Student bulk upload: {result.successful_rows}/{result.total_rows} rows",
        metadata={
            "file_name": file.filename,
            "successful_rows": result.successful_rows,
            "failed_rows": result.failed_rows,
        },
        ip_address=http_request.client.host if http_request.client else None,
    )

    return result


@router.get("/{student_id}", response_model=StudentResponse)
def get_student(
    student_id: int,
    context: Annotated[CurrentUserContext, Depends(require_permission("student:view"))],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a student by ID."""
    service = StudentService(db)
    return service.get_student_response(student_id)


@router.patch("/{student_id}", response_model=StudentResponse)
def update_student(
    student_id: int,
    request: StudentUpdate,
    context: Annotated[CurrentUserContext, Depends(require_permission("student:update"))],
    db: Annotated[Session, Depends(get_db)],
    http_request: Request,
):
    """Update a student."""
    service = StudentService(db)
    student = service.update_student(student_id, request)

    # Audit log
    audit = AuditService(db)
    audit.log(
        action=AuditAction.DATA_UPDATED,
        resource_type="student",
        resource_id=str(student_id),
        user_id=context.user_id,
        description=f"Student '{student.name}' updated",
        metadata=request.model_dump(exclude_unset=True),
        ip_address=http_request.client.host if http_request.client else None,
    )

    return student


@router.delete("/{student_id}", response_model=MessageResponse)
def delete_student(
    student_id: int,
    context: Annotated[CurrentUserContext, Depends(require_permission("student:delete"))],
    db: Annotated[Session, Depends(get_db)],
    http_request: Request,
):
    """Delete a student and their marks entries."""
    service = StudentService(db)
    touched = service.delete_student(student_id)

    # Audit log
    audit = AuditService(db)
    audit.log(
        action=AuditAction.DATA_DELETED,
        resource_type="student",
        resource_id=str(student_id),
        user_id=context.user_id,
        metadata={"marks_documents_updated": touched},
        ip_address=http_request.client.host if http_request.client else None,
    )

    return MessageResponse(message="Student deleted successfully")
