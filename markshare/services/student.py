"""Student management service."""

import logging
from io import BytesIO

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from sqlalchemy import select
from sqlalchemy.orm import Session

from markshare.core.exceptions import NotFoundError, ValidationError
from markshare.models.school_class import SchoolClass
from markshare.models.student import Student
from markshare.schemas.student import (
    StudentBulkCreate,
    StudentBulkResult,
    StudentBulkUploadResult,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
    StudentUploadError,
)
from markshare.services.grading import name_sort_key
from markshare.services.marks import MarksService

logger = logging.getLogger(__name__)

# Excel template columns for student upload
STUDENT_TEMPLATE_COLUMNS = [
    ("name", "Student Name", True),
    ("class_name", "Class", True),
]


class StudentService:
    """Student management service."""

    def __init__(self, db: Session):
        self.db = db

    def _to_response(self, student: Student) -> StudentResponse:
        return StudentResponse(
            id=student.id,
            name=student.name,
            class_id=student.class_id,
            class_name=student.school_class.name if student.school_class else None,
            created_at=student.created_at,
            updated_at=student.updated_at,
        )

    def _require_class(self, class_id: int) -> SchoolClass:
        school_class = self.db.get(SchoolClass, class_id)
        if not school_class:
            raise NotFoundError("Class", str(class_id))
        return school_class

    def create_student(self, request: StudentCreate) -> StudentResponse:
        """Create a new student."""
        if not request.name.strip():
            raise ValidationError("Student name and class are required.")
        self._require_class(request.class_id)

        student = Student(name=request.name, class_id=request.class_id)
        self.db.add(student)
        self.db.flush()
        self.db.refresh(student)
        return self._to_response(student)

    def create_students(self, request: StudentBulkCreate) -> StudentBulkResult:
        """Create several students in one class."""
        self._require_class(request.class_id)
        self.db.add_all(Student(name=name, class_id=request.class_id) for name in request.names)
        self.db.flush()
        return StudentBulkResult(
            created=len(request.names),
            message=f"{len(request.names)} students added successfully!",
        )

    def get_student(self, student_id: int) -> Student:
        """Get student by ID."""
        student = self.db.get(Student, student_id)
        if not student:
            raise NotFoundError("Student", str(student_id))
        return student

    def get_student_response(self, student_id: int) -> StudentResponse:
        return self._to_response(self.get_student(student_id))

    def list_students(self, class_id: int | None = None) -> list[StudentResponse]:
        """List students sorted by name, optionally for one class."""
        query = select(Student)
        if class_id is not None:
            query = query.where(Student.class_id == class_id)
        students = self.db.execute(query).scalars().all()
        ordered = sorted(students, key=lambda s: name_sort_key(s.name))
        return [self._to_response(s) for s in ordered]

    def update_student(self, student_id: int, request: StudentUpdate) -> StudentResponse:
        """Rename or move a student. Names already stored with marks are left as-is."""
        student = self.get_student(student_id)
        update_data = request.model_dump(exclude_unset=True, exclude_none=True)
        if "class_id" in update_data:
            self._require_class(update_data["class_id"])
        for field, value in update_data.items():
            setattr(student, field, value)
        self.db.flush()
        self.db.refresh(student)
        return self._to_response(student)

    def delete_student(self, student_id: int) -> int:
        """Delete a student and remove their entries from every marks document."""
        student = self.get_student(student_id)
        touched = MarksService(self.db).remove_student(student_id)
        self.db.delete(student)
        self.db.flush()
        logger.info(f"Deleted student {student_id}; removed from {touched} marks documents")
        return touched

    def generate_template(self) -> bytes:
        """Generate Excel template for student bulk upload."""
        wb = Workbook()
        ws = wb.active
        ws.title = "Students"

        headers = [col[1] for col in STUDENT_TEMPLATE_COLUMNS]
        for col_idx, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col_idx, value=header)
            cell.font = Font(bold=True)

        # Sample row
        sample_data = ["Priya Joshi", "6th Standard"]
        for col_idx, value in enumerate(sample_data, start=1):
            ws.cell(row=2, column=col_idx, value=value)

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 20

        output = BytesIO()
        wb.save(output)
        output.seek(0)
        return output.getvalue()

    def bulk_upload(self, file_content: bytes) -> StudentBulkUploadResult:
        """Process bulk student upload from Excel. Invalid rows are skipped."""
        try:
            wb = load_workbook(BytesIO(file_content), data_only=True)
            ws = wb.active
        except Exception as e:
            raise ValidationError(f"Invalid Excel file: {str(e)}")

        rows = list(ws.iter_rows(min_row=2, values_only=True))
        if not rows:
            raise ValidationError("No data found in Excel file")

        classes_by_name = {
            name.casefold(): class_id
            for class_id, name in self.db.execute(select(SchoolClass.id, SchoolClass.name)).all()
        }

        errors: list[StudentUploadError] = []
        successful = 0

        for row_num, row in enumerate(rows, start=2):
            # Skip empty rows
            if not any(row):
                continue

            name = str(row[0]).strip() if row[0] else None
            class_name = str(row[1]).strip() if len(row) > 1 and row[1] else None

            if not name:
                errors.append(StudentUploadError(row=row_num, column="Student Name", message="Student Name is required"))
                continue
            if not class_name:
                errors.append(StudentUploadError(row=row_num, column="Class", message="Class is required"))
                continue

            class_id = classes_by_name.get(class_name.casefold())
            if class_id is None:
                errors.append(
                    StudentUploadError(row=row_num, column="Class", message=f"Unknown class '{class_name}'")
                )
                continue

            self.db.add(Student(name=name, class_id=class_id))
            successful += 1

        self.db.flush()

        total = len([r for r in rows if any(r)])
        message = f"Uploaded {successful} of {total} students."
        if errors:
            message += f" {len(errors)} rows failed."

        return StudentBulkUploadResult(
            total_rows=total,
            successful_rows=successful,
            failed_rows=len(errors),
            errors=errors,
            message=message,
        )
