"""
Test: student management, Excel upload and cascading deletes.
"""
from io import BytesIO

import pytest
from openpyxl import Workbook, load_workbook
from sqlalchemy import func, select

from markshare.core.exceptions import NotFoundError, ValidationError
from markshare.models.exam import Exam
from markshare.models.marks import MarksDocument
from markshare.models.student import Student
from markshare.schemas.marks import MarkInput, SaveMarksRequest
from markshare.schemas.student import StudentBulkCreate, StudentCreate, StudentUpdate
from markshare.services.exam import ExamService
from markshare.services.marks import MarksService
from markshare.services.student import StudentService


def workbook_bytes(rows: list[tuple]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.append(("Student Name", "Class"))
    for row in rows:
        ws.append(row)
    output = BytesIO()
    wb.save(output)
    return output.getvalue()


class TestStudentCrud:
    def test_create_and_get(self, db, school):
        service = StudentService(db)
        created = service.create_student(StudentCreate(name="Priya Joshi", class_id=school.sixth.id))

        fetched = service.get_student_response(created.id)
        assert fetched.name == "Priya Joshi"
        assert fetched.class_name == "6th Standard"

    def test_create_in_unknown_class(self, db, school):
        with pytest.raises(NotFoundError):
            StudentService(db).create_student(StudentCreate(name="Priya Joshi", class_id=9999))

    def test_bulk_create_skips_blank_names(self, db, school):
        result = StudentService(db).create_students(
            StudentBulkCreate(class_id=school.second.id, names=["Kadam Sanvi", "  ", "More Shraddha"])
        )
        assert result.created == 2
        assert result.message == "2 students added successfully!"

    def test_list_by_class_sorted_by_name(self, db, school):
        students = StudentService(db).list_students(school.sixth.id)
        assert [s.name for s in students] == ["Aryan Patil", "Neha Rane", "Rahul Sharma", "Sneha Deshmukh"]

    def test_list_all(self, db, school):
        assert len(StudentService(db).list_students()) == 5

    def test_update_moves_class(self, db, school):
        student_id = school.students["Kahrat Om"].id
        updated = StudentService(db).update_student(student_id, StudentUpdate(class_id=school.sixth.id))
        assert updated.class_id == school.sixth.id
        assert updated.name == "Kahrat Om"


class TestDeleteStudent:
    def save(self, db, school, subject, marks: dict[str, int]):
        MarksService(db).save_marks(
            SaveMarksRequest(
                class_id=school.sixth.id,
                subject_id=subject.id,
                exam_id=school.unit_test.id,
                marks=[MarkInput(student_id=school.students[n].id, marks=m) for n, m in marks.items()],
            )
        )

    def test_entries_removed_and_empty_documents_deleted(self, db, school):
        self.save(db, school, school.math, {"Aryan Patil": 20, "Neha Rane": 12})
        self.save(db, school, school.science, {"Aryan Patil": 15})

        touched = StudentService(db).delete_student(school.students["Aryan Patil"].id)

        assert touched == 2
        documents = db.execute(select(MarksDocument)).scalars().all()
        assert len(documents) == 1
        assert [m["student_name"] for m in documents[0].marks] == ["Neha Rane"]
        assert db.get(Student, school.students["Aryan Patil"].id) is None

    def test_unknown_student(self, db, school):
        with pytest.raises(NotFoundError):
            StudentService(db).delete_student(9999)


class TestDeleteExam:
    def test_marks_documents_removed(self, db, school):
        MarksService(db).save_marks(
            SaveMarksRequest(
                class_id=school.sixth.id,
                subject_id=school.math.id,
                exam_id=school.unit_test.id,
                marks=[MarkInput(student_id=school.students["Neha Rane"].id, marks=12)],
            )
        )

        removed = ExamService(db).delete_exam(school.unit_test.id)

        assert removed == 1
        assert db.get(Exam, school.unit_test.id) is None
        assert db.execute(select(func.count()).select_from(MarksDocument)).scalar_one() == 0

    def test_exams_listed_by_name(self, db, school):
        assert [e.name for e in ExamService(db).list_exams()] == ["Semester 1", "Unit Test (25 Marks)"]


class TestExcelUpload:
    def test_template_headers(self, db):
        ws = load_workbook(BytesIO(StudentService(db).generate_template())).active
        assert [cell.value for cell in ws[1]] == ["Student Name", "Class"]

    def test_partial_success(self, db, school):
        content = workbook_bytes([
            ("Priya Joshi", "6th standard"),
            ("Omkar Pawar", "11th Standard"),
            (None, "6th Standard"),
            (None, None),
            ("Kavya More", "6th Standard"),
        ])

        result = StudentService(db).bulk_upload(content)

        assert result.total_rows == 4
        assert result.successful_rows == 2
        assert result.failed_rows == 2
        assert [(e.row, e.column) for e in result.errors] == [(3, "Class"), (4, "Student Name")]
        names = {s.name for s in StudentService(db).list_students(school.sixth.id)}
        assert {"Priya Joshi", "Kavya More"} <= names

    def test_header_only_file(self, db, school):
        with pytest.raises(ValidationError):
            StudentService(db).bulk_upload(workbook_bytes([]))

    def test_not_a_workbook(self, db, school):
        with pytest.raises(ValidationError):
            StudentService(db).bulk_upload(b"not an excel file")
