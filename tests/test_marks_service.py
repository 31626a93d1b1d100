"""
Test: marks documents: merge-by-student saves, deletes, legacy documents and summaries.
"""
from datetime import date

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from markshare.core.exceptions import NotFoundError, StoredDocumentError, ValidationError
from markshare.models.marks import CURRENT_SCHEMA_VERSION, MarksDocument
from markshare.schemas.marks import (
    BatchSaveMarksRequest,
    ExamMarksInput,
    MarkInput,
    MarkStatus,
    SaveMarksRequest,
)
from markshare.services.marks import MarksService, read_entries


def save(db, school, marks: dict[str, int | None], exam=None, subject=None, exam_date=None):
    exam = exam or school.unit_test
    subject = subject or school.math
    request = SaveMarksRequest(
        class_id=school.sixth.id,
        subject_id=subject.id,
        exam_id=exam.id,
        exam_date=exam_date,
        marks=[MarkInput(student_id=school.students[name].id, marks=value) for name, value in marks.items()],
    )
    return MarksService(db).save_marks(request)


def stored_marks(db, school, exam=None, subject=None) -> dict[str, int | None]:
    document = MarksService(db).get_document(
        school.sixth.id, (subject or school.math).id, (exam or school.unit_test).id
    )
    if document is None:
        return {}
    return {e.student_name: e.marks for e in document.marks}


def document_count(db) -> int:
    return db.execute(select(func.count()).select_from(MarksDocument)).scalar_one()


class TestSaveMarks:
    def test_first_save_creates_document(self, db, school):
        result = save(db, school, {"Aryan Patil": 20, "Sneha Deshmukh": 8})

        assert result.success
        assert result.message == "Marks have been saved successfully!"
        assert result.details["created"] is True
        assert result.details["saved"] == 2

        document = MarksService(db).get_document(school.sixth.id, school.math.id, school.unit_test.id)
        assert document.exam_name == "Unit Test (25 Marks)"
        assert document.total_marks == 25
        statuses = {e.student_name: e.status for e in document.marks}
        assert statuses == {"Aryan Patil": MarkStatus.PASS, "Sneha Deshmukh": MarkStatus.FAIL}

    def test_saves_merge_by_student(self, db, school):
        save(db, school, {"Aryan Patil": 20})
        save(db, school, {"Sneha Deshmukh": 15})
        result = save(db, school, {"Aryan Patil": 22})

        assert result.details["created"] is False
        assert stored_marks(db, school) == {"Aryan Patil": 22, "Sneha Deshmukh": 15}
        assert document_count(db) == 1

    def test_resubmitting_same_marks_is_idempotent(self, db, school):
        save(db, school, {"Aryan Patil": 20, "Neha Rane": 11})
        first = stored_marks(db, school)
        save(db, school, {"Aryan Patil": 20, "Neha Rane": 11})
        assert stored_marks(db, school) == first

    def test_mark_over_total_is_clamped(self, db, school):
        save(db, school, {"Rahul Sharma": 150}, exam=school.semester)
        assert stored_marks(db, school, exam=school.semester) == {"Rahul Sharma": 100}

    def test_empty_and_negative_marks_are_dropped(self, db, school):
        result = save(db, school, {"Aryan Patil": None, "Neha Rane": -5})

        assert result.success
        assert result.message == "No marks data provided."
        assert result.details["saved"] == 0
        assert document_count(db) == 0

    def test_zero_is_a_mark(self, db, school):
        save(db, school, {"Neha Rane": 0})
        assert stored_marks(db, school) == {"Neha Rane": 0}

    def test_missing_selection(self, db, school):
        result = MarksService(db).save_marks(
            SaveMarksRequest(class_id=school.sixth.id, subject_id=None, exam_id=school.unit_test.id)
        )
        assert not result.success
        assert result.code == "VALIDATION_ERROR"
        assert result.message == "Class, subject, and exam must be selected."

    def test_unknown_exam(self, db, school):
        result = MarksService(db).save_marks(
            SaveMarksRequest(
                class_id=school.sixth.id,
                subject_id=school.math.id,
                exam_id=9999,
                marks=[MarkInput(student_id=school.students["Neha Rane"].id, marks=5)],
            )
        )
        assert not result.success
        assert result.code == "NOT_FOUND"

    def test_unknown_student(self, db, school):
        result = MarksService(db).save_marks(
            SaveMarksRequest(
                class_id=school.sixth.id,
                subject_id=school.math.id,
                exam_id=school.unit_test.id,
                marks=[MarkInput(student_id=9999, marks=5)],
            )
        )
        assert not result.success
        assert result.code == "VALIDATION_ERROR"
        assert result.details["student_ids"] == [9999]
        assert document_count(db) == 0

    def test_submitted_name_is_stored(self, db, school):
        MarksService(db).save_marks(
            SaveMarksRequest(
                class_id=school.sixth.id,
                subject_id=school.math.id,
                exam_id=school.unit_test.id,
                marks=[MarkInput(student_id=school.students["Neha Rane"].id, student_name="Neha R.", marks=9)],
            )
        )
        assert stored_marks(db, school) == {"Neha R.": 9}

    def test_exam_date_kept_when_omitted(self, db, school):
        save(db, school, {"Aryan Patil": 20}, exam_date=date(2026, 9, 1))
        save(db, school, {"Neha Rane": 12})

        document = MarksService(db).get_document(school.sixth.id, school.math.id, school.unit_test.id)
        assert document.exam_date == date(2026, 9, 1)

    def test_documents_are_keyed_by_subject(self, db, school):
        save(db, school, {"Aryan Patil": 20})
        save(db, school, {"Aryan Patil": 5}, subject=school.science)

        assert stored_marks(db, school) == {"Aryan Patil": 20}
        assert stored_marks(db, school, subject=school.science) == {"Aryan Patil": 5}
        assert document_count(db) == 2

    def test_repeated_student_on_first_save(self, db, school):
        aryan = school.students["Aryan Patil"].id
        result = MarksService(db).save_marks(
            SaveMarksRequest(
                class_id=school.sixth.id,
                subject_id=school.math.id,
                exam_id=school.unit_test.id,
                marks=[MarkInput(student_id=aryan, marks=10), MarkInput(student_id=aryan, marks=20)],
            )
        )

        assert result.success
        assert result.details["created"] is True
        assert result.details["saved"] == 1
        document = MarksService(db).get_document(school.sixth.id, school.math.id, school.unit_test.id)
        assert [(e.student_id, e.marks) for e in document.marks] == [(aryan, 20)]

    def test_lookup_failure_is_reported(self, db, school, monkeypatch):
        def unavailable(*args, **kwargs):
            raise SQLAlchemyError("connection lost")

        monkeypatch.setattr(db, "get", unavailable)
        result = save(db, school, {"Aryan Patil": 20})

        assert not result.success
        assert result.message == "An error occurred while saving marks."


class TestBatchSave:
    def test_all_exams_saved(self, db, school):
        aryan = school.students["Aryan Patil"].id
        result = MarksService(db).save_marks_batch(
            BatchSaveMarksRequest(
                class_id=school.sixth.id,
                subject_id=school.math.id,
                exams=[
                    ExamMarksInput(exam_id=school.unit_test.id, marks=[MarkInput(student_id=aryan, marks=20)]),
                    ExamMarksInput(exam_id=school.semester.id, marks=[MarkInput(student_id=aryan, marks=80)]),
                ],
            )
        )
        assert result.success
        assert result.message == "All changes have been saved."
        assert document_count(db) == 2

    def test_failed_exam_does_not_undo_others(self, db, school):
        aryan = school.students["Aryan Patil"].id
        result = MarksService(db).save_marks_batch(
            BatchSaveMarksRequest(
                class_id=school.sixth.id,
                subject_id=school.math.id,
                exams=[
                    ExamMarksInput(exam_id=school.unit_test.id, marks=[MarkInput(student_id=aryan, marks=20)]),
                    ExamMarksInput(exam_id=9999, marks=[MarkInput(student_id=aryan, marks=80)]),
                ],
            )
        )
        assert not result.success
        assert result.code == "PARTIAL_FAILURE"
        assert result.details["failed_exam_ids"] == [9999]
        assert result.details["saved_exam_ids"] == [school.unit_test.id]
        assert stored_marks(db, school) == {"Aryan Patil": 20}


class TestDeleteMark:
    def test_removes_one_entry(self, db, school):
        save(db, school, {"Aryan Patil": 20, "Neha Rane": 12})
        result = MarksService(db).delete_mark(
            school.sixth.id, school.math.id, school.unit_test.id, school.students["Aryan Patil"].id
        )

        assert result.success
        assert result.details == {"removed": True, "document_deleted": False}
        assert stored_marks(db, school) == {"Neha Rane": 12}

    def test_absent_entry_is_success(self, db, school):
        save(db, school, {"Neha Rane": 12})
        result = MarksService(db).delete_mark(
            school.sixth.id, school.math.id, school.unit_test.id, school.students["Aryan Patil"].id
        )

        assert result.success
        assert result.details["removed"] is False
        assert stored_marks(db, school) == {"Neha Rane": 12}

    def test_last_entry_deletes_document(self, db, school):
        save(db, school, {"Neha Rane": 12})
        result = MarksService(db).delete_mark(
            school.sixth.id, school.math.id, school.unit_test.id, school.students["Neha Rane"].id
        )

        assert result.details["document_deleted"] is True
        assert document_count(db) == 0

    def test_missing_document(self, db, school):
        result = MarksService(db).delete_mark(
            school.sixth.id, school.math.id, school.unit_test.id, school.students["Neha Rane"].id
        )
        assert not result.success
        assert result.code == "NOT_FOUND"
        assert result.message == "Marks document not found."


class TestStoredDocuments:
    def add_document(self, db, school, version: int, marks: list) -> MarksDocument:
        document = MarksDocument(
            class_id=school.sixth.id,
            subject_id=school.math.id,
            exam_id=school.unit_test.id,
            exam_name=school.unit_test.name,
            total_marks=25,
            schema_version=version,
            marks=marks,
        )
        db.add(document)
        db.flush()
        return document

    def test_legacy_entries_are_upcast(self, db, school):
        neha = school.students["Neha Rane"].id
        document = self.add_document(
            db, school, 1, [{"studentId": neha, "studentName": "Neha Rane", "marks": 9}]
        )

        entries = read_entries(document)
        assert entries[0].student_id == neha
        assert entries[0].status == MarkStatus.FAIL

    def test_save_rewrites_legacy_document(self, db, school):
        neha = school.students["Neha Rane"].id
        self.add_document(db, school, 1, [{"studentId": neha, "studentName": "Neha Rane", "marks": 9}])

        save(db, school, {"Aryan Patil": 20})

        document = db.execute(select(MarksDocument)).scalar_one()
        assert document.schema_version == CURRENT_SCHEMA_VERSION
        assert stored_marks(db, school) == {"Neha Rane": 9, "Aryan Patil": 20}

    def test_unknown_version_is_rejected(self, db, school):
        document = self.add_document(db, school, 7, [])
        with pytest.raises(StoredDocumentError):
            read_entries(document)

    def test_malformed_entries_are_rejected(self, db, school):
        document = self.add_document(db, school, 2, [{"marks": "lots"}])
        with pytest.raises(StoredDocumentError):
            read_entries(document)

    def test_save_against_corrupt_document_fails_cleanly(self, db, school):
        self.add_document(db, school, 7, [])
        result = save(db, school, {"Aryan Patil": 20})

        assert not result.success
        assert result.code == "INTERNAL_ERROR"
        assert result.message == "An error occurred while saving marks."


class TestMarksForSubject:
    def test_entries_annotated_with_exam(self, db, school):
        save(db, school, {"Aryan Patil": 20}, exam_date=date(2026, 9, 1))
        save(db, school, {"Aryan Patil": 75}, exam=school.semester)

        marks = MarksService(db).get_marks_for_subject(school.sixth.id, school.math.id)
        by_exam = {m.exam_name: (m.marks, m.total_marks) for m in marks}
        assert by_exam == {"Unit Test (25 Marks)": (20, 25), "Semester 1": (75, 100)}


class TestSummary:
    def test_ranked_with_ties_in_name_order(self, db, school):
        save(
            db, school,
            {"Aryan Patil": 50, "Rahul Sharma": 90, "Neha Rane": 90, "Sneha Deshmukh": 10},
            exam=school.semester,
        )
        summary = MarksService(db).get_summary(school.sixth.id, school.math.id, school.semester.id)

        assert [(s.rank, s.name) for s in summary.students] == [
            (1, "Neha Rane"),
            (2, "Rahul Sharma"),
            (3, "Aryan Patil"),
            (4, "Sneha Deshmukh"),
        ]
        assert [s.rank_label for s in summary.students] == ["🏆1.", "🏆2.", "🏆3.", "4.  "]
        assert summary.students[3].status == MarkStatus.FAIL
        assert summary.message.startswith("🏫 Class: 6th Standard  📘 Subject: Math (Semester 1)")
        assert summary.share_url.startswith("https://wa.me/?text=")

    def test_nothing_to_share(self, db, school):
        with pytest.raises(ValidationError):
            MarksService(db).get_summary(school.sixth.id, school.math.id, school.semester.id)

    def test_unknown_class(self, db, school):
        with pytest.raises(NotFoundError):
            MarksService(db).get_summary(9999, school.math.id, school.semester.id)
