"""Marks service: merge-by-student saves, point deletes and ranked summaries."""

import logging
from collections.abc import Iterable

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from markshare.core.exceptions import NotFoundError, StoredDocumentError, ValidationError
from markshare.models.base import utc_now
from markshare.models.exam import Exam
from markshare.models.marks import CURRENT_SCHEMA_VERSION, MarksDocument
from markshare.models.school_class import SchoolClass
from markshare.models.student import Student
from markshare.models.subject import Subject
from markshare.schemas.common import OperationResult
from markshare.schemas.marks import (
    BatchSaveMarksRequest,
    LegacyMarkEntry,
    MarkEntry,
    MarkInput,
    MarksDocumentResponse,
    MarksSummaryResponse,
    MarkWithExam,
    RankedStudent,
    SaveMarksRequest,
)
from markshare.services.formatting import format_marks_summary, whatsapp_share_url
from markshare.services.grading import (
    clamp_marks,
    decorate_rank,
    derive_status,
    merge_entries,
    name_sort_key,
    rank_students,
    remove_entry,
)

logger = logging.getLogger(__name__)


# ==========================================
# Stored document boundary
# ==========================================

def read_entries(document: MarksDocument) -> list[MarkEntry]:
    """
    Validate and return a document's entries, upcasting older schema versions.

    Raises StoredDocumentError for unknown versions or malformed entries.
    """
    raw = document.marks if document.marks is not None else []
    if not isinstance(raw, list):
        raise StoredDocumentError(document.id, "marks is not a list")

    try:
        if document.schema_version == 1:
            legacy = [LegacyMarkEntry.model_validate(item) for item in raw]
            return [
                MarkEntry(
                    student_id=entry.studentId,
                    student_name=entry.studentName,
                    marks=entry.marks,
                    status=derive_status(entry.marks, document.total_marks),
                )
                for entry in legacy
            ]
        if document.schema_version == CURRENT_SCHEMA_VERSION:
            return [MarkEntry.model_validate(item) for item in raw]
    except SchemaValidationError as e:
        raise StoredDocumentError(document.id, f"malformed entry ({e.error_count()} errors)")

    raise StoredDocumentError(document.id, f"unknown schema version {document.schema_version}")


def write_entries(document: MarksDocument, entries: Iterable[MarkEntry]) -> None:
    """Replace a document's entries and stamp it with the current schema version."""
    document.marks = [entry.model_dump(mode="json") for entry in entries]
    document.schema_version = CURRENT_SCHEMA_VERSION


class MarksService:
    """Marks document management service."""

    def __init__(self, db: Session):
        self.db = db

    def _lock_document(self, class_id: int, subject_id: int, exam_id: int) -> MarksDocument | None:
        """Re-read a document under a row lock held until the transaction ends."""
        result = self.db.execute(
            select(MarksDocument)
            .where(
                MarksDocument.class_id == class_id,
                MarksDocument.subject_id == subject_id,
                MarksDocument.exam_id == exam_id,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    def _get_document(self, class_id: int, subject_id: int, exam_id: int) -> MarksDocument | None:
        result = self.db.execute(
            select(MarksDocument).where(
                MarksDocument.class_id == class_id,
                MarksDocument.subject_id == subject_id,
                MarksDocument.exam_id == exam_id,
            )
        )
        return result.scalar_one_or_none()

    def _student_names(self, student_ids: set[int]) -> dict[int, str]:
        if not student_ids:
            return {}
        rows = self.db.execute(
            select(Student.id, Student.name).where(Student.id.in_(student_ids))
        ).all()
        return dict(rows)

    def _prepare_entries(self, inputs: list[MarkInput], exam: Exam) -> tuple[list[MarkEntry], list[int]]:
        """Drop empty/negative marks, clamp to the exam total and derive status."""
        submitted = [item for item in inputs if clamp_marks(item.marks, exam.total_marks) is not None]
        names = self._student_names({item.student_id for item in submitted})

        entries: list[MarkEntry] = []
        unknown: list[int] = []
        for item in submitted:
            name = item.student_name or names.get(item.student_id)
            if not name:
                unknown.append(item.student_id)
                continue
            value = clamp_marks(item.marks, exam.total_marks)
            if value != item.marks:
                logger.warning(
                    f"Clamped mark {item.marks} to {value} for student {item.student_id} "
                    f"in exam {exam.id} (total {exam.total_marks})"
                )
            entries.append(
                MarkEntry(
                    student_id=item.student_id,
                    student_name=name,
                    marks=value,
                    status=derive_status(value, exam.total_marks),
                )
            )
        return entries, unknown

    def _create_document(self, request: SaveMarksRequest, exam: Exam, entries: list[MarkEntry]) -> MarksDocument | None:
        """Insert a new document. Returns None when a concurrent save created it first."""
        try:
            with self.db.begin_nested():
                document = MarksDocument(
                    class_id=request.class_id,
                    subject_id=request.subject_id,
                    exam_id=exam.id,
                    exam_name=exam.name,
                    exam_date=request.exam_date or exam.exam_date,
                    total_marks=exam.total_marks,
                    last_updated=utc_now(),
                )
                write_entries(document, entries)
                self.db.add(document)
                self.db.flush()
            return document
        except IntegrityError:
            logger.info(
                f"Marks document for class {request.class_id}, subject {request.subject_id}, "
                f"exam {exam.id} was created concurrently; merging instead"
            )
            return None

    def _merge(self, request: SaveMarksRequest, exam: Exam, entries: list[MarkEntry]) -> tuple[MarksDocument, bool]:
        document = self._lock_document(request.class_id, request.subject_id, exam.id)
        if document is None:
            created = self._create_document(request, exam, entries)
            if created is not None:
                return created, True
            document = self._lock_document(request.class_id, request.subject_id, exam.id)
            if document is None:
                raise RuntimeError("Marks document vanished after a concurrent insert")

        write_entries(document, merge_entries(read_entries(document), entries))
        document.exam_name = exam.name
        document.total_marks = exam.total_marks
        if request.exam_date is not None:
            document.exam_date = request.exam_date
        document.last_updated = utc_now()
        self.db.flush()
        return document, False

    def save_marks(self, request: SaveMarksRequest) -> OperationResult:
        """
        Merge submitted marks into the (class, subject, exam) document.

        Per student the latest value wins; other students' entries are kept.
        Never raises: failures come back as an unsuccessful OperationResult.
        """
        if not (request.class_id and request.subject_id and request.exam_id):
            return OperationResult.fail(
                "Class, subject, and exam must be selected.",
                code="VALIDATION_ERROR",
            )

        try:
            exam = self.db.get(Exam, request.exam_id)
            if exam is None:
                return OperationResult.fail("Selected exam does not exist.", code="NOT_FOUND")
            if self.db.get(SchoolClass, request.class_id) is None:
                return OperationResult.fail("Selected class does not exist.", code="NOT_FOUND")
            if self.db.get(Subject, request.subject_id) is None:
                return OperationResult.fail("Selected subject does not exist.", code="NOT_FOUND")

            entries, unknown = self._prepare_entries(request.marks, exam)
            if unknown:
                return OperationResult.fail(
                    "Marks were submitted for unknown students.",
                    code="VALIDATION_ERROR",
                    student_ids=unknown,
                )
            # One entry per student even when the request repeats a student
            entries = merge_entries([], entries)
            if not entries:
                return OperationResult.ok("No marks data provided.", saved=0)

            with self.db.begin_nested():
                document, created = self._merge(request, exam, entries)
        except Exception:
            logger.exception(
                f"Error saving marks for class {request.class_id}, subject {request.subject_id}, "
                f"exam {request.exam_id}"
            )
            return OperationResult.fail("An error occurred while saving marks.")

        logger.info(
            f"Saved {len(entries)} marks to document {document.id} "
            f"({'created' if created else 'merged'})"
        )
        return OperationResult.ok(
            "Marks have been saved successfully!",
            document_id=document.id,
            saved=len(entries),
            created=created,
        )

    def save_marks_batch(self, request: BatchSaveMarksRequest) -> OperationResult:
        """
        Save edits for several exams of one (class, subject).

        Each exam is merged on its own: a failure leaves the other exams saved.
        """
        results: dict[int, OperationResult] = {}
        for exam_marks in request.exams:
            results[exam_marks.exam_id] = self.save_marks(
                SaveMarksRequest(
                    class_id=request.class_id,
                    subject_id=request.subject_id,
                    exam_id=exam_marks.exam_id,
                    exam_date=exam_marks.exam_date,
                    marks=exam_marks.marks,
                )
            )

        failed = [exam_id for exam_id, result in results.items() if not result.success]
        if failed:
            logger.warning(f"Batch marks save failed for exams {failed}")
            return OperationResult.fail(
                "Some marks failed to save.",
                code="PARTIAL_FAILURE",
                failed_exam_ids=failed,
                saved_exam_ids=[exam_id for exam_id in results if exam_id not in failed],
            )
        return OperationResult.ok(
            "All changes have been saved.",
            saved_exam_ids=list(results),
        )

    def delete_mark(self, class_id: int, subject_id: int, exam_id: int, student_id: int) -> OperationResult:
        """Remove one student's entry. An already-absent entry is not an error."""
        try:
            with self.db.begin_nested():
                document = self._lock_document(class_id, subject_id, exam_id)
                if document is None:
                    return OperationResult.fail("Marks document not found.", code="NOT_FOUND")

                entries = read_entries(document)
                remaining = remove_entry(entries, student_id)
                if len(remaining) == len(entries):
                    return OperationResult.ok("Mark deleted successfully.", removed=False)

                document_deleted = not remaining
                if document_deleted:
                    self.db.delete(document)
                else:
                    write_entries(document, remaining)
                    document.last_updated = utc_now()
                self.db.flush()
        except Exception:
            logger.exception(
                f"Error deleting mark for student {student_id} "
                f"(class {class_id}, subject {subject_id}, exam {exam_id})"
            )
            return OperationResult.fail("Failed to delete mark.")

        return OperationResult.ok(
            "Mark deleted successfully.",
            removed=True,
            document_deleted=document_deleted,
        )

    def remove_student(self, student_id: int) -> int:
        """Strip a student from every document. Returns the number of documents touched."""
        documents = self.db.execute(
            select(MarksDocument).with_for_update()
        ).scalars().all()

        touched = 0
        for document in documents:
            entries = read_entries(document)
            remaining = remove_entry(entries, student_id)
            if len(remaining) == len(entries):
                continue
            touched += 1
            if remaining:
                write_entries(document, remaining)
                document.last_updated = utc_now()
            else:
                self.db.delete(document)
        self.db.flush()
        return touched

    # ==========================================
    # Views
    # ==========================================

    def get_document(self, class_id: int, subject_id: int, exam_id: int) -> MarksDocumentResponse | None:
        document = self._get_document(class_id, subject_id, exam_id)
        if document is None:
            return None
        return MarksDocumentResponse(
            class_id=document.class_id,
            subject_id=document.subject_id,
            exam_id=document.exam_id,
            exam_name=document.exam_name,
            exam_date=document.exam_date,
            total_marks=document.total_marks,
            marks=read_entries(document),
            last_updated=document.last_updated,
        )

    def get_marks_for_subject(self, class_id: int, subject_id: int) -> list[MarkWithExam]:
        """Every entry for (class, subject) across exams, annotated with its exam."""
        documents = self.db.execute(
            select(MarksDocument)
            .where(
                MarksDocument.class_id == class_id,
                MarksDocument.subject_id == subject_id,
            )
            .order_by(MarksDocument.exam_name)
        ).scalars().all()

        return [
            MarkWithExam(
                **entry.model_dump(),
                exam_id=document.exam_id,
                exam_name=document.exam_name,
                exam_date=document.exam_date,
                total_marks=document.total_marks,
            )
            for document in documents
            for entry in read_entries(document)
        ]

    def get_summary(self, class_id: int, subject_id: int, exam_id: int) -> MarksSummaryResponse:
        """Ranked marks for one (class, subject, exam) with WhatsApp-ready text."""
        school_class = self.db.get(SchoolClass, class_id)
        if school_class is None:
            raise NotFoundError("Class", str(class_id))
        subject = self.db.get(Subject, subject_id)
        if subject is None:
            raise NotFoundError("Subject", str(subject_id))
        exam = self.db.get(Exam, exam_id)
        if exam is None:
            raise NotFoundError("Exam", str(exam_id))

        document = self._get_document(class_id, subject_id, exam_id)
        entries = read_entries(document) if document else []
        scored = sorted(
            (entry for entry in entries if entry.marks is not None),
            key=lambda entry: name_sort_key(entry.student_name),
        )
        if not scored:
            raise ValidationError("Please enter marks for at least one student to share.")

        ranked = [
            RankedStudent(
                rank=rank,
                rank_label=decorate_rank(rank),
                name=name,
                marks=marks,
                status=derive_status(marks, exam.total_marks),
            )
            for rank, name, marks in rank_students([(e.student_name, e.marks) for e in scored])
        ]
        message = format_marks_summary(
            school_class.name, subject.name, exam.name, exam.total_marks, ranked
        )
        return MarksSummaryResponse(
            class_name=school_class.name,
            subject_name=subject.name,
            exam_name=exam.name,
            total_marks=exam.total_marks,
            students=ranked,
            message=message,
            share_url=whatsapp_share_url(message),
        )
