"""Consolidated reports and report cards."""

import logging
from collections.abc import Iterable
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from sqlalchemy import select
from sqlalchemy.orm import Session

from markshare.core.config import settings
from markshare.core.exceptions import NotFoundError
from markshare.models.marks import MarksDocument
from markshare.models.student import Student
from markshare.schemas.marks import MarkStatus
from markshare.schemas.report import (
    MISSING_MARK,
    ConsolidatedReport,
    ConsolidatedReportRow,
    ExamMarkDetail,
    ReportCard,
    ShareMessage,
)
from markshare.services.formatting import format_consolidated_report, whatsapp_share_url
from markshare.services.grading import calculate_grade, derive_status, name_sort_key
from markshare.services.marks import read_entries
from markshare.services.school import SchoolService

logger = logging.getLogger(__name__)

UNKNOWN_CLASS = "Unknown Class"
UNKNOWN_SUBJECT = "Unknown Subject"


def aggregate_report(
    documents: Iterable[MarksDocument],
    class_names: dict[int, str],
    subject_names: dict[int, str],
) -> ConsolidatedReport:
    """
    One row per student with at least one recorded mark.

    A student's class comes from the first document they appear in. A later
    document for the same subject overwrites that subject's column, so with
    documents ordered by exam date (undated first), then last update, the
    most recent exam's mark is shown.
    """
    accumulator: dict[int, dict] = {}
    extra_subjects: list[str] = []

    for document in documents:
        class_name = class_names.get(document.class_id, UNKNOWN_CLASS)
        subject_name = subject_names.get(document.subject_id, UNKNOWN_SUBJECT)
        for entry in read_entries(document):
            if entry.marks is None:
                continue
            row = accumulator.setdefault(
                entry.student_id,
                {"name": entry.student_name, "class_name": class_name, "marks": {}},
            )
            row["marks"][subject_name] = entry.marks
            if subject_name not in subject_names.values() and subject_name not in extra_subjects:
                extra_subjects.append(subject_name)

    subjects = sorted(subject_names.values(), key=str.casefold) + extra_subjects
    rows = [
        ConsolidatedReportRow(
            student_id=student_id,
            student_name=data["name"],
            class_name=data["class_name"],
            marks={subject: data["marks"].get(subject, MISSING_MARK) for subject in subjects},
            total=sum(data["marks"].values()),
        )
        for student_id, data in accumulator.items()
    ]
    rows.sort(key=lambda row: name_sort_key(row.student_name))
    return ConsolidatedReport(subjects=subjects, rows=rows)


class ReportService:
    """Report generation service."""

    def __init__(self, db: Session):
        self.db = db
        self.school = SchoolService(db)

    def _all_documents(self) -> list[MarksDocument]:
        stmt = select(MarksDocument).order_by(
            MarksDocument.exam_date.nulls_first(),
            MarksDocument.last_updated,
            MarksDocument.id,
        )
        return list(self.db.execute(stmt).scalars().all())

    def consolidated_report(self) -> ConsolidatedReport:
        """Scan every marks document and join class and subject names."""
        report = aggregate_report(
            self._all_documents(),
            self.school.class_names(),
            self.school.subject_names(),
        )
        logger.debug(f"Consolidated report built with {len(report.rows)} rows")
        return report

    def consolidated_message(self) -> ShareMessage:
        report = self.consolidated_report()
        message = format_consolidated_report(
            settings.SCHOOL_NAME,
            settings.REPORT_TITLE,
            report.subjects,
            report.rows,
        )
        return ShareMessage(message=message, share_url=whatsapp_share_url(message))

    def export_consolidated_report(self) -> bytes:
        """Consolidated report as an .xlsx workbook."""
        report = self.consolidated_report()

        wb = Workbook()
        ws = wb.active
        ws.title = "Report"

        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
        thin_border = Border(
            left=Side(style="thin"),
            right=Side(style="thin"),
            top=Side(style="thin"),
            bottom=Side(style="thin"),
        )

        ws.cell(row=1, column=1, value=settings.SCHOOL_NAME).font = Font(bold=True, size=14)
        ws.cell(row=2, column=1, value=settings.REPORT_TITLE).font = Font(italic=True)

        headers = ["Student Name", "Class", *report.subjects, "Total"]
        for col_idx, header in enumerate(headers, start=1):
            cell = ws.cell(row=4, column=col_idx, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.border = thin_border
            cell.alignment = Alignment(horizontal="center")

        for row_idx, row in enumerate(report.rows, start=5):
            values = [
                row.student_name,
                row.class_name,
                *(row.marks[subject] for subject in report.subjects),
                row.total,
            ]
            for col_idx, value in enumerate(values, start=1):
                cell = ws.cell(row=row_idx, column=col_idx, value=value)
                cell.border = thin_border

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 16
        for col_idx in range(3, len(headers) + 1):
            ws.column_dimensions[get_column_letter(col_idx)].width = 12

        output = BytesIO()
        wb.save(output)
        output.seek(0)
        return output.getvalue()

    def report_card(self, student_id: int) -> ReportCard:
        """Every recorded mark of one student, grouped by subject."""
        student = self.db.get(Student, student_id)
        if not student:
            raise NotFoundError("Student", str(student_id))

        subject_names = self.school.subject_names()
        subjects: dict[str, list[ExamMarkDetail]] = {}
        total_scored = 0
        total_possible = 0

        for document in self._all_documents():
            for entry in read_entries(document):
                if entry.student_id != student_id or entry.marks is None:
                    continue
                subject_name = subject_names.get(document.subject_id, UNKNOWN_SUBJECT)
                subjects.setdefault(subject_name, []).append(
                    ExamMarkDetail(
                        exam_name=document.exam_name,
                        marks=entry.marks,
                        total_marks=document.total_marks,
                        status=derive_status(entry.marks, document.total_marks),
                        grade=calculate_grade(entry.marks, document.total_marks),
                    )
                )
                total_scored += entry.marks
                total_possible += document.total_marks

        ordered = {
            name: sorted(details, key=lambda d: d.exam_name.casefold())
            for name, details in sorted(subjects.items(), key=lambda item: item[0].casefold())
        }
        percentage = round(total_scored * 100 / total_possible, 2) if total_possible else 0.0
        return ReportCard(
            student_id=student.id,
            student_name=student.name,
            class_name=student.school_class.name if student.school_class else UNKNOWN_CLASS,
            subjects=ordered,
            total_scored=total_scored,
            total_possible=total_possible,
            percentage=percentage,
            status=derive_status(total_scored, total_possible) if total_possible else MarkStatus.PENDING,
        )
