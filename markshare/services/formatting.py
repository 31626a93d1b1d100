"""Fixed-width text for sharing marks over WhatsApp."""

from collections.abc import Sequence
from urllib.parse import quote

from markshare.schemas.marks import RankedStudent
from markshare.schemas.report import MISSING_MARK, ConsolidatedReportRow

WHATSAPP_SHARE_URL = "https://wa.me/?text="
SUMMARY_RULE = "-" * 37


def whatsapp_share_url(message: str) -> str:
    """Deep link that opens WhatsApp with ``message`` pre-filled."""
    return WHATSAPP_SHARE_URL + quote(message, safe="")


def column_widths(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> list[int]:
    """Width of each column: the longest of its header and values."""
    widths = [len(header) for header in headers]
    for row in rows:
        for index, cell in enumerate(row):
            widths[index] = max(widths[index], len(cell))
    return widths


def _bordered_line(cells: Sequence[str], widths: Sequence[int]) -> str:
    return "| " + " | ".join(cell.ljust(width) for cell, width in zip(cells, widths)) + " |"


def _border(widths: Sequence[int]) -> str:
    return "+" + "+".join("-" * (width + 2) for width in widths) + "+"


def render_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> list[str]:
    """Render a '+---+' bordered table with every column padded to its widest cell."""
    widths = column_widths(headers, rows)
    border = _border(widths)
    lines = [border, _bordered_line(headers, widths), border]
    lines.extend(_bordered_line(row, widths) for row in rows)
    lines.append(border)
    return lines


def format_marks_summary(
    class_name: str,
    subject_name: str,
    exam_name: str,
    total_marks: int,
    students: Sequence[RankedStudent],
) -> str:
    """Ranked marks of one class for one subject and exam."""
    headers = ("No.", "Student Name", "Marks", "Status")
    rows = [
        (student.rank_label, student.name, f"{student.marks}/{total_marks}", student.status.value)
        for student in students
    ]
    # Trophy labels render wider than their length, so the rank column is left unpadded
    name_width, marks_width = column_widths(headers[1:3], [row[1:3] for row in rows])

    def line(label: str, name: str, marks: str, status: str) -> str:
        return f"{label.ljust(5)} {name.ljust(name_width)}  {marks.ljust(marks_width)}  {status}".rstrip()

    lines = [
        f"🏫 Class: {class_name}  📘 Subject: {subject_name} ({exam_name})",
        SUMMARY_RULE,
        "👨‍🏫 Marks Summary:",
        "",
        line(*headers),
        SUMMARY_RULE,
    ]
    lines.extend(line(*row) for row in rows)
    lines.append(SUMMARY_RULE)
    lines.append(f"✅ Total: {len(students)} students")
    return "\n".join(lines)


def format_consolidated_report(
    school_name: str,
    report_title: str,
    subjects: Sequence[str],
    rows: Sequence[ConsolidatedReportRow],
) -> str:
    """
    Consolidated report as a monospaced table wrapped in triple backticks.

    Rows are ordered by total descending; equal totals keep their input order.
    """
    ordered = sorted(rows, key=lambda row: row.total, reverse=True)
    headers = ["Student Name", "Class", *subjects, "Total"]
    body = [
        [
            row.student_name,
            row.class_name,
            *(str(row.marks.get(subject, MISSING_MARK)) for subject in subjects),
            str(row.total),
        ]
        for row in ordered
    ]
    lines = ["```", school_name, report_title, *render_table(headers, body), "```"]
    return "\n".join(lines)
