"""Pure mark arithmetic: status, clamping, merge-by-student and ranking."""

import re
from collections.abc import Iterable, Sequence
from decimal import Decimal

from markshare.core.config import settings
from markshare.schemas.marks import MarkEntry, MarkStatus

RANK_TROPHY = "🏆"
RANK_LABEL_WIDTH = 4
DECORATED_RANKS = 3


def passing_marks(total_marks: int, pass_percentage: float | None = None) -> Decimal:
    """Lowest score that counts as a pass for an exam of ``total_marks``."""
    ratio = settings.PASS_PERCENTAGE if pass_percentage is None else pass_percentage
    return Decimal(str(total_marks)) * Decimal(str(ratio))


def derive_status(marks: int | None, total_marks: int, pass_percentage: float | None = None) -> MarkStatus:
    """Pass iff marks >= pass ratio of total; Pending when there is no mark."""
    if marks is None:
        return MarkStatus.PENDING
    if Decimal(str(marks)) >= passing_marks(total_marks, pass_percentage):
        return MarkStatus.PASS
    return MarkStatus.FAIL


def clamp_marks(marks: int | None, total_marks: int) -> int | None:
    """Limit a submitted mark to [0, total_marks]. Negative and missing marks become None."""
    if marks is None or marks < 0:
        return None
    return min(marks, total_marks)


def calculate_grade(marks: int, total_marks: int) -> str:
    """Calculate grade based on percentage."""
    if total_marks == 0:
        return "N/A"
    percentage = (Decimal(marks) / Decimal(total_marks)) * 100
    if percentage >= 90:
        return "A+"
    elif percentage >= 80:
        return "A"
    elif percentage >= 70:
        return "B+"
    elif percentage >= 60:
        return "B"
    elif percentage >= 50:
        return "C+"
    elif percentage >= 40:
        return "C"
    elif percentage >= 33:
        return "D"
    else:
        return "F"


def merge_entries(existing: Iterable[MarkEntry], incoming: Iterable[MarkEntry]) -> list[MarkEntry]:
    """
    Fold ``incoming`` over ``existing`` keyed by student id.

    The last entry for a student wins. Students only present in ``existing``
    are kept. Order follows first appearance.
    """
    merged: dict[int, MarkEntry] = {entry.student_id: entry for entry in existing}
    for entry in incoming:
        merged[entry.student_id] = entry
    return list(merged.values())


def remove_entry(existing: Iterable[MarkEntry], student_id: int) -> list[MarkEntry]:
    return [entry for entry in existing if entry.student_id != student_id]


def rank_students(students: Sequence[tuple[str, int]]) -> list[tuple[int, str, int]]:
    """
    Rank (name, marks) pairs by marks descending.

    Ranks are strictly sequential: equal marks keep their input order and get
    consecutive ranks.
    """
    ordered = sorted(students, key=lambda student: student[1], reverse=True)
    return [(position, name, marks) for position, (name, marks) in enumerate(ordered, start=1)]


def decorate_rank(rank: int) -> str:
    """'🏆1.' for the podium, otherwise 'N.' padded for monospaced columns."""
    if rank <= DECORATED_RANKS:
        return f"{RANK_TROPHY}{rank}."
    return f"{rank}.".ljust(RANK_LABEL_WIDTH)


_LEADING_NUMBER = re.compile(r"^(\d+)")


def class_sort_key(name: str | None) -> tuple:
    """Order classes Jr. KG, Sr. KG, 1st, 2nd, ... 10th, then anything else by name."""
    if not name:
        return (4, 0, "")
    lowered = name.lower()
    if lowered.startswith("jr"):
        return (0, 0, lowered)
    if lowered.startswith("sr"):
        return (1, 0, lowered)
    match = _LEADING_NUMBER.match(name.split(" ")[0])
    if match:
        return (2, int(match.group(1)), lowered)
    return (3, 0, lowered)


def name_sort_key(name: str) -> tuple[str, str]:
    """Case-insensitive ordering with a case-sensitive tiebreak."""
    return (name.casefold(), name)
