"""
Test: mark arithmetic: status, clamping, merging, ranking and sort keys.
"""
from markshare.schemas.marks import MarkEntry, MarkStatus
from markshare.services.grading import (
    calculate_grade,
    clamp_marks,
    class_sort_key,
    decorate_rank,
    derive_status,
    merge_entries,
    name_sort_key,
    rank_students,
    remove_entry,
)


def entry(student_id: int, name: str, marks: int | None) -> MarkEntry:
    return MarkEntry(
        student_id=student_id,
        student_name=name,
        marks=marks,
        status=derive_status(marks, 25),
    )


class TestDeriveStatus:
    def test_exactly_forty_percent_passes(self):
        assert derive_status(10, 25) == MarkStatus.PASS

    def test_below_forty_percent_fails(self):
        assert derive_status(9, 25) == MarkStatus.FAIL

    def test_no_mark_is_pending(self):
        assert derive_status(None, 25) == MarkStatus.PENDING

    def test_zero_fails(self):
        assert derive_status(0, 100) == MarkStatus.FAIL

    def test_full_marks_pass(self):
        assert derive_status(100, 100) == MarkStatus.PASS

    def test_fractional_threshold(self):
        # 40% of 15 is 6
        assert derive_status(6, 15) == MarkStatus.PASS
        assert derive_status(5, 15) == MarkStatus.FAIL

    def test_custom_ratio(self):
        assert derive_status(49, 100, pass_percentage=0.5) == MarkStatus.FAIL
        assert derive_status(50, 100, pass_percentage=0.5) == MarkStatus.PASS


class TestClampMarks:
    def test_over_total_is_clamped(self):
        assert clamp_marks(150, 100) == 100

    def test_within_range_unchanged(self):
        assert clamp_marks(42, 100) == 42

    def test_zero_is_kept(self):
        assert clamp_marks(0, 25) == 0

    def test_negative_is_dropped(self):
        assert clamp_marks(-1, 25) is None

    def test_missing_is_dropped(self):
        assert clamp_marks(None, 25) is None


class TestCalculateGrade:
    def test_top_grade(self):
        assert calculate_grade(95, 100) == "A+"

    def test_boundaries(self):
        assert calculate_grade(40, 100) == "C"
        assert calculate_grade(33, 100) == "D"
        assert calculate_grade(32, 100) == "F"

    def test_zero_total(self):
        assert calculate_grade(0, 0) == "N/A"


class TestMergeEntries:
    def test_new_student_appended(self):
        merged = merge_entries([entry(1, "A", 20)], [entry(2, "B", 15)])
        assert [e.student_id for e in merged] == [1, 2]

    def test_latest_value_wins(self):
        merged = merge_entries([entry(1, "A", 20), entry(2, "B", 15)], [entry(1, "A", 22)])
        assert {e.student_id: e.marks for e in merged} == {1: 22, 2: 15}

    def test_idempotent(self):
        existing = [entry(1, "A", 20), entry(2, "B", 15)]
        incoming = [entry(2, "B", 18), entry(3, "C", 5)]
        once = merge_entries(existing, incoming)
        twice = merge_entries(once, incoming)
        assert once == twice

    def test_disjoint_saves_commute(self):
        first = [entry(1, "A", 20)]
        second = [entry(2, "B", 15)]
        a_then_b = merge_entries(merge_entries([], first), second)
        b_then_a = merge_entries(merge_entries([], second), first)
        key = lambda e: e.student_id  # noqa: E731
        assert sorted(a_then_b, key=key) == sorted(b_then_a, key=key)

    def test_duplicate_in_incoming_last_wins(self):
        merged = merge_entries([], [entry(1, "A", 3), entry(1, "A", 7)])
        assert len(merged) == 1
        assert merged[0].marks == 7


class TestRemoveEntry:
    def test_removes_only_that_student(self):
        remaining = remove_entry([entry(1, "A", 20), entry(2, "B", 15)], 1)
        assert [e.student_id for e in remaining] == [2]

    def test_absent_student_is_noop(self):
        existing = [entry(1, "A", 20)]
        assert remove_entry(existing, 99) == existing


class TestRanking:
    def test_ties_keep_input_order(self):
        ranked = rank_students([("A", 50), ("B", 90), ("C", 90), ("D", 10)])
        assert ranked == [(1, "B", 90), (2, "C", 90), (3, "A", 50), (4, "D", 10)]

    def test_ranks_are_sequential(self):
        ranked = rank_students([("A", 5), ("B", 5), ("C", 5)])
        assert [rank for rank, _, _ in ranked] == [1, 2, 3]

    def test_empty(self):
        assert rank_students([]) == []

    def test_podium_labels(self):
        assert [decorate_rank(r) for r in (1, 2, 3)] == ["🏆1.", "🏆2.", "🏆3."]

    def test_plain_labels_are_padded(self):
        assert decorate_rank(4) == "4.  "
        assert decorate_rank(12) == "12. "


class TestSortKeys:
    def test_class_order(self):
        names = ["10th Standard", "2nd Standard", "Sr. KG", "1st Standard", "Jr. KG", "Library"]
        assert sorted(names, key=class_sort_key) == [
            "Jr. KG",
            "Sr. KG",
            "1st Standard",
            "2nd Standard",
            "10th Standard",
            "Library",
        ]

    def test_name_order_is_case_insensitive(self):
        assert sorted(["bob", "Alice", "alice"], key=name_sort_key) == ["Alice", "alice", "bob"]
