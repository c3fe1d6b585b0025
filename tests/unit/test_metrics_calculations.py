# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for pure metric calculations."""

import pytest

from src.domains.metrics.calculations import (
    STATUS_APPROVED,
    STATUS_FAILED,
    STATUS_NOT_AVAILABLE,
    DisciplineEntry,
    approval_rate,
    describe_grades,
    discipline_status,
    overall_status,
    round2,
    summarize_student,
    weighted_gpa,
)
from src.models.metrics import GradeStatistics


def _entry(grade: float, workload: int, code: str = "MAT101") -> DisciplineEntry:
    return DisciplineEntry(
        grade=grade,
        workload=workload,
        course_code=code,
        course_name=f"Course {code}",
        semester="2023-1",
    )


class TestRound2:
    """Tests for half-up rounding."""

    @pytest.mark.parametrize(
        "value,expected",
        [(7.428571, 7.43), (0.125, 0.13), (66.666666, 66.67), (6.0, 6.0), (2.675, 2.67), (1.005, 1.0)],
    )
    def test_rounds_exact_binary_value_half_up(self, value, expected):
        """Test rounding follows the exact stored binary value."""
        assert round2(value) == expected


class TestDisciplineStatus:
    """Tests for the pass threshold."""

    def test_threshold_is_inclusive(self):
        """Test 6.0 passes and 5.99 fails without rounding."""
        assert discipline_status(6.0) == STATUS_APPROVED
        assert discipline_status(5.99) == STATUS_FAILED
        assert discipline_status(5.995) == STATUS_FAILED


class TestWeightedGpa:
    """Tests for workload-weighted GPA."""

    def test_weighting(self):
        """Test (8*60 + 7*80) / 140."""
        assert weighted_gpa([(8.0, 60), (7.0, 80)]) == pytest.approx(7.428571, abs=1e-6)

    def test_zero_total_workload(self):
        """Test a zero total workload gives 0 instead of dividing by zero."""
        assert weighted_gpa([(9.0, 0), (7.0, 0)]) == 0.0

    def test_no_pairs(self):
        """Test no enrollments gives 0."""
        assert weighted_gpa([]) == 0.0


class TestOverallStatus:
    """Tests for the overall status rule."""

    def test_approved(self):
        """Test GPA >= 6 with no failed discipline."""
        assert overall_status(7.0, [STATUS_APPROVED, STATUS_APPROVED]) == STATUS_APPROVED

    def test_failed_discipline_overrides_gpa(self):
        """Test a single failed discipline fails the student."""
        assert overall_status(7.29, [STATUS_FAILED, STATUS_APPROVED]) == STATUS_FAILED

    def test_low_gpa(self):
        """Test GPA below 6 fails the student."""
        assert overall_status(5.9, [STATUS_APPROVED]) == STATUS_FAILED


class TestSummarizeStudent:
    """Tests for per-student metrics."""

    def test_weighted_gpa_and_approval(self):
        """Test GPA 7.43 and Approved for 8.0/60h and 7.0/80h."""
        metrics = summarize_student([_entry(8.0, 60, "MAT101"), _entry(7.0, 80, "PROG101")])

        assert metrics.gpa == 7.43
        assert metrics.overall_status == STATUS_APPROVED
        assert [d.course_code for d in metrics.disciplines] == ["MAT101", "PROG101"]
        assert [d.status for d in metrics.disciplines] == [STATUS_APPROVED, STATUS_APPROVED]

    def test_failed_discipline_override(self):
        """Test GPA 7.29 but Failed because one discipline failed."""
        metrics = summarize_student([_entry(5.0, 60, "MAT101"), _entry(9.0, 80, "PROG101")])

        assert metrics.gpa == 7.29
        assert metrics.overall_status == STATUS_FAILED
        assert metrics.disciplines[0].status == STATUS_FAILED

    def test_discipline_fields(self):
        """Test each discipline carries course data, grade and workload."""
        metrics = summarize_student([_entry(6.0, 40, "FIS101")])
        discipline = metrics.disciplines[0]

        assert discipline.course_code == "FIS101"
        assert discipline.course_name == "Course FIS101"
        assert discipline.grade == 6.0
        assert discipline.semester == "2023-1"
        assert discipline.workload == 40

    def test_no_enrollments(self):
        """Test a student without grades has N/A status."""
        metrics = summarize_student([])

        assert metrics.gpa == 0.0
        assert metrics.overall_status == STATUS_NOT_AVAILABLE
        assert metrics.disciplines == []

    def test_zero_workload_fails_on_gpa(self):
        """Test zero-workload enrollments give GPA 0 and Failed."""
        metrics = summarize_student([_entry(9.0, 0)])

        assert metrics.gpa == 0.0
        assert metrics.overall_status == STATUS_FAILED


class TestDescribeGrades:
    """Tests for class and course statistics."""

    def test_statistics(self):
        """Test average, population deviation and approval rate."""
        stats = describe_grades([8.0, 7.0, 5.0])

        assert stats.average == 6.67
        assert stats.approval_rate == 66.67
        assert stats.standard_deviation == 1.25
        assert stats.total_students == 3

    def test_single_grade_has_no_deviation(self):
        """Test a single grade has deviation 0."""
        stats = describe_grades([9.0])

        assert stats.standard_deviation == 0.0
        assert stats.approval_rate == 100.0

    def test_empty(self):
        """Test an empty class gives all zeros."""
        assert describe_grades([]) == GradeStatistics(
            average=0.0,
            standard_deviation=0.0,
            approval_rate=0.0,
            total_students=0,
        )


class TestApprovalRate:
    """Tests for approval_rate."""

    def test_unrounded(self):
        """Test the rate keeps full precision."""
        assert approval_rate([6.0, 5.99, 10.0]) == pytest.approx(200 / 3)

    def test_empty(self):
        """Test no grades gives 0."""
        assert approval_rate([]) == 0.0
