# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pure metric calculations.

All functions here work on plain numbers and never touch the database.
Intermediate values keep full precision; round2 is applied only when a
statistic is placed into a returned model.

Pass rule: a grade passes when grade >= APPROVAL_THRESHOLD, compared on the
stored value without rounding (6.0 passes, 5.99 fails).
"""

import math
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from src.models.metrics import DisciplineResult, GradeStatistics, StudentMetrics

APPROVAL_THRESHOLD = 6.0

STATUS_APPROVED = "Approved"
STATUS_FAILED = "Failed"
STATUS_NOT_AVAILABLE = "N/A"

_CENTS = Decimal("0.01")


class DisciplineEntry(NamedTuple):
    """One enrollment with the course data needed for student metrics."""

    grade: float
    workload: int
    course_code: str
    course_name: str
    semester: str


def round2(value: float) -> float:
    """Round half-up to two decimals on the exact binary value.

    Args:
        value: Number to round.

    Returns:
        Rounded float.
    """
    return float(Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP))


def is_approved(grade: float) -> bool:
    """Check a single grade against the pass threshold."""
    return grade >= APPROVAL_THRESHOLD


def discipline_status(grade: float) -> str:
    """Status of a single discipline."""
    return STATUS_APPROVED if is_approved(grade) else STATUS_FAILED


def weighted_gpa(pairs: Iterable[tuple[float, int]]) -> float:
    """Workload-weighted average grade.

    Args:
        pairs: (grade, workload) pairs.

    Returns:
        Sum(grade * workload) / Sum(workload), or 0 when the total workload is 0.
    """
    total_weighted = 0.0
    total_workload = 0
    for grade, workload in pairs:
        total_weighted += grade * workload
        total_workload += workload

    if total_workload == 0:
        return 0.0
    return total_weighted / total_workload


def overall_status(gpa: float, statuses: Iterable[str]) -> str:
    """Overall status: approved only with GPA >= 6 and no failed discipline."""
    has_failed = any(status == STATUS_FAILED for status in statuses)
    if is_approved(gpa) and not has_failed:
        return STATUS_APPROVED
    return STATUS_FAILED


def summarize_student(entries: Sequence[DisciplineEntry]) -> StudentMetrics:
    """Build a student's metrics from their enrollments.

    Args:
        entries: The student's enrollments.

    Returns:
        StudentMetrics; gpa 0 and status N/A when there are no enrollments.
    """
    if not entries:
        return StudentMetrics(gpa=0.0, overall_status=STATUS_NOT_AVAILABLE, disciplines=[])

    disciplines = [
        DisciplineResult(
            course_code=entry.course_code,
            course_name=entry.course_name,
            grade=entry.grade,
            status=discipline_status(entry.grade),
            semester=entry.semester,
            workload=entry.workload,
        )
        for entry in entries
    ]
    gpa = weighted_gpa((entry.grade, entry.workload) for entry in entries)

    return StudentMetrics(
        gpa=round2(gpa),
        overall_status=overall_status(gpa, (d.status for d in disciplines)),
        disciplines=disciplines,
    )


def describe_grades(grades: Sequence[float]) -> GradeStatistics:
    """Mean, population standard deviation and approval rate.

    Args:
        grades: Grades to describe.

    Returns:
        GradeStatistics; all zeros for an empty sequence.
    """
    count = len(grades)
    if count == 0:
        return GradeStatistics()

    average = sum(grades) / count
    variance = sum((grade - average) ** 2 for grade in grades) / count

    return GradeStatistics(
        average=round2(average),
        standard_deviation=round2(math.sqrt(variance)),
        approval_rate=round2(approval_rate(grades)),
        total_students=count,
    )


def approval_rate(grades: Sequence[float]) -> float:
    """Unrounded percentage of passing grades; 0 for no grades."""
    if not grades:
        return 0.0
    return sum(1 for grade in grades if is_approved(grade)) / len(grades) * 100
