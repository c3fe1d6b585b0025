# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Metrics service for student, class, course and system-wide performance.

Metrics are recomputed from the stored enrollments on every call; nothing
is cached, so there is nothing to invalidate when an import upserts
courses, classes or grades. Readers take no locks and see whichever
committed snapshot the database gives them.

Usage:
    from src.domains.metrics import MetricsService

    service = MetricsService(db=db_session)
    student = await service.student_metrics(student_id=42)
    course = await service.course_metrics("MAT101")
"""

from __future__ import annotations

import logging
from collections import defaultdict

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.metrics.calculations import (
    DisciplineEntry,
    approval_rate,
    describe_grades,
    round2,
    summarize_student,
    weighted_gpa,
)
from src.infrastructure.database.models import Class, Course, Enrollment, Student
from src.models.metrics import GradeStatistics, OverallMetrics, StudentMetrics

logger = logging.getLogger(__name__)


class MetricsService:
    """Read-only service computing performance metrics on demand.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize metrics service.

        Args:
            db: Async database session.
        """
        self.db = db

    async def student_metrics(self, student_id: int) -> StudentMetrics:
        """Weighted GPA, per-discipline status and overall status of a student.

        Args:
            student_id: Student surrogate id.

        Returns:
            StudentMetrics; gpa 0 and status N/A when the student has no grades.
        """
        query = (
            self._discipline_query()
            .where(Enrollment.student_id == student_id)
            .order_by(Enrollment.id)
        )
        result = await self.db.execute(query)
        entries = [self._to_entry(row) for row in result.all()]

        return summarize_student(entries)

    async def all_student_metrics(self) -> dict[int, StudentMetrics]:
        """Metrics of every student that has at least one enrollment.

        Returns:
            Map of student surrogate id to StudentMetrics.
        """
        query = self._discipline_query().add_columns(Enrollment.student_id).order_by(Enrollment.id)
        result = await self.db.execute(query)

        entries: dict[int, list[DisciplineEntry]] = defaultdict(list)
        for row in result.all():
            entries[row.student_id].append(self._to_entry(row))

        return {student_id: summarize_student(items) for student_id, items in entries.items()}

    async def class_metrics(self, class_id: int) -> GradeStatistics:
        """Grade statistics of one class.

        Args:
            class_id: Class surrogate id.

        Returns:
            GradeStatistics; all zeros for a class without grades.
        """
        query = select(Enrollment.grade).where(Enrollment.class_id == class_id)
        result = await self.db.execute(query)
        grades = [float(grade) for grade in result.scalars().all()]

        return describe_grades(grades)

    async def course_metrics(self, course_code: str) -> GradeStatistics:
        """Grade statistics pooled across every class of a course.

        Args:
            course_code: Course natural key.

        Returns:
            GradeStatistics; all zeros when the course is unknown or has no grades.
        """
        query = (
            select(Enrollment.grade)
            .join(Class, Enrollment.class_id == Class.id)
            .join(Course, Class.course_id == Course.id)
            .where(Course.code == course_code)
        )
        result = await self.db.execute(query)
        grades = [float(grade) for grade in result.scalars().all()]

        return describe_grades(grades)

    async def overall_metrics(self) -> OverallMetrics:
        """System-wide student count, mean GPA and approval rate.

        The mean GPA only includes students whose GPA is positive, which
        leaves out students whose enrollments all carry zero workload.
        The approval rate counts individual grades, not students.

        Returns:
            OverallMetrics; all zeros when no grade is stored.
        """
        count_result = await self.db.execute(select(func.count()).select_from(Student))
        total_students = count_result.scalar_one()

        query = (
            select(Enrollment.student_id, Enrollment.grade, Course.workload)
            .join(Class, Enrollment.class_id == Class.id)
            .join(Course, Class.course_id == Course.id)
        )
        result = await self.db.execute(query)
        rows = result.all()

        if not rows:
            return OverallMetrics()

        pairs_by_student: dict[int, list[tuple[float, int]]] = defaultdict(list)
        grades: list[float] = []
        for row in rows:
            grade = float(row.grade)
            grades.append(grade)
            pairs_by_student[row.student_id].append((grade, row.workload))

        gpas = [gpa for gpa in map(weighted_gpa, pairs_by_student.values()) if gpa > 0]
        overall_gpa = sum(gpas) / len(gpas) if gpas else 0.0

        return OverallMetrics(
            total_students=total_students,
            overall_gpa=round2(overall_gpa),
            overall_approval_rate=round2(approval_rate(grades)),
        )

    async def refresh(self) -> None:
        """Hook called after every successful import.

        Metrics are computed on read, so there is nothing to precompute.
        """
        logger.debug("Metrics refresh requested; metrics are computed on demand")

    @staticmethod
    def _discipline_query():
        return (
            select(
                Enrollment.grade,
                Course.workload,
                Course.code,
                Course.name,
                Class.semester,
            )
            .join(Class, Enrollment.class_id == Class.id)
            .join(Course, Class.course_id == Course.id)
        )

    @staticmethod
    def _to_entry(row) -> DisciplineEntry:
        return DisciplineEntry(
            grade=float(row.grade),
            workload=row.workload,
            course_code=row.code,
            course_name=row.name,
            semester=row.semester,
        )
