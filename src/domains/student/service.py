# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student service for the student directory.

This module provides the StudentService class for:
- Searching students by name or RA
- Student detail enriched with metrics
"""

from __future__ import annotations

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.metrics.service import MetricsService
from src.infrastructure.database.models import Student
from src.models.metrics import StudentMetrics
from src.models.reporting import StudentWithMetrics

logger = logging.getLogger(__name__)


class StudentServiceError(Exception):
    """Base exception for student service errors."""

    is_user_error: bool = False


class StudentNotFoundError(StudentServiceError):
    """Raised when student is not found."""

    is_user_error = True


class StudentService:
    """Service for looking up students.

    Attributes:
        db: Async database session.
        metrics: Metrics service sharing the same session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize student service.

        Args:
            db: Async database session.
        """
        self.db = db
        self.metrics = MetricsService(db)

    async def list_students(self, search: str | None = None) -> list[StudentWithMetrics]:
        """List students ordered by name.

        Args:
            search: Case-insensitive substring matched against name or RA.

        Returns:
            Students with metrics.
        """
        query = select(Student).order_by(Student.name, Student.id)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                or_(
                    func.lower(Student.name).like(pattern),
                    func.lower(Student.ra).like(pattern),
                )
            )

        result = await self.db.execute(query)
        students = result.scalars().all()

        return [await self._with_metrics(student) for student in students]

    async def get_student(self, student_id: int) -> StudentWithMetrics:
        """Get a student with metrics.

        Args:
            student_id: Student surrogate id.

        Returns:
            The student with metrics.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        student = await self.db.get(Student, student_id)
        if student is None:
            raise StudentNotFoundError(f"Student not found: {student_id}")

        return await self._with_metrics(student)

    async def get_metrics(self, student_id: int) -> StudentMetrics:
        """Metrics of a student; N/A when the student has no grades."""
        return await self.metrics.student_metrics(student_id)

    async def _with_metrics(self, student: Student) -> StudentWithMetrics:
        metrics = await self.metrics.student_metrics(student.id)
        return StudentWithMetrics(
            id=student.id,
            ra=student.ra,
            name=student.name,
            **metrics.model_dump(),
        )
