# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Report service for dashboards, list reports and consolidated exports.

This module provides the ReportService class for:
- Dashboard metrics (overall metrics plus catalogue counts)
- Student, class and course reports enriched with metrics
- Rendering the results export as XML, CSV, JSON or PDF
- Serving consolidated exports cached in the content store

A consolidated export is rendered once per (content hash, format) and
stored under consolidated/<hash>.<format>; later requests for the same
import and format return the stored bytes unchanged.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import StorageSettings
from src.domains.importing.errors import ImportNotFoundError
from src.domains.metrics.calculations import summarize_student
from src.domains.metrics.service import MetricsService
from src.domains.reporting.exporters import (
    CONTENT_TYPES,
    render_csv,
    render_json,
    render_pdf,
    render_xml,
)
from src.infrastructure.database.models import (
    IMPORT_STATUS_SUCCESS,
    Class,
    Course,
    Enrollment,
    ImportLog,
    Student,
)
from src.infrastructure.storage import ContentStore
from src.models.reporting import (
    ClassReportRow,
    ConsolidatedFile,
    CourseReportRow,
    DashboardMetrics,
    StudentWithMetrics,
)
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

EXPORT_FORMATS = tuple(CONTENT_TYPES)


class ReportServiceError(Exception):
    """Base exception for report service errors."""

    is_user_error: bool = False


class UnsupportedFormatError(ReportServiceError):
    """Raised when an export format is not one of xml, csv, json, pdf."""

    is_user_error = True

    def __init__(self, export_format: str) -> None:
        self.export_format = export_format
        super().__init__(f"Unsupported export format: {export_format}")


class ReportService:
    """Service for reports and exports.

    Attributes:
        db: Async database session.
        store: Content store holding consolidated exports.
        settings: Storage settings.
        metrics: Metrics service sharing the same session.
    """

    def __init__(
        self,
        db: AsyncSession,
        store: ContentStore,
        settings: StorageSettings | None = None,
    ) -> None:
        """Initialize report service.

        Args:
            db: Async database session.
            store: Content store holding consolidated exports.
            settings: Storage settings. Defaults are used when omitted.
        """
        self.db = db
        self.store = store
        self.settings = settings or StorageSettings()
        self.metrics = MetricsService(db)

    async def get_dashboard(self) -> DashboardMetrics:
        """Overall metrics plus total courses, classes and successful imports."""
        overall = await self.metrics.overall_metrics()

        total_courses = await self._count(select(func.count()).select_from(Course))
        total_classes = await self._count(select(func.count()).select_from(Class))
        total_imports = await self._count(
            select(func.count())
            .select_from(ImportLog)
            .where(ImportLog.status == IMPORT_STATUS_SUCCESS)
        )

        return DashboardMetrics(
            **overall.model_dump(),
            total_courses=total_courses,
            total_classes=total_classes,
            total_imports=total_imports,
        )

    async def get_students_report(
        self,
        course_code: str | None = None,
    ) -> list[StudentWithMetrics]:
        """Students ordered by name, each with metrics.

        Args:
            course_code: Only students enrolled in a class of this course.

        Returns:
            Students with metrics.
        """
        query = select(Student).order_by(Student.name, Student.id)
        if course_code:
            enrolled = (
                select(Enrollment.student_id)
                .join(Class, Enrollment.class_id == Class.id)
                .join(Course, Class.course_id == Course.id)
                .where(Course.code == course_code)
            )
            query = query.where(Student.id.in_(enrolled))

        result = await self.db.execute(query)
        students = result.scalars().all()

        metrics_by_student = await self.metrics.all_student_metrics()
        no_grades = summarize_student([])

        rows = []
        for student in students:
            metrics = metrics_by_student.get(student.id, no_grades)
            rows.append(
                StudentWithMetrics(
                    id=student.id,
                    ra=student.ra,
                    name=student.name,
                    **metrics.model_dump(),
                )
            )
        return rows

    async def get_classes_report(
        self,
        course_code: str | None = None,
        semester: str | None = None,
    ) -> list[ClassReportRow]:
        """Classes ordered by course code then semester (newest first).

        Args:
            course_code: Only classes of this course.
            semester: Only classes of this semester.

        Returns:
            Class rows with grade statistics.
        """
        query = (
            select(Class, Course)
            .join(Course, Class.course_id == Course.id)
            .order_by(Course.code, Class.semester.desc(), Class.id)
        )
        if course_code:
            query = query.where(Course.code == course_code)
        if semester:
            query = query.where(Class.semester == semester)

        result = await self.db.execute(query)

        rows = []
        for class_, course in result.all():
            stats = await self.metrics.class_metrics(class_.id)
            rows.append(
                ClassReportRow(
                    id=class_.id,
                    class_id=class_.class_id,
                    course_code=course.code,
                    course_name=course.name,
                    semester=class_.semester,
                    **stats.model_dump(),
                )
            )
        return rows

    async def get_courses_report(self) -> list[CourseReportRow]:
        """Courses ordered by code, each with pooled grade statistics."""
        result = await self.db.execute(select(Course).order_by(Course.code))
        courses = result.scalars().all()

        rows = []
        for course in courses:
            stats = await self.metrics.course_metrics(course.code)
            rows.append(
                CourseReportRow(
                    id=course.id,
                    code=course.code,
                    name=course.name,
                    workload=course.workload,
                    **stats.model_dump(),
                )
            )
        return rows

    async def export(self, export_format: str) -> bytes:
        """Render the results export from the current data.

        Args:
            export_format: One of xml, csv, json, pdf.

        Returns:
            Rendered file bytes.

        Raises:
            UnsupportedFormatError: If the format is unknown.
        """
        self._check_format(export_format)

        students = await self.get_students_report()
        generated_at = utc_now()

        if export_format == "xml":
            return render_xml(students)
        if export_format == "csv":
            return render_csv(students)
        if export_format == "json":
            return render_json(students, generated_at)

        dashboard = await self.get_dashboard()
        courses = await self.get_courses_report()
        return render_pdf(dashboard, students, courses, generated_at)

    async def get_consolidated_file(
        self,
        import_id: int,
        export_format: str,
    ) -> ConsolidatedFile:
        """Get the consolidated export of an import, rendering it on first use.

        Args:
            import_id: Audit row id of the import.
            export_format: One of xml, csv, json, pdf.

        Returns:
            The export with content type and download name.

        Raises:
            UnsupportedFormatError: If the format is unknown.
            ImportNotFoundError: If the import does not exist.
        """
        self._check_format(export_format)

        import_log = await self.db.get(ImportLog, import_id)
        if import_log is None:
            raise ImportNotFoundError(f"Import {import_id} not found")

        name = self.consolidated_name(import_log.file_hash, export_format)
        file_name = f"consolidado.{export_format}"
        content_type = CONTENT_TYPES[export_format]

        if await self.store.exists(name):
            logger.debug("Serving cached consolidated export: %s", name)
            return ConsolidatedFile(
                content=await self.store.get(name),
                content_type=content_type,
                file_name=file_name,
                cached=True,
            )

        content = await self.export(export_format)
        await self.store.put(name, content)

        logger.info(
            "Consolidated export generated: import=%d, format=%s, bytes=%d",
            import_id,
            export_format,
            len(content),
        )

        return ConsolidatedFile(
            content=content,
            content_type=content_type,
            file_name=file_name,
        )

    def consolidated_name(self, file_hash: str, export_format: str) -> str:
        """Content store name of a consolidated export."""
        return f"{self.settings.consolidated_dir}/{file_hash}.{export_format}"

    @staticmethod
    def _check_format(export_format: str) -> None:
        if export_format not in EXPORT_FORMATS:
            raise UnsupportedFormatError(export_format)

    async def _count(self, query) -> int:
        result = await self.db.execute(query)
        return result.scalar_one()
