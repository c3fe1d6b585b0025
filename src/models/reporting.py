# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Report and export models."""

from pydantic import BaseModel, Field

from src.models.metrics import GradeStatistics, OverallMetrics, StudentMetrics


class DashboardMetrics(OverallMetrics):
    """Overall metrics plus catalogue counts."""

    total_courses: int = Field(default=0)
    total_classes: int = Field(default=0)
    total_imports: int = Field(default=0, description="Successful imports")


class StudentWithMetrics(StudentMetrics):
    """A student row enriched with its metrics."""

    id: int
    ra: str
    name: str


class ClassReportRow(GradeStatistics):
    """Statistics of one class."""

    id: int
    class_id: str
    course_code: str
    course_name: str
    semester: str


class CourseReportRow(GradeStatistics):
    """Statistics of one course pooled across its classes."""

    id: int
    code: str
    name: str
    workload: int


class ConsolidatedFile(BaseModel):
    """A rendered consolidated export."""

    content: bytes
    content_type: str
    file_name: str
    cached: bool = Field(default=False, description="Served from the content store")
