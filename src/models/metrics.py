# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Metrics engine result models.

Every numeric statistic is already rounded to two decimals when it lands
in one of these models.
"""

from pydantic import BaseModel, Field


class DisciplineResult(BaseModel):
    """A student's result in one class."""

    course_code: str = Field(description="Course code")
    course_name: str = Field(description="Course name")
    grade: float = Field(description="Grade 0-10")
    status: str = Field(description="Approved or Failed")
    semester: str = Field(description="Semester label of the class")
    workload: int = Field(description="Course workload in hours")


class StudentMetrics(BaseModel):
    """Weighted GPA and pass/fail status of one student."""

    gpa: float = Field(default=0.0, description="Workload-weighted average grade")
    overall_status: str = Field(default="N/A", description="Approved, Failed or N/A")
    disciplines: list[DisciplineResult] = Field(default_factory=list)


class GradeStatistics(BaseModel):
    """Descriptive statistics over a set of grades (class or course)."""

    average: float = Field(default=0.0, description="Mean grade")
    standard_deviation: float = Field(default=0.0, description="Population standard deviation")
    approval_rate: float = Field(default=0.0, description="Percentage of grades >= 6")
    total_students: int = Field(default=0, description="Number of grades considered")


class OverallMetrics(BaseModel):
    """System-wide aggregates."""

    total_students: int = Field(default=0, description="Number of stored students")
    overall_gpa: float = Field(default=0.0, description="Mean of per-student GPA")
    overall_approval_rate: float = Field(default=0.0, description="Percentage of all grades >= 6")
