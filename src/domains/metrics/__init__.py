# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Metrics domain package.

This package provides on-demand performance metrics:
- Pure calculations (weighted GPA, pass/fail, descriptive statistics)
- MetricsService queries over the stored enrollments
"""

from src.domains.metrics.calculations import (
    APPROVAL_THRESHOLD,
    STATUS_APPROVED,
    STATUS_FAILED,
    STATUS_NOT_AVAILABLE,
    describe_grades,
    discipline_status,
    overall_status,
    round2,
    summarize_student,
    weighted_gpa,
)
from src.domains.metrics.service import MetricsService

__all__ = [
    "MetricsService",
    "APPROVAL_THRESHOLD",
    "STATUS_APPROVED",
    "STATUS_FAILED",
    "STATUS_NOT_AVAILABLE",
    "describe_grades",
    "discipline_status",
    "overall_status",
    "round2",
    "summarize_student",
    "weighted_gpa",
]
