# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for the gradebook database."""

from src.infrastructure.database.models.academic import Class, Course, Enrollment, Student
from src.infrastructure.database.models.base import Base, TimestampMixin
from src.infrastructure.database.models.import_log import (
    IMPORT_STATUS_FAILURE,
    IMPORT_STATUS_SUCCESS,
    ImportLog,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "Course",
    "Class",
    "Student",
    "Enrollment",
    "ImportLog",
    "IMPORT_STATUS_SUCCESS",
    "IMPORT_STATUS_FAILURE",
]
