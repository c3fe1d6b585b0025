# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Import pipeline request/response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ValidationResult(BaseModel):
    """Outcome of structural XML validation."""

    valid: bool = Field(description="True when no violation was found")
    errors: list[str] = Field(default_factory=list, description="Every violation found")


class ImportResult(BaseModel):
    """Counts returned by a successful import."""

    import_log_id: int = Field(description="Identifier of the audit row")
    students_imported: int = Field(description="Students upserted")
    courses_imported: int = Field(description="Courses upserted")
    classes_imported: int = Field(description="Classes upserted")
    enrollments_imported: int = Field(description="Enrollments upserted")


class ImportLogResponse(BaseModel):
    """Audit row of one import attempt."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str | None = None
    file_name: str
    file_hash: str | None = None
    records_imported: int
    status: str
    error_message: str | None = None
    processing_time: int = Field(description="Elapsed milliseconds")
    created_at: datetime


class OriginalFile(BaseModel):
    """Bytes of an original upload with its display name."""

    content: bytes
    file_name: str
