# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Import audit log model.

One row is written per import attempt regardless of outcome. Rows are
append-only; nothing updates them after insert.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base
from src.utils.datetime import utc_now

IMPORT_STATUS_SUCCESS = "success"
IMPORT_STATUS_FAILURE = "failure"


class ImportLog(Base):
    """Audit record for a single XML import attempt.

    Attributes:
        id: Surrogate key, also the public import identifier.
        user_id: Optional identity of the uploader.
        file_name: Display name of the uploaded file.
        file_hash: Content hash of the uploaded bytes (storage key).
        records_imported: Number of students imported (0 on failure).
        status: "success" or "failure".
        error_message: Failure reason, None on success.
        processing_time: Elapsed milliseconds for the attempt.
        created_at: When the attempt finished.
    """

    __tablename__ = "import_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    file_name: Mapped[str] = mapped_column(String(500), nullable=False)
    file_hash: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    records_imported: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    processing_time: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('success', 'failure')",
            name="valid_import_status",
        ),
    )

    @property
    def succeeded(self) -> bool:
        """Whether the attempt committed its data."""
        return self.status == IMPORT_STATUS_SUCCESS
