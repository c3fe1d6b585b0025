# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial gradebook schema.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2025-01-15

This migration creates the courses, classes, students, enrollments and
import_logs tables based on the SQLAlchemy models in
src/infrastructure/database/models/.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    """Create gradebook tables."""
    # ==========================================================================
    # 1. courses table
    # ==========================================================================
    op.create_table(
        "courses",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(50), unique=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("workload", sa.Integer, nullable=False),
        *_timestamps(),
    )

    # ==========================================================================
    # 2. classes table
    # ==========================================================================
    op.create_table(
        "classes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("class_id", sa.String(50), unique=True, nullable=False),
        sa.Column(
            "course_id",
            sa.Integer,
            sa.ForeignKey("courses.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("semester", sa.String(20), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_classes_course_id", "classes", ["course_id"])

    # ==========================================================================
    # 3. students table
    # ==========================================================================
    op.create_table(
        "students",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("ra", sa.String(50), unique=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        *_timestamps(),
    )

    # ==========================================================================
    # 4. enrollments table
    # ==========================================================================
    op.create_table(
        "enrollments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "student_id",
            sa.Integer,
            sa.ForeignKey("students.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "class_id",
            sa.Integer,
            sa.ForeignKey("classes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("grade", sa.Numeric(5, 2), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("student_id", "class_id", name="uq_enrollments_student_class"),
        sa.CheckConstraint("grade >= 0 AND grade <= 10", name="ck_enrollments_grade_range"),
    )
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])
    op.create_index("ix_enrollments_class_id", "enrollments", ["class_id"])

    # ==========================================================================
    # 5. import_logs table
    # ==========================================================================
    op.create_table(
        "import_logs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("file_name", sa.String(500), nullable=False),
        sa.Column("file_hash", sa.String(128), nullable=True),
        sa.Column("records_imported", sa.Integer, nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("processing_time", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "status IN ('success', 'failure')",
            name="valid_import_status",
        ),
    )
    op.create_index("ix_import_logs_user_id", "import_logs", ["user_id"])
    op.create_index("ix_import_logs_file_hash", "import_logs", ["file_hash"])


def downgrade() -> None:
    """Drop gradebook tables."""
    op.drop_table("import_logs")
    op.drop_table("enrollments")
    op.drop_table("students")
    op.drop_table("classes")
    op.drop_table("courses")
