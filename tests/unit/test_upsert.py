# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the upsert primitive."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from src.infrastructure.database import DatabaseError, upsert
from src.infrastructure.database.models import Course


class TestUpsertDialects:
    """Tests for dialect selection."""

    @pytest.mark.asyncio
    async def test_unsupported_dialect(self, mock_db):
        """Test dialects without ON CONFLICT support are rejected."""
        mock_db.get_bind = MagicMock()
        mock_db.get_bind.return_value.dialect.name = "mysql"

        with pytest.raises(DatabaseError, match="mysql"):
            await upsert(
                mock_db,
                Course,
                {"code": "MAT101", "name": "Cálculo", "workload": 60},
                conflict_columns=["code"],
                update_columns=["name", "workload"],
            )

        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_returns_row_id(self, mock_db):
        """Test the surrogate id from RETURNING is passed back."""
        mock_db.get_bind = MagicMock()
        mock_db.get_bind.return_value.dialect.name = "postgresql"
        result = MagicMock()
        result.scalar_one.return_value = 42
        mock_db.execute.return_value = result

        course_id = await upsert(
            mock_db,
            Course,
            {"code": "MAT101", "name": "Cálculo", "workload": 60},
            conflict_columns=["code"],
            update_columns=["name", "workload"],
        )

        assert course_id == 42
        statement = mock_db.execute.call_args.args[0]
        compiled = str(statement.compile(dialect=postgresql.dialect()))
        assert "ON CONFLICT (code) DO UPDATE" in compiled
        assert "RETURNING courses.id" in compiled
