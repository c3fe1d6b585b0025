# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the application lifecycle and session handling."""

import pytest
import pytest_asyncio
from sqlalchemy import func, select, text

from src.application import gradebook_application
from src.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    create_schema,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
)
from src.infrastructure.database.models import Student

pytestmark = pytest.mark.integration


@pytest.fixture
def app_settings(sqlite_settings, storage_settings):
    """Provide in-memory database settings with a temporary content store."""
    return sqlite_settings.model_copy(update={"storage": storage_settings})


@pytest_asyncio.fixture
async def initialized_database(sqlite_settings):
    """Initialize the shared pool with the full schema."""
    await init_database(sqlite_settings)
    await create_schema()

    yield

    await close_database()


async def _student_count() -> int:
    async with get_session() as session:
        result = await session.execute(select(func.count()).select_from(Student))
        return result.scalar_one()


class TestGradebookApplication:
    """Tests for gradebook_application."""

    @pytest.mark.asyncio
    async def test_import_and_report(self, app_settings, sample_xml):
        """Test a started application migrates, imports and reports."""
        async with gradebook_application(app_settings) as app:
            result = await app.importer.import_xml(sample_xml, "notas.xml")

            async with app.session() as session:
                dashboard = await app.reports(session).get_dashboard()
                students = await app.students(session).list_students()

        assert result.students_imported == 2
        assert dashboard.total_students == 2
        assert dashboard.total_imports == 1
        assert [student.ra for student in students] == ["2023001", "2023002"]

    @pytest.mark.asyncio
    async def test_pool_closed_after_block(self, app_settings):
        """Test shutdown releases the shared engine."""
        async with gradebook_application(app_settings):
            assert await check_database_connection() is True

        assert await check_database_connection() is False
        with pytest.raises(DatabaseError, match="not initialized"):
            get_engine()

    @pytest.mark.asyncio
    async def test_pool_closed_on_error(self, app_settings):
        """Test shutdown also runs when the block raises."""
        with pytest.raises(RuntimeError):
            async with gradebook_application(app_settings):
                raise RuntimeError("stop")

        with pytest.raises(DatabaseError):
            get_sessionmaker()


class TestGetSession:
    """Tests for the commit-or-rollback session context."""

    @pytest.mark.asyncio
    async def test_commits_on_success(self, initialized_database):
        """Test changes are committed when the block completes."""
        async with get_session() as session:
            session.add(Student(ra="2023001", name="Ana Souza"))

        assert await _student_count() == 1

    @pytest.mark.asyncio
    async def test_rolls_back_on_error(self, initialized_database):
        """Test changes are discarded and the error propagates."""
        with pytest.raises(ValueError):
            async with get_session() as session:
                session.add(Student(ra="2023001", name="Ana Souza"))
                await session.flush()
                raise ValueError("abort")

        assert await _student_count() == 0

    @pytest.mark.asyncio
    async def test_wraps_database_errors(self, initialized_database):
        """Test SQLAlchemy errors surface as DatabaseError."""
        with pytest.raises(DatabaseError, match="Database operation failed"):
            async with get_session() as session:
                await session.execute(text("SELECT * FROM missing_table"))

    @pytest.mark.asyncio
    async def test_requires_initialization(self):
        """Test sessions are refused before init_database."""
        assert await check_database_connection() is False

        with pytest.raises(DatabaseError, match="not initialized"):
            async with get_session():
                pass
