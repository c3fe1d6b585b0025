# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the programmatic migration runner."""

import pytest
import pytest_asyncio
from sqlalchemy import inspect

from src.domains.importing import ImportService
from src.infrastructure.database.connection import build_engine, build_sessionmaker
from src.infrastructure.database.migrations.runner import (
    MIGRATIONS,
    get_migration_status,
    run_migrations,
)

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def empty_engine(sqlite_settings):
    """Create an in-memory database without any tables."""
    engine = build_engine(sqlite_settings)
    yield engine
    await engine.dispose()


class TestRunMigrations:
    """Tests for run_migrations."""

    @pytest.mark.asyncio
    async def test_creates_schema(self, empty_engine):
        """Test all revisions apply and create the gradebook tables."""
        applied = await run_migrations(empty_engine)

        async with empty_engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

        assert applied == MIGRATIONS
        assert {"courses", "classes", "students", "enrollments", "import_logs"} <= set(tables)

    @pytest.mark.asyncio
    async def test_second_run_is_noop(self, empty_engine):
        """Test applied revisions are not applied again."""
        await run_migrations(empty_engine)

        assert await run_migrations(empty_engine) == []

        status = await get_migration_status(empty_engine)
        assert status["current_version"] == MIGRATIONS[-1]
        assert status["pending_count"] == 0

    @pytest.mark.asyncio
    async def test_status_before_migrating(self, empty_engine):
        """Test every revision is pending on a new database."""
        status = await get_migration_status(empty_engine)

        assert status["current_version"] is None
        assert status["pending_migrations"] == MIGRATIONS

    @pytest.mark.asyncio
    async def test_import_on_migrated_schema(self, empty_engine, content_store, sample_xml):
        """Test the migrated schema accepts a full import."""
        await run_migrations(empty_engine)
        service = ImportService(build_sessionmaker(empty_engine), content_store)

        result = await service.import_xml(sample_xml, "notas.xml")

        assert result.enrollments_imported == 4
