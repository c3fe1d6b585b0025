# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application lifecycle for the gradebook services.

Startup configures logging, opens the database pool, checks that the
database answers, applies pending migrations and wires the services to the
shared sessionmaker and content store. Shutdown closes the pool.

Example:
    async with gradebook_application() as app:
        result = await app.importer.import_xml(content, "notas.xml")

        async with app.session() as session:
            dashboard = await app.reports(session).get_dashboard()
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import Settings, get_settings
from src.domains.importing import ImportService
from src.domains.reporting import ReportService
from src.domains.student import StudentService
from src.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
)
from src.infrastructure.database.migrations.runner import run_migrations
from src.infrastructure.storage import ContentStore
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@dataclass
class GradebookApplication:
    """Running services sharing one database pool and content store.

    Attributes:
        settings: Settings the application was started with.
        store: Content store for uploads and consolidated exports.
        importer: Import pipeline. It opens its own sessions.
    """

    settings: Settings
    store: ContentStore
    importer: ImportService

    def session(self):
        """Open a session that commits on success and rolls back on error."""
        return get_session()

    def reports(self, session: AsyncSession) -> ReportService:
        """Report service bound to a session."""
        return ReportService(session, self.store, self.settings.storage)

    def students(self, session: AsyncSession) -> StudentService:
        """Student directory bound to a session."""
        return StudentService(session)


@asynccontextmanager
async def gradebook_application(
    settings: Settings | None = None,
    migrate: bool = True,
) -> AsyncIterator[GradebookApplication]:
    """Start the services for the duration of an async with block.

    Args:
        settings: Application settings. Defaults to get_settings().
        migrate: Apply pending schema migrations on startup.

    Yields:
        The running application.

    Raises:
        DatabaseError: If the database cannot be reached.
    """
    settings = settings or get_settings()
    setup_logging(settings)
    logger.info("Starting gradebook services: environment=%s", settings.environment)

    await init_database(settings)
    try:
        if not await check_database_connection():
            raise DatabaseError("Database is not reachable")

        if migrate:
            await run_migrations(get_engine())

        store = ContentStore(settings.storage.root)
        yield GradebookApplication(
            settings=settings,
            store=store,
            importer=ImportService(get_sessionmaker(), store, settings.importer),
        )
    finally:
        await close_database()
        logger.info("Gradebook services stopped")
