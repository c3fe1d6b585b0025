# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database migration runner.

This module applies the schema revisions programmatically, without the
alembic CLI. Revisions are imported from the versions package and run
in order inside one transaction each; the alembic_version table records
the last applied revision.

Example:
    from src.infrastructure.database.migrations.runner import run_migrations

    applied = await run_migrations(engine)
"""

import importlib
import logging
from typing import Callable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

# Migration files in order (must be maintained manually)
MIGRATIONS = [
    "001_initial_schema",
]


async def run_migrations(
    engine: AsyncEngine,
    target_revision: str | None = None,
) -> list[str]:
    """Run pending migrations.

    Args:
        engine: Engine bound to the gradebook database.
        target_revision: Optional specific revision to migrate to.
            If None, runs all pending migrations.

    Returns:
        List of applied migration revision IDs.

    Raises:
        ImportError: If a revision module cannot be imported.
        ValueError: If a revision module has no upgrade() function.
    """
    await _ensure_version_table(engine)

    current_version = await _get_current_version(engine)
    logger.info("Current migration version: %s", current_version or "None")

    migrations_to_apply = _get_pending_migrations(current_version, target_revision)

    if not migrations_to_apply:
        logger.info("No pending migrations")
        return []

    logger.info(
        "Applying %d migrations: %s",
        len(migrations_to_apply),
        ", ".join(migrations_to_apply),
    )

    applied = []
    for revision in migrations_to_apply:
        await _apply_migration(engine, revision)
        applied.append(revision)
        logger.info("Applied migration: %s", revision)

    return applied


async def get_migration_status(engine: AsyncEngine) -> dict:
    """Get migration status of the database.

    Args:
        engine: Engine bound to the gradebook database.

    Returns:
        Dict with current version, pending migrations, and all migrations.
    """
    await _ensure_version_table(engine)
    current_version = await _get_current_version(engine)
    pending = _get_pending_migrations(current_version)

    return {
        "current_version": current_version,
        "latest_version": MIGRATIONS[-1] if MIGRATIONS else None,
        "pending_count": len(pending),
        "pending_migrations": pending,
        "all_migrations": list(MIGRATIONS),
    }


async def _ensure_version_table(engine: AsyncEngine) -> None:
    """Create alembic_version table if not exists."""
    async with engine.begin() as conn:
        await conn.execute(
            text("""
                CREATE TABLE IF NOT EXISTS alembic_version (
                    version_num VARCHAR(128) NOT NULL,
                    CONSTRAINT alembic_version_pkc PRIMARY KEY (version_num)
                )
            """)
        )


async def _get_current_version(engine: AsyncEngine) -> str | None:
    """Get current migration version from database."""
    async with engine.connect() as conn:
        result = await conn.execute(text("SELECT version_num FROM alembic_version LIMIT 1"))
        row = result.fetchone()
        return row[0] if row else None


def _get_pending_migrations(
    current_version: str | None,
    target_revision: str | None = None,
) -> list[str]:
    """Get list of migrations to apply.

    Args:
        current_version: Current database version.
        target_revision: Target revision to migrate to.

    Returns:
        List of revision IDs to apply in order.
    """
    if current_version is None:
        start_idx = 0
    else:
        try:
            start_idx = MIGRATIONS.index(current_version) + 1
        except ValueError:
            logger.warning("Current version %s not in known migrations list", current_version)
            return []

    if target_revision:
        try:
            end_idx = MIGRATIONS.index(target_revision) + 1
        except ValueError:
            logger.warning("Target revision %s not found", target_revision)
            return []
    else:
        end_idx = len(MIGRATIONS)

    return MIGRATIONS[start_idx:end_idx]


async def _apply_migration(engine: AsyncEngine, revision: str) -> None:
    """Apply a single migration.

    Args:
        engine: Database engine.
        revision: Migration revision ID.
    """
    module_name = f"src.infrastructure.database.migrations.versions.{revision}"
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ImportError(f"Cannot import migration {revision}: {e}") from e

    upgrade_fn: Callable | None = getattr(module, "upgrade", None)
    if upgrade_fn is None:
        raise ValueError(f"Migration {revision} has no upgrade() function")

    async with engine.begin() as conn:
        await conn.run_sync(_run_upgrade_sync, upgrade_fn)

        await conn.execute(text("DELETE FROM alembic_version"))
        await conn.execute(
            text("INSERT INTO alembic_version (version_num) VALUES (:version)"),
            {"version": revision},
        )


def _run_upgrade_sync(connection, upgrade_fn: Callable) -> None:
    """Run upgrade function in sync context with alembic operations.

    Alembic operations are sync and use a thread-local context.
    """
    from alembic.operations import Operations
    from alembic.runtime.migration import MigrationContext

    context = MigrationContext.configure(connection)

    with context.begin_transaction():
        with Operations.context(context):
            upgrade_fn()
