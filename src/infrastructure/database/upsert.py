# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Insert-or-update by natural key.

Wraps the dialect INSERT ... ON CONFLICT DO UPDATE statement so callers
never read-then-write. The row is resolved in a single statement inside the
caller's transaction, and its surrogate id is returned.

Example:
    course_pk = await upsert(
        session,
        Course,
        {"code": "MAT101", "name": "Calculus", "workload": 60},
        conflict_columns=["code"],
        update_columns=["name", "workload"],
    )
"""

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.connection import DatabaseError
from src.infrastructure.database.models.base import Base
from src.utils.datetime import utc_now

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


async def upsert(
    session: AsyncSession,
    model: type[Base],
    values: Mapping[str, Any],
    conflict_columns: Sequence[str],
    update_columns: Sequence[str],
) -> int:
    """Insert a row or update the existing one sharing its natural key.

    Args:
        session: Session whose transaction the statement joins.
        model: ORM model class with an integer ``id`` primary key.
        values: Column values for the row.
        conflict_columns: Columns of the unique constraint that identifies the row.
        update_columns: Columns overwritten when the row already exists.

    Returns:
        Surrogate id of the inserted or updated row.

    Raises:
        DatabaseError: If the connected dialect has no upsert support.
    """
    dialect = session.get_bind().dialect.name
    insert = _INSERT_BY_DIALECT.get(dialect)
    if insert is None:
        raise DatabaseError(f"Upsert is not supported for dialect '{dialect}'")

    stmt = insert(model).values(**values)
    set_: dict[str, Any] = {column: stmt.excluded[column] for column in update_columns}
    if "updated_at" in model.__table__.c:
        set_["updated_at"] = utc_now()

    stmt = stmt.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_=set_,
    ).returning(model.__table__.c.id)

    result = await session.execute(stmt)
    return result.scalar_one()
