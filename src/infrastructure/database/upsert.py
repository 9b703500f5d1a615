# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Atomic insert-or-update against a unique key.

PostgreSQL and SQLite both implement ``INSERT ... ON CONFLICT DO UPDATE``,
so one statement settles concurrent writers on the same key: exactly one
row survives and the last writer's values win. No read-then-write window
exists in application code.

Example:
    record_id = await upsert(
        session,
        AttendanceRecord,
        values={"student_id": sid, "date": day, "period": 1, "status": "PRESENT"},
        conflict_on=("student_id", "date", "period"),
        update=("status", "remarks"),
    )
"""

from typing import Any, Iterable

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.connection import DatabaseError
from src.infrastructure.database.models.base import Base
from src.utils.datetime import utc_now

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def dialect_insert(session: AsyncSession, model: type[Base]):
    """Build the dialect-specific INSERT construct for the session's bind.

    Raises:
        DatabaseError: If the backend has no ON CONFLICT support here.
    """
    dialect = session.get_bind().dialect.name
    factory = _INSERTS.get(dialect)
    if factory is None:
        raise DatabaseError(f"Upsert is not supported on dialect '{dialect}'")
    return factory(model)


async def upsert(
    session: AsyncSession,
    model: type[Base],
    values: dict[str, Any],
    conflict_on: Iterable[str],
    update: Iterable[str],
) -> str:
    """Insert a row or update the one holding the same unique key.

    Args:
        session: Active session; the statement joins its transaction.
        model: Mapped class with a string ``id`` primary key.
        values: Column values for the insert.
        conflict_on: Columns of the unique constraint.
        update: Columns overwritten from the incoming values on conflict.

    Returns:
        Primary key of the surviving row.
    """
    stmt = dialect_insert(session, model).values(**values)
    set_ = {column: stmt.excluded[column] for column in update}
    if "updated_at" in model.__table__.c:
        set_["updated_at"] = utc_now()
    stmt = stmt.on_conflict_do_update(
        index_elements=list(conflict_on),
        set_=set_,
    ).returning(model.id)

    result = await session.execute(stmt)
    return result.scalar_one()
