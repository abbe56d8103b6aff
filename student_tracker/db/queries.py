"""Dialect-aware query helpers shared by the tracking services."""

from typing import Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from student_tracker.services.exceptions import ConflictError

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


async def insert_if_absent(
    db: AsyncSession,
    model: type,
    values: dict[str, Any],
    conflict_columns: list[str],
) -> int:
    """
    Insert one row unless a row with the same conflict columns exists.

    Uses INSERT ... ON CONFLICT DO NOTHING so the unique constraint decides
    the winner when two requests race. Returns the new row id, or raises
    ConflictError when the row already existed.
    """
    dialect = db.get_bind().dialect.name
    try:
        insert = _INSERTS[dialect]
    except KeyError:
        raise NotImplementedError(f"Conditional insert not supported for dialect {dialect!r}") from None

    stmt = (
        insert(model)
        .values(**values)
        .on_conflict_do_nothing(index_elements=conflict_columns)
        .returning(model.id)
    )
    result = await db.execute(stmt)
    new_id = result.scalar_one_or_none()
    if new_id is None:
        raise ConflictError(
            f"{model.__tablename__} row already exists for "
            + ", ".join(f"{c}={values[c]}" for c in conflict_columns)
        )
    return new_id
