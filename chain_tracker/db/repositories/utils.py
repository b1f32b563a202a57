"""Utility functions for repository operations."""

from collections.abc import Iterable
from typing import Any, Literal, TypeVar, cast

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

M = TypeVar("M", bound=SQLModel)

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class SQLModelWithTable(SQLModel):
    """Protocol for SQLModel instances that have a __table__ attribute."""

    __table__: Any


def dialect_insert(session: AsyncSession) -> Any:  # noqa: ANN401
    """Return the dialect-specific insert() that supports ON CONFLICT."""
    assert session.bind is not None
    dialect_name = session.bind.dialect.name
    if dialect_name not in _INSERTS:
        raise NotImplementedError(
            f"bulk_insert supports {sorted(_INSERTS)} backends, got {dialect_name!r}"
        )
    return _INSERTS[dialect_name]


async def bulk_insert(
    session: AsyncSession,
    model: type[M],
    records: Iterable[M],
    conflict_target: list[str] | None = None,
    on_conflict: Literal["ignore", "update"] | None = None,
    update_fields: list[str] | None = None,
    chunk_size: int = 500,
) -> None:
    """Insert multiple records with optional conflict handling.

    Args:
        session: Database session
        model: SQLModel class
        records: Iterable of model instances to insert
        conflict_target: Columns for conflict detection (required for on_conflict='update')
        on_conflict: Conflict resolution strategy ('ignore' or 'update')
        update_fields: Fields to update on conflict (required for on_conflict='update')
        chunk_size: Number of records to insert per query

    Raises:
        ValueError: If on_conflict='update' but conflict_target or update_fields not provided
    """
    records_list = list(records)
    if not records_list:
        return

    if on_conflict == "update" and (not conflict_target or not update_fields):
        raise ValueError(
            "conflict_target and update_fields are required for on_conflict='update'"
        )

    model_cls_with_table = cast(type[SQLModelWithTable], model)
    table_columns = model_cls_with_table.__table__.columns
    insert = dialect_insert(session)

    values = [
        {
            column.key: getattr(record, column.key)
            for column in table_columns
            if hasattr(record, column.key)
        }
        for record in records_list
    ]

    for i in range(0, len(values), chunk_size):
        chunk = values[i : i + chunk_size]
        stmt = insert(model_cls_with_table.__table__).values(chunk)

        if on_conflict == "ignore":
            stmt = stmt.on_conflict_do_nothing()
        elif on_conflict == "update":
            stmt = stmt.on_conflict_do_update(
                index_elements=conflict_target,
                set_={field: getattr(stmt.excluded, field) for field in update_fields or []},
            )

        await session.execute(stmt)

    await session.flush()
