# Overview: Service-layer id allocation for tables without native auto-increment.

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import IdSequence
from .concurrency import run_with_retry
from .errors import InvalidInputError


def current_max_plus_one(table: str, column: str = "id") -> int:
    """
    Read the current maximum of column (descending, limit 1) and add one.

    Returns 1 for an empty table. Not safe to use as an allocator on its own:
    two callers can observe the same maximum.
    """
    tbl = db.metadata.tables.get(table)
    if tbl is None:
        raise InvalidInputError(f"Unknown table {table!r}")
    if column not in tbl.c:
        raise InvalidInputError(f"Unknown column {column!r} on {table!r}")

    col = tbl.c[column]
    current = db.session.execute(
        select(col).order_by(col.desc()).limit(1)
    ).scalar()
    if current is None:
        return 1
    return int(current) + 1


def _current_next_value(table: str) -> int:
    return (
        db.session.query(IdSequence.next_value)
        .filter_by(table_name=table)
        .scalar()
    )


def next_id(table: str, column: str = "id") -> int:
    """
    Atomically allocate the next integer id for table.

    The first allocation for a table seeds its sequence row from
    current_max_plus_one, so ids continue after existing rows. Every later
    allocation is a single UPDATE ... SET next_value = next_value + 1, which
    the database serializes; concurrent callers never share an id.

    Must be called before the request's other writes (see run_with_retry).
    """
    def _op() -> int:
        if not table:
            raise InvalidInputError("table is required")

        stmt = (
            update(IdSequence)
            .where(IdSequence.table_name == table)
            .values(next_value=IdSequence.next_value + 1)
            .execution_options(synchronize_session=False)
        )

        result = db.session.execute(stmt)
        if result.rowcount:
            return _current_next_value(table) - 1

        seed = current_max_plus_one(table, column)
        try:
            with db.session.begin_nested():
                db.session.add(IdSequence(table_name=table, column_name=column, next_value=seed + 1))
        except IntegrityError:
            # Another request seeded the row first; take the next value from it.
            result = db.session.execute(stmt)
            if not result.rowcount:
                raise
            return _current_next_value(table) - 1
        return seed

    return run_with_retry(_op)
