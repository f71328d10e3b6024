"""
Dialect-aware INSERT ... ON CONFLICT builder.

Both PostgreSQL and SQLite support ON CONFLICT DO UPDATE with a WHERE clause,
but SQLAlchemy exposes them through separate dialect modules. Writers call
dialect_insert() with their connection and get the right construct.
"""

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection


def dialect_insert(conn: Connection, table: type) -> Any:
    """
    Return an INSERT construct for `table` supporting on_conflict_do_update.

    Args:
        conn: Active database connection
        table: SQLAlchemy ORM table class (e.g., CalendarDay)

    Raises:
        NotImplementedError: For databases without ON CONFLICT support
    """
    name = conn.dialect.name
    if name == "postgresql":
        return postgresql.insert(table)
    if name == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Upserts are not supported on dialect '{name}'")
