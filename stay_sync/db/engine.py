"""
SQLAlchemy engine singleton for the local calendar ledger.

The ledger normally lives in a SQLite file next to the application, but any
SQLAlchemy URL works (PostgreSQL is used for shared installations). The engine
is created once at import time; tests and tools can build their own with
create_db_engine().
"""

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from stay_sync.config import DATABASE_URL
from stay_sync.models.base import Base


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(url: str) -> Engine:
    """
    Build an engine with pool settings suited to the target database.

    SQLite in-memory databases use a StaticPool so every connection (including
    the sync worker thread's) sees the same database. File-based SQLite gets its
    parent directory created. Other databases get a pre-pinged connection pool.

    Args:
        url: SQLAlchemy database URL

    Returns:
        Engine: Configured SQLAlchemy engine
    """
    parsed = make_url(url)

    if parsed.get_backend_name() == "sqlite":
        database = parsed.database or ""
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)
            sqlite_engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                echo=False,
            )
        else:
            sqlite_engine = create_engine(
                url,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
                echo=False,
            )
        event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine

    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # Verify connections before using (detect stale connections)
        pool_recycle=3600,
        echo=False,
    )


def init_db(db_engine: Engine) -> None:
    """Create all ledger tables that do not exist yet."""
    # Model modules register their tables on Base.metadata when imported
    import stay_sync.models.checkins  # noqa: F401
    import stay_sync.models.checkouts  # noqa: F401
    import stay_sync.models.days  # noqa: F401
    import stay_sync.models.properties  # noqa: F401
    import stay_sync.models.reservations  # noqa: F401
    import stay_sync.models.settings  # noqa: F401

    Base.metadata.create_all(db_engine)


engine: Engine = create_db_engine(DATABASE_URL)


def check_engine_health(db_engine: Engine | None = None) -> bool:
    """
    Check if the database is reachable.

    Used by the /ready endpoint before the API reports itself ready.

    Returns:
        bool: True if a trivial query succeeds, False otherwise
    """
    try:
        with (db_engine or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
