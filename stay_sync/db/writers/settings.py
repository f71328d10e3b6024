from typing import Optional

import structlog
from sqlalchemy.engine import Connection

from stay_sync.db.writers._upsert import dialect_insert
from stay_sync.models.settings import SETTINGS_ROW_ID, CalendarSettings
from stay_sync.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def update_calendar_settings(
    conn: Connection, calendar_id: Optional[str], credentials_path: Optional[str]
) -> None:
    """
    Upsert the single calendar settings row.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        calendar_id (Optional[str]): Target Google calendar id.
        credentials_path (Optional[str]): Path to the OAuth client secrets JSON.
    """
    stmt = dialect_insert(conn, CalendarSettings).values(
        id=SETTINGS_ROW_ID,
        calendar_id=calendar_id,
        credentials_path=credentials_path,
        updated_at=utc_now(),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["id"],
        set_={
            "calendar_id": stmt.excluded.calendar_id,
            "credentials_path": stmt.excluded.credentials_path,
            "updated_at": stmt.excluded.updated_at,
        },
    )
    conn.execute(stmt)

    logger.info("calendar_settings_updated", calendar_id=calendar_id)
