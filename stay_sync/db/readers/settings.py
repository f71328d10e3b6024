from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from stay_sync.models.settings import SETTINGS_ROW_ID, CalendarSettings


def get_calendar_settings(conn: Connection) -> dict[str, Optional[str]]:
    """
    Fetch the remote calendar target and credentials path.

    Args:
        conn (Connection): SQLAlchemy DB connection.

    Returns:
        dict[str, Optional[str]]: 'calendar_id' and 'credentials_path', None when unset
    """
    row = conn.execute(
        select(CalendarSettings.calendar_id, CalendarSettings.credentials_path).where(
            CalendarSettings.id == SETTINGS_ROW_ID
        )
    ).fetchone()
    if row is None:
        return {"calendar_id": None, "credentials_path": None}
    return {"calendar_id": row[0], "credentials_path": row[1]}
