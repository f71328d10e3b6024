from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.engine import Engine

from stay_sync.calendar_api.client import GoogleCalendarClient
from stay_sync.db.readers.settings import get_calendar_settings
from stay_sync.db.writers.settings import update_calendar_settings
from stay_sync.dependencies import get_calendar_client, get_db_engine, get_scheduler
from stay_sync.schemas.sync import CalendarSettingsPayload
from stay_sync.services.scheduler import SyncScheduler

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/sync/settings")
def get_settings(engine: Engine = Depends(get_db_engine)) -> dict[str, Optional[str]]:
    with engine.connect() as conn:
        return get_calendar_settings(conn)


@router.put("/sync/settings")
def put_settings(
    payload: CalendarSettingsPayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, str]:
    """
    Save the target calendar and the OAuth client secrets path.

    The next sync cycle authenticates again if the credentials path changed.
    """
    try:
        with engine.begin() as conn:
            update_calendar_settings(conn, payload.calendar_id, payload.credentials_path)
    except Exception as e:
        logger.exception("calendar_settings_update_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"message": "Calendar settings saved"}


@router.get("/sync/calendars")
def get_calendars(
    engine: Engine = Depends(get_db_engine),
    client: GoogleCalendarClient = Depends(get_calendar_client),
) -> dict[str, Any]:
    """
    List the calendars of the connected Google account (display name -> id).

    Raises:
        HTTPException: 400 if no credentials path is configured,
            409 if authentication or the listing fails
    """
    with engine.connect() as conn:
        credentials_path = get_calendar_settings(conn)["credentials_path"]

    if not credentials_path:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Credentials path is not configured",
        )

    if not client.is_connected(credentials_path) and not client.authenticate(credentials_path):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Google authentication failed")

    try:
        calendars = client.list_calendars()
    except Exception as e:
        logger.exception("calendar_listing_failed", error=str(e))
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Calendar listing failed")

    return {"calendars": calendars}


@router.post("/sync/force", status_code=status.HTTP_202_ACCEPTED)
def force_sync(scheduler: SyncScheduler = Depends(get_scheduler)) -> dict[str, str]:
    """
    Queue an immediate sync cycle behind any cycle already running.
    """
    try:
        scheduler.force_sync()
    except RuntimeError as e:
        logger.warning("force_sync_rejected", error=str(e))
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Sync scheduler is stopped")

    return {"message": "Sync requested"}


@router.get("/sync/status")
def sync_status(scheduler: SyncScheduler = Depends(get_scheduler)) -> dict[str, Any]:
    return {"status": scheduler.status.last_message, "running": scheduler.running}
