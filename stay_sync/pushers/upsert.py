"""
Idempotent create-or-update of a single remote calendar event.

The local ledger stores the remote event id of each item. An update is tried
first when an id is known; if it fails for any reason (most often because
the event was deleted directly in Google Calendar) a new event is created
and its id replaces the stale one.
"""

from datetime import date
from typing import Optional

import structlog

from stay_sync.calendar_api.client import GoogleCalendarClient

logger = structlog.get_logger(__name__)


def upsert_event(
    client: GoogleCalendarClient,
    calendar_id: str,
    day: date,
    event_id: Optional[str],
    title: str,
    description: str,
    color_id: str,
) -> Optional[str]:
    """
    Make the remote event for `day` match the given text and color.

    Args:
        client: Authenticated calendar client
        calendar_id: Target calendar
        day: Date of the all-day event
        event_id: Previously stored remote id, if any
        title: Event summary
        description: Event description
        color_id: Google event color id

    Returns:
        Optional[str]: The event id (unchanged on update, new on create), or
            None if the remote calendar could not be written
    """
    if event_id:
        try:
            client.update_event(calendar_id, event_id, day, title, description, color_id)
            return event_id
        except Exception as e:
            logger.info(
                "remote_event_missing_recreating",
                day=day.isoformat(),
                event_id=event_id,
                error=str(e),
            )

    try:
        return client.create_event(calendar_id, day, title, description, color_id)
    except Exception as e:
        logger.error("remote_event_sync_failed", day=day.isoformat(), error=str(e))
        return None
