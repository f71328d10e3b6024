import json
from datetime import date

import structlog
from sqlalchemy.engine import Engine

from stay_sync.calendar_api.client import GoogleCalendarClient
from stay_sync.config import DEBUG
from stay_sync.db.readers.days import get_unsynced_future_days
from stay_sync.db.writers.days import mark_day_synced
from stay_sync.metrics import items_pushed, push_failures
from stay_sync.pushers.events import day_event_text
from stay_sync.pushers.upsert import upsert_event

logger = structlog.get_logger(__name__)


def push_days(
    engine: Engine, client: GoogleCalendarClient, calendar_id: str, today: date
) -> int:
    """
    Push every unsynchronized day from today on to the remote calendar.

    Each day is independent: a failing day is logged, stays unsynchronized
    and is retried next cycle, while the remaining days are still pushed.

    Args:
        engine: SQLAlchemy engine
        client: Authenticated calendar client
        calendar_id: Target calendar
        today: Days before this date are never pushed

    Returns:
        int: Number of days written remotely
    """
    with engine.connect() as conn:
        pending = get_unsynced_future_days(conn, today)

    if DEBUG and pending:
        logger.debug("Sample pending day:\n%s", json.dumps(pending[0], indent=2, default=str))

    count = 0
    for day in pending:
        try:
            title, description, color_id = day_event_text(day)
            new_id = upsert_event(
                client,
                calendar_id,
                day["day_date"],
                day["remote_event_id"],
                title,
                description,
                color_id,
            )
            if new_id is None:
                push_failures.labels(entity_type="days").inc()
                continue

            with engine.begin() as conn:
                mark_day_synced(
                    conn, day["property_id"], day["day_date"], new_id, day["revision"]
                )
            count += 1
        except Exception as e:
            push_failures.labels(entity_type="days").inc()
            logger.exception(
                "day_push_failed",
                property_id=day["property_id"],
                day=day["day_date"].isoformat(),
                error=str(e),
            )

    items_pushed.labels(entity_type="days").inc(count)
    logger.info("days_pushed", pending=len(pending), pushed=count)
    return count
