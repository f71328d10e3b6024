from datetime import date

import structlog
from sqlalchemy.engine import Engine

from stay_sync.calendar_api.client import GoogleCalendarClient
from stay_sync.config import OPERATIONS_LOOKBACK_DAYS
from stay_sync.db.readers.reservations import get_operations_to_sync
from stay_sync.db.writers.reservations import update_operation_event_ids
from stay_sync.metrics import items_pushed, push_failures
from stay_sync.pushers.events import checkin_event_text, checkout_event_text
from stay_sync.pushers.upsert import upsert_event

logger = structlog.get_logger(__name__)


def push_operations(
    engine: Engine,
    client: GoogleCalendarClient,
    calendar_id: str,
    today: date,
    lookback_days: int = OPERATIONS_LOOKBACK_DAYS,
) -> int:
    """
    Push the check-in and check-out events of recent and upcoming stays.

    Both events of a reservation are always attempted. Whichever succeeded has
    its remote id saved even if the other failed; the reservation is only
    flagged synchronized once both are written.

    Args:
        engine: SQLAlchemy engine
        client: Authenticated calendar client
        calendar_id: Target calendar
        today: Reference date
        lookback_days: Stays that ended up to this many days ago are included

    Returns:
        int: Number of reservations with at least one event written
    """
    with engine.connect() as conn:
        pending = get_operations_to_sync(conn, today, lookback_days)

    count = 0
    for op in pending:
        try:
            in_title, in_desc, in_color = checkin_event_text(op)
            new_in_id = upsert_event(
                client,
                calendar_id,
                op["check_in_date"],
                op["remote_event_in_id"],
                in_title,
                in_desc,
                in_color,
            )

            out_title, out_desc, out_color = checkout_event_text(op)
            new_out_id = upsert_event(
                client,
                calendar_id,
                op["check_out_date"],
                op["remote_event_out_id"],
                out_title,
                out_desc,
                out_color,
            )

            if new_in_id is None and new_out_id is None:
                push_failures.labels(entity_type="operations").inc()
                continue

            with engine.begin() as conn:
                update_operation_event_ids(
                    conn,
                    op["id"],
                    new_in_id if new_in_id is not None else op["remote_event_in_id"],
                    new_out_id if new_out_id is not None else op["remote_event_out_id"],
                    op["ops_revision"],
                    fully_synced=new_in_id is not None and new_out_id is not None,
                )
            if new_in_id is None or new_out_id is None:
                push_failures.labels(entity_type="operations").inc()
            count += 1
        except Exception as e:
            push_failures.labels(entity_type="operations").inc()
            logger.exception("operation_push_failed", reservation_id=op["id"], error=str(e))

    items_pushed.labels(entity_type="operations").inc(count)
    logger.info("operations_pushed", pending=len(pending), pushed=count)
    return count
