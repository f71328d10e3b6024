from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Iterable

import structlog
from sqlalchemy import update
from sqlalchemy.engine import Connection

from stay_sync.db.writers._upsert import dialect_insert
from stay_sync.models.days import OCCUPIED_STATUSES, CalendarDay, DayStatus, Season
from stay_sync.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

# Rows per INSERT statement; 9 bind parameters each stays under SQLite's 999 limit
PRICE_BATCH_SIZE = 100


def upsert_price_range(
    conn: Connection,
    property_id: int,
    start_date: date,
    end_date: date,
    price: Decimal,
    season: Season,
) -> int:
    """
    Set price and season for every date in [start_date, end_date] (inclusive).

    Missing days are inserted as free and unsynchronized. Existing days are
    updated only if they are not reserved or paid, and only if the price or the
    season actually changes; an update clears is_synced and bumps revision so
    the sync cycle pushes the new price.
    Rows are written PRICE_BATCH_SIZE at a time within the caller's transaction.

    Args:
        conn: Active database connection (within transaction)
        property_id: Property the days belong to
        start_date: First date to price
        end_date: Last date to price (inclusive)
        price: Nightly price
        season: Season tier of the price

    Returns:
        int: Number of dates in the range
    """
    if end_date < start_date:
        raise ValueError(f"end_date {end_date} is before start_date {start_date}")

    now = utc_now()
    rows: list[dict[str, Any]] = []
    current = start_date
    while current <= end_date:
        rows.append(
            {
                "property_id": property_id,
                "day_date": current,
                "price": price,
                "season": season.value,
                "status": DayStatus.FREE.value,
                "is_synced": False,
                "remote_event_id": None,
                "revision": 0,
                "updated_at": now,
            }
        )
        current += timedelta(days=1)

    for offset in range(0, len(rows), PRICE_BATCH_SIZE):
        stmt = dialect_insert(conn, CalendarDay).values(rows[offset : offset + PRICE_BATCH_SIZE])
        stmt = stmt.on_conflict_do_update(
            index_elements=["property_id", "day_date"],
            set_={
                "price": stmt.excluded.price,
                "season": stmt.excluded.season,
                "is_synced": False,
                "revision": CalendarDay.revision + 1,
                "updated_at": stmt.excluded.updated_at,
            },
            where=(
                CalendarDay.status.notin_(OCCUPIED_STATUSES)
                & (
                    CalendarDay.price.is_distinct_from(stmt.excluded.price)
                    | CalendarDay.season.is_distinct_from(stmt.excluded.season)
                )
            ),
        )
        conn.execute(stmt)

    return len(rows)


def _set_day_status(
    conn: Connection,
    property_id: int,
    day: date,
    status: DayStatus,
    only_if_free: bool = False,
) -> bool:
    """
    Write one day's occupancy status, creating an unpriced row if the day is new.

    With only_if_free, an existing row is only overwritten while it is free;
    the occupancy test runs inside the write, against the row the database
    holds at that moment.

    Returns:
        bool: True if the row was inserted or updated
    """
    stmt = dialect_insert(conn, CalendarDay).values(
        property_id=property_id,
        day_date=day,
        price=None,
        season=Season.NONE.value,
        status=status.value,
        is_synced=False,
        remote_event_id=None,
        revision=0,
        updated_at=utc_now(),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["property_id", "day_date"],
        set_={
            "status": stmt.excluded.status,
            "is_synced": False,
            "revision": CalendarDay.revision + 1,
            "updated_at": stmt.excluded.updated_at,
        },
        where=CalendarDay.status.notin_(OCCUPIED_STATUSES) if only_if_free else None,
    )
    return conn.execute(stmt).rowcount > 0


def claim_free_days(
    conn: Connection, property_id: int, days: Iterable[date], status: DayStatus
) -> list[date]:
    """
    Occupy each given day that is still free (or not yet in the ledger).

    Days already reserved or paid are left untouched, including days another
    transaction occupied after the caller last read them. The caller must roll
    back when anything is returned.

    Returns:
        list[date]: Days that could not be claimed, in input order
    """
    taken: list[date] = []
    for day in days:
        if not _set_day_status(conn, property_id, day, status, only_if_free=True):
            taken.append(day)
    if taken:
        logger.info(
            "days_already_occupied",
            property_id=property_id,
            days=[d.isoformat() for d in taken],
        )
    return taken


def set_days_status(
    conn: Connection, property_id: int, days: Iterable[date], status: DayStatus
) -> int:
    """
    Set the occupancy status of each given day and mark it for re-push.

    Must run inside the caller's transaction: a failure on any day leaves the
    whole range to be rolled back by the caller.

    Returns:
        int: Number of days written
    """
    count = 0
    for day in days:
        _set_day_status(conn, property_id, day, status)
        count += 1
    return count


def mark_day_synced(
    conn: Connection,
    property_id: int,
    day: date,
    remote_event_id: str,
    revision: int,
) -> bool:
    """
    Store the remote event id of a day and flag it synchronized.

    The remote id is always stored, since the event now exists remotely. The
    synchronized flag is only set if the row still has the revision that was
    pushed; otherwise a local change happened meanwhile and the day stays
    pending for the next cycle.

    Args:
        conn: SQLAlchemy DB connection
        property_id: Property of the day
        day: Date of the day
        remote_event_id: Id returned by the remote calendar
        revision: Revision of the row at the time it was read for pushing

    Returns:
        bool: True if the day is now flagged synchronized
    """
    conn.execute(
        update(CalendarDay)
        .where(CalendarDay.property_id == property_id, CalendarDay.day_date == day)
        .values(remote_event_id=remote_event_id)
    )

    result = conn.execute(
        update(CalendarDay)
        .where(
            CalendarDay.property_id == property_id,
            CalendarDay.day_date == day,
            CalendarDay.revision == revision,
        )
        .values(is_synced=True)
    )

    if result.rowcount == 0:
        logger.info(
            "day_changed_during_push",
            property_id=property_id,
            day=day.isoformat(),
            pushed_revision=revision,
        )
        return False
    return True
