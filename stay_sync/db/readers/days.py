from calendar import monthrange
from datetime import date
from typing import Any, Iterable, Optional

from sqlalchemy import and_, select
from sqlalchemy.engine import Connection

from stay_sync.models.days import OCCUPIED_STATUSES, CalendarDay
from stay_sync.models.reservations import Reservation


def get_day(conn: Connection, property_id: int, day: date) -> Optional[dict[str, Any]]:
    """
    Fetch one ledger row.

    Returns:
        Optional[dict]: Row as a dict, or None if the date was never priced or booked
    """
    row = (
        conn.execute(
            select(CalendarDay).where(
                CalendarDay.property_id == property_id, CalendarDay.day_date == day
            )
        )
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def get_month_days(
    conn: Connection, property_id: int, year: int, month: int
) -> list[dict[str, Any]]:
    """
    Fetch all ledger rows of a property for one calendar month, ordered by date.

    Args:
        conn: SQLAlchemy DB connection
        property_id: Property to read
        year: Four-digit year
        month: Month number, 1-12
    """
    first = date(year, month, 1)
    last = date(year, month, monthrange(year, month)[1])
    result = conn.execute(
        select(
            CalendarDay.day_date,
            CalendarDay.price,
            CalendarDay.season,
            CalendarDay.status,
            CalendarDay.is_synced,
        )
        .where(
            CalendarDay.property_id == property_id,
            CalendarDay.day_date >= first,
            CalendarDay.day_date <= last,
        )
        .order_by(CalendarDay.day_date)
    )
    return [dict(row) for row in result.mappings()]


def get_occupied_dates(
    conn: Connection,
    property_id: int,
    days: Iterable[date],
    ignore: Iterable[date] = (),
) -> list[date]:
    """
    Return the dates among `days` that are currently reserved or paid.

    Dates in `ignore` are left out, which lets an edited reservation overlap
    its own previous range.
    """
    wanted = set(days) - set(ignore)
    if not wanted:
        return []

    result = conn.execute(
        select(CalendarDay.day_date).where(
            CalendarDay.property_id == property_id,
            CalendarDay.day_date.in_(sorted(wanted)),
            CalendarDay.status.in_(OCCUPIED_STATUSES),
        )
    )
    return sorted(result.scalars().all())


def get_unsynced_future_days(conn: Connection, today: date) -> list[dict[str, Any]]:
    """
    Fetch days that changed locally and still need to be pushed.

    Only today and later dates are returned; past days are never pushed. Each
    row is enriched with the name of the guest whose reservation covers the
    date, if any.

    Args:
        conn: SQLAlchemy DB connection
        today: Reference date for the today-or-later filter

    Returns:
        list[dict]: Rows with property_id, day_date, price, season, status,
            remote_event_id, revision and guest_name
    """
    stmt = (
        select(
            CalendarDay.property_id,
            CalendarDay.day_date,
            CalendarDay.price,
            CalendarDay.season,
            CalendarDay.status,
            CalendarDay.remote_event_id,
            CalendarDay.revision,
            Reservation.guest_name,
        )
        .outerjoin(
            Reservation,
            and_(
                Reservation.property_id == CalendarDay.property_id,
                Reservation.check_in_date <= CalendarDay.day_date,
                Reservation.check_out_date > CalendarDay.day_date,
            ),
        )
        .where(CalendarDay.is_synced.is_(False), CalendarDay.day_date >= today)
        .order_by(CalendarDay.property_id, CalendarDay.day_date)
    )
    return [dict(row) for row in conn.execute(stmt).mappings()]
