from datetime import date, timedelta
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from stay_sync.models.reservations import Reservation


def get_reservation(conn: Connection, reservation_id: int) -> Optional[dict[str, Any]]:
    """
    Fetch a reservation by id.

    Args:
        conn: SQLAlchemy DB connection
        reservation_id: Reservation primary key

    Returns:
        Optional[dict]: Reservation row as a dict, or None if not found
    """
    row = (
        conn.execute(select(Reservation).where(Reservation.id == reservation_id))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def get_reservation_for_day(
    conn: Connection, property_id: int, day: date
) -> Optional[dict[str, Any]]:
    """Fetch the reservation whose stay covers `day`, if any."""
    row = (
        conn.execute(
            select(Reservation)
            .where(
                Reservation.property_id == property_id,
                Reservation.check_in_date <= day,
                Reservation.check_out_date > day,
            )
            .order_by(Reservation.id)
        )
        .mappings()
        .first()
    )
    return dict(row) if row else None


def get_operations_to_sync(
    conn: Connection, today: date, lookback_days: int
) -> list[dict[str, Any]]:
    """
    Fetch reservations whose check-in/check-out events need pushing.

    A reservation qualifies when its operations changed since the last push
    and its check-out is today, in the future, or within the look-back window.

    Args:
        conn: SQLAlchemy DB connection
        today: Reference date
        lookback_days: How many days after check-out the events are still pushed

    Returns:
        list[dict]: Rows with the fields needed to build both events
    """
    stmt = (
        select(
            Reservation.id,
            Reservation.guest_name,
            Reservation.check_in_date,
            Reservation.check_out_date,
            Reservation.has_checkin,
            Reservation.has_checkout,
            Reservation.remote_event_in_id,
            Reservation.remote_event_out_id,
            Reservation.ops_revision,
        )
        .where(
            Reservation.ops_synced.is_(False),
            Reservation.check_out_date >= today - timedelta(days=lookback_days),
        )
        .order_by(Reservation.id)
    )
    return [dict(row) for row in conn.execute(stmt).mappings()]
