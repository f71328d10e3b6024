from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from stay_sync.models.checkins import Checkin, RegisteredGuest


def get_checkin_for_reservation(
    conn: Connection, reservation_id: int
) -> Optional[dict[str, Any]]:
    """
    Fetch the check-in record of a reservation.

    Returns:
        Optional[dict]: Check-in row, or None if no guest was registered yet
    """
    row = (
        conn.execute(select(Checkin).where(Checkin.reservation_id == reservation_id))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def get_guest(conn: Connection, guest_id: int) -> Optional[dict[str, Any]]:
    row = (
        conn.execute(select(RegisteredGuest).where(RegisteredGuest.id == guest_id))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def get_guests_by_checkin(
    conn: Connection, checkin_id: int, adults_only: bool = False
) -> list[dict[str, Any]]:
    """
    List the guest register of a check-in in registration order.

    Args:
        conn: SQLAlchemy DB connection
        checkin_id: Check-in record id
        adults_only: Leave minors out (the candidates for guardian)
    """
    stmt = select(RegisteredGuest).where(RegisteredGuest.checkin_id == checkin_id)
    if adults_only:
        stmt = stmt.where(RegisteredGuest.is_minor.is_(False))
    result = conn.execute(stmt.order_by(RegisteredGuest.id))
    return [dict(row) for row in result.mappings()]
