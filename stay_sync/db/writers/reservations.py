"""
Transactional writers of the booking engine.

Every function takes a connection that is already inside a transaction
(`with engine.begin() as conn`) and raises on any problem, so the caller's
transaction rolls back the reservation row and all day rows together.
"""

from datetime import date
from typing import Any, Optional

import structlog
from sqlalchemy import delete, insert, update
from sqlalchemy.engine import Connection

from stay_sync.db.readers.days import get_occupied_dates
from stay_sync.db.readers.reservations import get_reservation
from stay_sync.db.writers.days import claim_free_days, set_days_status
from stay_sync.models.days import DayStatus
from stay_sync.models.reservations import Reservation
from stay_sync.utils.datetime import stay_dates, utc_now

logger = structlog.get_logger(__name__)

GUEST_FIELDS = ("guest_name", "guest_document", "guest_email", "guest_phone")


class BookingConflictError(Exception):
    """Raised when a stay overlaps days already reserved or paid."""

    def __init__(self, property_id: int, dates: list[date]):
        self.property_id = property_id
        self.dates = dates
        super().__init__(
            f"Property {property_id} is already booked on "
            + ", ".join(d.isoformat() for d in dates)
        )


class ReservationNotFoundError(Exception):
    """Raised when a reservation id does not exist."""

    def __init__(self, reservation_id: int):
        self.reservation_id = reservation_id
        super().__init__(f"Reservation {reservation_id} not found")


def validate_stay(check_in: date, check_out: date, pax_count: int) -> None:
    """
    Reject impossible stays before any transaction is opened.

    Raises:
        ValueError: If check-out is not after check-in or pax_count is below 1
    """
    if check_out <= check_in:
        raise ValueError(f"check_out {check_out} must be after check_in {check_in}")
    if pax_count < 1:
        raise ValueError(f"pax_count must be at least 1, got {pax_count}")


def day_status_for(is_paid: bool) -> DayStatus:
    return DayStatus.PAID if is_paid else DayStatus.RESERVED


def require_reservation(conn: Connection, reservation_id: int) -> dict[str, Any]:
    reservation = get_reservation(conn, reservation_id)
    if reservation is None:
        raise ReservationNotFoundError(reservation_id)
    return reservation


def _guard_range(
    conn: Connection, property_id: int, days: list[date], ignore: list[date] | tuple = ()
) -> None:
    occupied = get_occupied_dates(conn, property_id, days, ignore=ignore)
    if occupied:
        raise BookingConflictError(property_id, occupied)


def _claim_range(conn: Connection, property_id: int, days: list[date], status: DayStatus) -> None:
    taken = claim_free_days(conn, property_id, days, status)
    if taken:
        raise BookingConflictError(property_id, taken)


def insert_reservation(
    conn: Connection,
    property_id: int,
    guest: dict[str, Optional[str]],
    check_in: date,
    check_out: date,
    pax_count: int,
    is_paid: bool,
) -> int:
    """
    Insert a reservation and occupy its days.

    The range is checked for existing bookings first. Each night is then
    claimed with a write that only succeeds while the day is free, so a
    concurrent booking that passed the same check cannot take it as well.

    Args:
        conn: Active database connection (within transaction)
        property_id: Booked property
        guest: Guest summary (guest_name, guest_document, guest_email, guest_phone)
        check_in: First night (inclusive)
        check_out: Departure date (exclusive)
        pax_count: Party size
        is_paid: Whether the stay is already paid

    Returns:
        int: New reservation id

    Raises:
        BookingConflictError: If any night is already reserved or paid
    """
    days = stay_dates(check_in, check_out)
    _guard_range(conn, property_id, days)

    now = utc_now()
    result = conn.execute(
        insert(Reservation).values(
            property_id=property_id,
            **{field: guest.get(field) for field in GUEST_FIELDS},
            check_in_date=check_in,
            check_out_date=check_out,
            pax_count=pax_count,
            is_paid=is_paid,
            has_checkin=False,
            has_checkout=False,
            ops_synced=False,
            ops_revision=0,
            created_at=now,
            updated_at=now,
        )
    )
    reservation_id = int(result.inserted_primary_key[0])

    _claim_range(conn, property_id, days, day_status_for(is_paid))

    return reservation_id


def update_reservation_details(
    conn: Connection,
    reservation_id: int,
    guest: dict[str, Optional[str]],
    check_in: date,
    check_out: date,
    pax_count: int,
    is_paid: bool,
) -> None:
    """
    Rewrite guest data, party size, payment and dates of a reservation.

    Days that leave the stay are freed. Days of the new range are checked
    against other bookings (the reservation's own previous nights are allowed)
    and set to the status derived from is_paid; nights new to the stay are
    claimed only while still free. All touched days and the operation events
    are marked for re-push, since the guest name appears in the day titles.

    Raises:
        ReservationNotFoundError: If the reservation does not exist
        BookingConflictError: If the new range overlaps another booking
    """
    current = require_reservation(conn, reservation_id)
    property_id = current["property_id"]

    old_days = stay_dates(current["check_in_date"], current["check_out_date"])
    new_days = stay_dates(check_in, check_out)
    _guard_range(conn, property_id, new_days, ignore=old_days)

    conn.execute(
        update(Reservation)
        .where(Reservation.id == reservation_id)
        .values(
            **{field: guest.get(field) for field in GUEST_FIELDS},
            check_in_date=check_in,
            check_out_date=check_out,
            pax_count=pax_count,
            is_paid=is_paid,
            ops_synced=False,
            ops_revision=Reservation.ops_revision + 1,
            updated_at=utc_now(),
        )
    )

    status = day_status_for(is_paid)
    previous = set(old_days)
    kept = [d for d in new_days if d in previous]
    added = [d for d in new_days if d not in previous]
    released = sorted(set(old_days) - set(new_days))
    set_days_status(conn, property_id, released, DayStatus.FREE)
    set_days_status(conn, property_id, kept, status)
    _claim_range(conn, property_id, added, status)


def update_payment(conn: Connection, reservation_id: int, is_paid: bool) -> None:
    """
    Flip a reservation between reserved and paid, keeping its dates.

    Raises:
        ReservationNotFoundError: If the reservation does not exist
    """
    current = require_reservation(conn, reservation_id)

    conn.execute(
        update(Reservation)
        .where(Reservation.id == reservation_id)
        .values(is_paid=is_paid, updated_at=utc_now())
    )
    set_days_status(
        conn,
        current["property_id"],
        stay_dates(current["check_in_date"], current["check_out_date"]),
        day_status_for(is_paid),
    )


def delete_reservation(conn: Connection, reservation_id: int) -> dict[str, Any]:
    """
    Free the nights of a reservation and delete it.

    Returns:
        dict: The deleted reservation row

    Raises:
        ReservationNotFoundError: If the reservation does not exist
    """
    current = require_reservation(conn, reservation_id)

    set_days_status(
        conn,
        current["property_id"],
        stay_dates(current["check_in_date"], current["check_out_date"]),
        DayStatus.FREE,
    )
    conn.execute(delete(Reservation).where(Reservation.id == reservation_id))

    return current


def set_operation_flag(conn: Connection, reservation_id: int, field: str) -> None:
    """
    Mark check-in or check-out as completed and queue its event for re-push.

    Args:
        conn: SQLAlchemy DB connection
        reservation_id: Reservation to update
        field: "has_checkin" or "has_checkout"

    Raises:
        ValueError: For any other field name
        ReservationNotFoundError: If the reservation does not exist
    """
    if field not in ("has_checkin", "has_checkout"):
        raise ValueError(f"Unknown operation flag: {field}")

    require_reservation(conn, reservation_id)

    conn.execute(
        update(Reservation)
        .where(Reservation.id == reservation_id)
        .values(
            {
                field: True,
                "ops_synced": False,
                "ops_revision": Reservation.ops_revision + 1,
                "updated_at": utc_now(),
            }
        )
    )


def update_operation_event_ids(
    conn: Connection,
    reservation_id: int,
    event_in_id: Optional[str],
    event_out_id: Optional[str],
    revision: int,
    fully_synced: bool,
) -> bool:
    """
    Store the remote ids of the check-in/check-out events of a reservation.

    Both ids are stored as given (callers pass the previous id for a side that
    failed). ops_synced is set only when both sides succeeded and the
    reservation still has the pushed ops_revision.

    Returns:
        bool: True if the reservation is now flagged synchronized
    """
    conn.execute(
        update(Reservation)
        .where(Reservation.id == reservation_id)
        .values(remote_event_in_id=event_in_id, remote_event_out_id=event_out_id)
    )

    if not fully_synced:
        return False

    result = conn.execute(
        update(Reservation)
        .where(Reservation.id == reservation_id, Reservation.ops_revision == revision)
        .values(ops_synced=True)
    )
    return result.rowcount > 0
