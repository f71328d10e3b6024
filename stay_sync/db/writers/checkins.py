"""
Writers for the check-in record and its guest register.

Like the booking writers, every function expects a connection inside the
caller's transaction and raises on any problem.
"""

from typing import Any, Optional

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection

from stay_sync.db.readers.checkins import get_guest
from stay_sync.db.writers._upsert import dialect_insert
from stay_sync.db.writers.reservations import require_reservation, set_operation_flag
from stay_sync.models.checkins import Checkin, RegisteredGuest
from stay_sync.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

GUEST_REGISTER_FIELDS = (
    "fullname",
    "surname1",
    "surname2",
    "sex",
    "birth_date",
    "nationality",
    "document_type",
    "document_number",
    "support_number",
    "address",
    "city",
    "country",
    "phone",
    "email",
    "is_minor",
    "guardian_id",
)

PAYMENT_FIELDS = (
    "payment_method",
    "payment_identifier",
    "payment_holder",
    "card_expiry",
    "payment_date",
    "rules_accepted",
    "gdpr_accepted",
)


class GuestNotFoundError(Exception):
    """Raised when a registered guest id does not exist."""

    def __init__(self, guest_id: int):
        self.guest_id = guest_id
        super().__init__(f"Guest {guest_id} not found")


def get_or_create_checkin(conn: Connection, reservation_id: int) -> int:
    """
    Return the check-in id of a reservation, opening the record if needed.

    Raises:
        ReservationNotFoundError: If the reservation does not exist
    """
    require_reservation(conn, reservation_id)

    stmt = dialect_insert(conn, Checkin).values(
        reservation_id=reservation_id,
        rules_accepted=False,
        gdpr_accepted=False,
        signed_at=utc_now(),
    )
    conn.execute(stmt.on_conflict_do_nothing(index_elements=["reservation_id"]))

    return int(
        conn.execute(
            select(Checkin.id).where(Checkin.reservation_id == reservation_id)
        ).scalar_one()
    )


def finalize_checkin(conn: Connection, reservation_id: int, payment: dict[str, Any]) -> int:
    """
    Store the payment record and consents, and mark the reservation checked in.

    Args:
        conn: Active database connection (within transaction)
        reservation_id: Reservation being checked in
        payment: Values for PAYMENT_FIELDS; both consents must be True

    Returns:
        int: Check-in id

    Raises:
        ValueError: If the house rules or the data-protection consent is missing
        ReservationNotFoundError: If the reservation does not exist
    """
    if not payment.get("rules_accepted") or not payment.get("gdpr_accepted"):
        raise ValueError("House rules and data protection consent must both be accepted")

    checkin_id = get_or_create_checkin(conn, reservation_id)
    conn.execute(
        update(Checkin)
        .where(Checkin.id == checkin_id)
        .values(
            **{field: payment.get(field) for field in PAYMENT_FIELDS},
            finalized_at=utc_now(),
        )
    )
    set_operation_flag(conn, reservation_id, "has_checkin")

    return checkin_id


def _resolve_guardian(
    conn: Connection, checkin_id: int, guest: dict[str, Any], guest_id: Optional[int] = None
) -> Optional[int]:
    """
    Validate the guardian of a registered guest.

    Only minors keep a guardian; it must be an adult of the same check-in.

    Raises:
        ValueError: If the guardian is unknown, belongs elsewhere, or is a minor
    """
    guardian_id = guest.get("guardian_id")
    if not guest.get("is_minor") or guardian_id is None:
        return None

    guardian = get_guest(conn, guardian_id)
    if guardian is None or guardian["checkin_id"] != checkin_id:
        raise ValueError(f"Guardian {guardian_id} is not registered in this check-in")
    if guardian["is_minor"] or guardian_id == guest_id:
        raise ValueError(f"Guardian {guardian_id} must be an adult")
    return guardian_id


def insert_guest(conn: Connection, checkin_id: int, guest: dict[str, Any]) -> int:
    """
    Add a traveller to the guest register.

    Returns:
        int: New guest id

    Raises:
        ValueError: On an invalid guardian
    """
    values = {field: guest.get(field) for field in GUEST_REGISTER_FIELDS}
    values["is_minor"] = bool(values["is_minor"])
    values["guardian_id"] = _resolve_guardian(conn, checkin_id, guest)

    result = conn.execute(insert(RegisteredGuest).values(checkin_id=checkin_id, **values))
    return int(result.inserted_primary_key[0])


def update_guest(conn: Connection, guest_id: int, guest: dict[str, Any]) -> None:
    """
    Rewrite every register field of a guest.

    Raises:
        GuestNotFoundError: If the guest does not exist
        ValueError: On an invalid guardian
    """
    current = get_guest(conn, guest_id)
    if current is None:
        raise GuestNotFoundError(guest_id)

    values = {field: guest.get(field) for field in GUEST_REGISTER_FIELDS}
    values["is_minor"] = bool(values["is_minor"])
    values["guardian_id"] = _resolve_guardian(conn, current["checkin_id"], guest, guest_id)

    conn.execute(update(RegisteredGuest).where(RegisteredGuest.id == guest_id).values(**values))

    if not current["is_minor"] and values["is_minor"]:
        # Minors cannot be guardians
        conn.execute(
            update(RegisteredGuest)
            .where(RegisteredGuest.guardian_id == guest_id)
            .values(guardian_id=None)
        )


def delete_guest(conn: Connection, guest_id: int) -> dict[str, Any]:
    """
    Remove a guest from the register. Minors in their care lose the guardian.

    Returns:
        dict: The deleted guest row

    Raises:
        GuestNotFoundError: If the guest does not exist
    """
    current = get_guest(conn, guest_id)
    if current is None:
        raise GuestNotFoundError(guest_id)

    conn.execute(
        update(RegisteredGuest)
        .where(RegisteredGuest.guardian_id == guest_id)
        .values(guardian_id=None)
    )
    conn.execute(delete(RegisteredGuest).where(RegisteredGuest.id == guest_id))

    return current
