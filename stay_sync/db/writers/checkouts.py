from datetime import time
from typing import Optional

from sqlalchemy.engine import Connection

from stay_sync.db.writers._upsert import dialect_insert
from stay_sync.db.writers.reservations import require_reservation, set_operation_flag
from stay_sync.models.checkouts import Checkout
from stay_sync.utils.datetime import utc_now


def upsert_checkout(
    conn: Connection,
    reservation_id: int,
    exit_time: Optional[time],
    keys_returned: bool,
    damage_detected: bool,
    damage_description: Optional[str],
) -> None:
    """
    Record the departure report and mark the reservation checked out.

    A damage description is only kept when damage was detected.

    Args:
        conn: Active database connection (within transaction)
        reservation_id: Reservation checking out
        exit_time: Local time the guests left
        keys_returned: Whether all keys came back
        damage_detected: Whether the property was found damaged
        damage_description: Free-text damage report

    Raises:
        ReservationNotFoundError: If the reservation does not exist
    """
    require_reservation(conn, reservation_id)

    stmt = dialect_insert(conn, Checkout).values(
        reservation_id=reservation_id,
        exit_time=exit_time,
        keys_returned=keys_returned,
        damage_detected=damage_detected,
        damage_description=damage_description if damage_detected else None,
        created_at=utc_now(),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["reservation_id"],
        set_={
            "exit_time": stmt.excluded.exit_time,
            "keys_returned": stmt.excluded.keys_returned,
            "damage_detected": stmt.excluded.damage_detected,
            "damage_description": stmt.excluded.damage_description,
            "created_at": stmt.excluded.created_at,
        },
    )
    conn.execute(stmt)

    set_operation_flag(conn, reservation_id, "has_checkout")
