"""
Guest register behind the check-in of a reservation.

Same contract as the booking engine: one transaction per call, failures are
logged and reported as None/False, nothing is retried.
"""

from typing import Any, Optional

import structlog
from sqlalchemy.engine import Engine

from stay_sync.db.writers.checkins import (
    GuestNotFoundError,
    delete_guest,
    get_or_create_checkin,
    insert_guest,
    update_guest,
)
from stay_sync.db.writers.reservations import ReservationNotFoundError
from stay_sync.metrics import booking_operations

logger = structlog.get_logger(__name__)


def _record(operation: str, ok: bool) -> None:
    booking_operations.labels(operation=operation, status="success" if ok else "failure").inc()


def register_guest(engine: Engine, reservation_id: int, guest: dict[str, Any]) -> Optional[int]:
    """
    Add a traveller to the reservation's check-in, opening it if needed.

    Returns:
        Optional[int]: New guest id, or None if the guest was rejected
    """
    try:
        with engine.begin() as conn:
            checkin_id = get_or_create_checkin(conn, reservation_id)
            guest_id = insert_guest(conn, checkin_id, guest)
    except (ReservationNotFoundError, ValueError) as e:
        logger.warning("guest_rejected", reservation_id=reservation_id, reason=str(e))
        _record("guest_add", False)
        return None
    except Exception as e:
        logger.exception("guest_registration_failed", reservation_id=reservation_id, error=str(e))
        _record("guest_add", False)
        return None

    logger.info(
        "guest_registered",
        reservation_id=reservation_id,
        checkin_id=checkin_id,
        guest_id=guest_id,
        is_minor=bool(guest.get("is_minor")),
    )
    _record("guest_add", True)
    return guest_id


def edit_guest(engine: Engine, guest_id: int, guest: dict[str, Any]) -> bool:
    try:
        with engine.begin() as conn:
            update_guest(conn, guest_id, guest)
    except (GuestNotFoundError, ValueError) as e:
        logger.warning("guest_update_rejected", guest_id=guest_id, reason=str(e))
        _record("guest_update", False)
        return False
    except Exception as e:
        logger.exception("guest_update_failed", guest_id=guest_id, error=str(e))
        _record("guest_update", False)
        return False

    logger.info("guest_updated", guest_id=guest_id)
    _record("guest_update", True)
    return True


def remove_guest(engine: Engine, guest_id: int) -> bool:
    """Delete a guest from the register. Returns False if it did not exist."""
    try:
        with engine.begin() as conn:
            deleted = delete_guest(conn, guest_id)
    except GuestNotFoundError as e:
        logger.warning("guest_delete_rejected", guest_id=guest_id, reason=str(e))
        _record("guest_delete", False)
        return False
    except Exception as e:
        logger.exception("guest_delete_failed", guest_id=guest_id, error=str(e))
        _record("guest_delete", False)
        return False

    logger.info("guest_deleted", guest_id=guest_id, checkin_id=deleted["checkin_id"])
    _record("guest_delete", True)
    return True
