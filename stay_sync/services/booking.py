"""
Booking engine: the operations the UI/API layer calls to change the ledger.

Each operation runs in one database transaction and reports success as a
boolean (or the new id). Invalid input is rejected before the transaction is
opened; any failure inside it rolls back every row it touched. Nothing is
retried here: the caller decides whether to try again.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional

import structlog
from sqlalchemy.engine import Connection, Engine

from stay_sync.db.writers.checkins import finalize_checkin
from stay_sync.db.writers.checkouts import upsert_checkout
from stay_sync.db.writers.days import upsert_price_range
from stay_sync.db.writers.reservations import (
    BookingConflictError,
    ReservationNotFoundError,
    delete_reservation,
    insert_reservation,
    set_operation_flag,
    update_payment,
    update_reservation_details,
    validate_stay,
)
from stay_sync.metrics import booking_operations
from stay_sync.models.days import Season

logger = structlog.get_logger(__name__)


def _record(operation: str, ok: bool) -> None:
    booking_operations.labels(operation=operation, status="success" if ok else "failure").inc()


def assign_price_range(
    engine: Engine,
    property_id: int,
    start_date: date,
    end_date: date,
    price: Decimal,
    season: Season,
) -> bool:
    """
    Price every free day of [start_date, end_date] (inclusive).

    Reserved and paid days keep their price. The batch succeeds or fails as a
    whole.

    Returns:
        bool: True if the whole range was written
    """
    if end_date < start_date:
        logger.warning(
            "price_range_rejected",
            property_id=property_id,
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
        )
        _record("assign_price_range", False)
        return False

    try:
        with engine.begin() as conn:
            count = upsert_price_range(conn, property_id, start_date, end_date, price, season)
    except Exception as e:
        logger.exception("price_range_failed", property_id=property_id, error=str(e))
        _record("assign_price_range", False)
        return False

    logger.info(
        "price_range_assigned",
        property_id=property_id,
        days=count,
        price=str(price),
        season=season.value,
    )
    _record("assign_price_range", True)
    return True


def create_reservation(
    engine: Engine,
    property_id: int,
    guest: dict[str, Optional[str]],
    check_in: date,
    check_out: date,
    pax_count: int,
    is_paid: bool,
) -> Optional[int]:
    """
    Book [check_in, check_out) for a guest.

    Args:
        engine: SQLAlchemy engine
        property_id: Property to book
        guest: guest_name (required), guest_document, guest_email, guest_phone
        check_in: First night
        check_out: Departure date, strictly after check_in
        pax_count: Party size
        is_paid: Paid bookings mark their days "paid", others "reserved"

    Returns:
        Optional[int]: New reservation id, or None if the booking was rejected
    """
    try:
        validate_stay(check_in, check_out, pax_count)
        if not guest.get("guest_name"):
            raise ValueError("guest_name is required")
    except ValueError as e:
        logger.warning("reservation_rejected", property_id=property_id, reason=str(e))
        _record("create", False)
        return None

    try:
        with engine.begin() as conn:
            reservation_id = insert_reservation(
                conn, property_id, guest, check_in, check_out, pax_count, is_paid
            )
    except BookingConflictError as e:
        logger.warning(
            "reservation_conflict",
            property_id=property_id,
            dates=[d.isoformat() for d in e.dates],
        )
        _record("create", False)
        return None
    except Exception as e:
        logger.exception("reservation_failed", property_id=property_id, error=str(e))
        _record("create", False)
        return None

    logger.info(
        "reservation_created",
        reservation_id=reservation_id,
        property_id=property_id,
        check_in=check_in.isoformat(),
        check_out=check_out.isoformat(),
        is_paid=is_paid,
    )
    _record("create", True)
    return reservation_id


def update_reservation(
    engine: Engine,
    reservation_id: int,
    guest: dict[str, Optional[str]],
    check_in: date,
    check_out: date,
    pax_count: int,
    is_paid: bool,
) -> bool:
    """
    Edit a reservation, re-deriving the status of every affected day.

    Returns:
        bool: True if the edit was committed
    """
    try:
        validate_stay(check_in, check_out, pax_count)
        if not guest.get("guest_name"):
            raise ValueError("guest_name is required")
    except ValueError as e:
        logger.warning("reservation_update_rejected", reservation_id=reservation_id, reason=str(e))
        _record("update", False)
        return False

    try:
        with engine.begin() as conn:
            update_reservation_details(
                conn, reservation_id, guest, check_in, check_out, pax_count, is_paid
            )
    except (BookingConflictError, ReservationNotFoundError) as e:
        logger.warning("reservation_update_rejected", reservation_id=reservation_id, reason=str(e))
        _record("update", False)
        return False
    except Exception as e:
        logger.exception("reservation_update_failed", reservation_id=reservation_id, error=str(e))
        _record("update", False)
        return False

    logger.info("reservation_updated", reservation_id=reservation_id)
    _record("update", True)
    return True


def update_payment_status(engine: Engine, reservation_id: int, is_paid: bool) -> bool:
    """
    Toggle a reservation between reserved and paid over its current range.

    Returns:
        bool: True if the change was committed
    """
    try:
        with engine.begin() as conn:
            update_payment(conn, reservation_id, is_paid)
    except ReservationNotFoundError as e:
        logger.warning("payment_update_rejected", reservation_id=reservation_id, reason=str(e))
        _record("payment", False)
        return False
    except Exception as e:
        logger.exception("payment_update_failed", reservation_id=reservation_id, error=str(e))
        _record("payment", False)
        return False

    logger.info("payment_status_updated", reservation_id=reservation_id, is_paid=is_paid)
    _record("payment", True)
    return True


def cancel_reservation(engine: Engine, reservation_id: int) -> bool:
    """
    Delete a reservation and free its nights.

    Returns:
        bool: True if the reservation existed and was removed
    """
    try:
        with engine.begin() as conn:
            deleted = delete_reservation(conn, reservation_id)
    except ReservationNotFoundError as e:
        logger.warning("cancel_rejected", reservation_id=reservation_id, reason=str(e))
        _record("cancel", False)
        return False
    except Exception as e:
        logger.exception("cancel_failed", reservation_id=reservation_id, error=str(e))
        _record("cancel", False)
        return False

    logger.info(
        "reservation_cancelled",
        reservation_id=reservation_id,
        property_id=deleted["property_id"],
    )
    _record("cancel", True)
    return True


def _complete_operation(
    engine: Engine, reservation_id: int, operation: str, write: Callable[[Connection], Any]
) -> bool:
    try:
        with engine.begin() as conn:
            write(conn)
    except (ReservationNotFoundError, ValueError) as e:
        logger.warning(f"{operation}_rejected", reservation_id=reservation_id, reason=str(e))
        _record(operation, False)
        return False
    except Exception as e:
        logger.exception(f"{operation}_failed", reservation_id=reservation_id, error=str(e))
        _record(operation, False)
        return False

    logger.info(f"{operation}_completed", reservation_id=reservation_id)
    _record(operation, True)
    return True


def complete_checkin(
    engine: Engine, reservation_id: int, payment: Optional[dict[str, Any]] = None
) -> bool:
    """
    Mark the guests of a reservation as checked in.

    With a payment record (payment_method, payment_identifier, payment_holder,
    card_expiry, payment_date, rules_accepted, gdpr_accepted) the check-in
    record is finalized in the same transaction; both consents must be given.
    Without one only the completion flag is set.

    Returns:
        bool: True if the check-in was committed
    """
    if payment is None:
        return _complete_operation(
            engine,
            reservation_id,
            "checkin",
            lambda conn: set_operation_flag(conn, reservation_id, "has_checkin"),
        )
    return _complete_operation(
        engine,
        reservation_id,
        "checkin",
        lambda conn: finalize_checkin(conn, reservation_id, payment),
    )


def complete_checkout(
    engine: Engine, reservation_id: int, report: Optional[dict[str, Any]] = None
) -> bool:
    """
    Mark the guests of a reservation as checked out.

    With a departure report (exit_time, keys_returned, damage_detected,
    damage_description) the report is stored in the same transaction.
    """
    if report is None:
        return _complete_operation(
            engine,
            reservation_id,
            "checkout",
            lambda conn: set_operation_flag(conn, reservation_id, "has_checkout"),
        )
    return _complete_operation(
        engine,
        reservation_id,
        "checkout",
        lambda conn: upsert_checkout(
            conn,
            reservation_id,
            report.get("exit_time"),
            report.get("keys_returned", True),
            report.get("damage_detected", False),
            report.get("damage_description"),
        ),
    )
