from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.engine import Engine

from stay_sync.dependencies import get_db_engine
from stay_sync.routes._helpers import (
    conflict_409,
    validate_property_exists_or_404,
    validate_reservation_exists_or_404,
    validate_stay_or_400,
)
from stay_sync.db.readers.checkins import get_checkin_for_reservation, get_guests_by_checkin
from stay_sync.db.readers.checkouts import get_checkout
from stay_sync.schemas.checkins import CheckinPayload, CheckoutPayload
from stay_sync.schemas.reservations import (
    PaymentPayload,
    ReservationCreatePayload,
    ReservationUpdatePayload,
)
from stay_sync.services.booking import (
    cancel_reservation,
    complete_checkin,
    complete_checkout,
    create_reservation,
    update_payment_status,
    update_reservation,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/reservations", status_code=status.HTTP_201_CREATED)
def create_reservation_endpoint(
    payload: ReservationCreatePayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Book a stay. The nights [check_in, check_out) must all be free.

    Returns:
        dict: The new reservation id

    Raises:
        HTTPException: 400 on invalid dates, 404 on unknown property,
            409 if the nights are taken or the booking could not be saved
    """
    validate_stay_or_400(payload.check_in, payload.check_out, payload.pax_count, payload.guest_name)
    with engine.connect() as conn:
        validate_property_exists_or_404(conn, payload.property_id)

    reservation_id = create_reservation(
        engine,
        payload.property_id,
        payload.as_guest(),
        payload.check_in,
        payload.check_out,
        payload.pax_count,
        payload.is_paid,
    )
    if reservation_id is None:
        raise conflict_409("Reservation could not be created: dates unavailable")

    return {"id": reservation_id, "message": f"Reservation {reservation_id} created"}


@router.get("/reservations/{reservation_id}")
def get_reservation_endpoint(
    reservation_id: int, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    with engine.connect() as conn:
        return validate_reservation_exists_or_404(conn, reservation_id)


@router.put("/reservations/{reservation_id}")
def update_reservation_endpoint(
    reservation_id: int,
    payload: ReservationUpdatePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, str]:
    """
    Rewrite a reservation. Nights leaving the stay are freed.
    """
    validate_stay_or_400(payload.check_in, payload.check_out, payload.pax_count, payload.guest_name)
    with engine.connect() as conn:
        validate_reservation_exists_or_404(conn, reservation_id)

    if not update_reservation(
        engine,
        reservation_id,
        payload.as_guest(),
        payload.check_in,
        payload.check_out,
        payload.pax_count,
        payload.is_paid,
    ):
        raise conflict_409(f"Reservation {reservation_id} could not be updated")

    return {"message": f"Reservation {reservation_id} updated"}


@router.patch("/reservations/{reservation_id}/payment")
def update_payment_endpoint(
    reservation_id: int,
    payload: PaymentPayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, str]:
    with engine.connect() as conn:
        validate_reservation_exists_or_404(conn, reservation_id)

    if not update_payment_status(engine, reservation_id, payload.is_paid):
        raise conflict_409(f"Payment of reservation {reservation_id} could not be updated")

    return {"message": f"Reservation {reservation_id} marked {'paid' if payload.is_paid else 'unpaid'}"}


@router.delete("/reservations/{reservation_id}")
def cancel_reservation_endpoint(
    reservation_id: int, engine: Engine = Depends(get_db_engine)
) -> dict[str, str]:
    """
    Cancel a reservation and free its nights.
    """
    with engine.connect() as conn:
        validate_reservation_exists_or_404(conn, reservation_id)

    if not cancel_reservation(engine, reservation_id):
        raise conflict_409(f"Reservation {reservation_id} could not be cancelled")

    return {"message": f"Reservation {reservation_id} cancelled"}


@router.post("/reservations/{reservation_id}/checkin")
def checkin_endpoint(
    reservation_id: int,
    payload: Optional[CheckinPayload] = None,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, str]:
    """
    Mark a reservation checked in, optionally finalizing its check-in record.

    Raises:
        HTTPException: 400 if the house rules or data protection consent is missing
    """
    if payload is not None and not (payload.rules_accepted and payload.gdpr_accepted):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="House rules and data protection consent must both be accepted",
        )
    with engine.connect() as conn:
        validate_reservation_exists_or_404(conn, reservation_id)

    payment = payload.as_payment() if payload is not None else None
    if not complete_checkin(engine, reservation_id, payment):
        raise conflict_409(f"Check-in of reservation {reservation_id} could not be saved")

    return {"message": f"Reservation {reservation_id} checked in"}


@router.post("/reservations/{reservation_id}/checkout")
def checkout_endpoint(
    reservation_id: int,
    payload: Optional[CheckoutPayload] = None,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, str]:
    """
    Mark a reservation checked out, optionally storing the departure report.
    """
    with engine.connect() as conn:
        validate_reservation_exists_or_404(conn, reservation_id)

    report = payload.as_report() if payload is not None else None
    if not complete_checkout(engine, reservation_id, report):
        raise conflict_409(f"Check-out of reservation {reservation_id} could not be saved")

    return {"message": f"Reservation {reservation_id} checked out"}


@router.get("/reservations/{reservation_id}/checkin")
def get_checkin_endpoint(
    reservation_id: int, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Check-in record of a reservation with its guest register.

    Raises:
        HTTPException: 404 if the reservation or its check-in record does not exist
    """
    with engine.connect() as conn:
        validate_reservation_exists_or_404(conn, reservation_id)
        checkin = get_checkin_for_reservation(conn, reservation_id)
        if checkin is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Reservation {reservation_id} has no check-in record",
            )
        checkin["guests"] = get_guests_by_checkin(conn, checkin["id"])

    return checkin


@router.get("/reservations/{reservation_id}/checkout")
def get_checkout_endpoint(
    reservation_id: int, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    with engine.connect() as conn:
        validate_reservation_exists_or_404(conn, reservation_id)
        checkout = get_checkout(conn, reservation_id)

    if checkout is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Reservation {reservation_id} has no checkout record",
        )
    return checkout
