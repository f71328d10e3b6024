from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.engine import Engine

from stay_sync.db.readers.checkins import get_checkin_for_reservation, get_guests_by_checkin
from stay_sync.dependencies import get_db_engine
from stay_sync.routes._helpers import (
    conflict_409,
    validate_guardian_or_400,
    validate_guest_exists_or_404,
    validate_reservation_exists_or_404,
)
from stay_sync.schemas.checkins import RegisteredGuestPayload
from stay_sync.services.guests import edit_guest, register_guest, remove_guest

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/reservations/{reservation_id}/guests", status_code=status.HTTP_201_CREATED)
def add_guest_endpoint(
    reservation_id: int,
    payload: RegisteredGuestPayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Register a traveller for the check-in of a reservation.

    The check-in record is opened with the first guest.

    Raises:
        HTTPException: 404 on unknown reservation, 400 on an invalid guardian
    """
    with engine.connect() as conn:
        validate_reservation_exists_or_404(conn, reservation_id)
        if payload.is_minor and payload.guardian_id is not None:
            checkin = get_checkin_for_reservation(conn, reservation_id)
            validate_guardian_or_400(
                conn, checkin["id"] if checkin else None, payload.guardian_id
            )

    guest_id = register_guest(engine, reservation_id, payload.as_guest())
    if guest_id is None:
        raise conflict_409(f"Guest could not be registered for reservation {reservation_id}")

    return {"id": guest_id, "message": f"Guest {guest_id} registered"}


@router.get("/reservations/{reservation_id}/guests")
def list_guests_endpoint(
    reservation_id: int,
    adults_only: bool = Query(False, description="Only adults (guardian candidates)"),
    engine: Engine = Depends(get_db_engine),
) -> list[dict[str, Any]]:
    with engine.connect() as conn:
        validate_reservation_exists_or_404(conn, reservation_id)
        checkin = get_checkin_for_reservation(conn, reservation_id)
        if checkin is None:
            return []
        return get_guests_by_checkin(conn, checkin["id"], adults_only=adults_only)


@router.get("/guests/{guest_id}")
def get_guest_endpoint(guest_id: int, engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    with engine.connect() as conn:
        return validate_guest_exists_or_404(conn, guest_id)


@router.put("/guests/{guest_id}")
def update_guest_endpoint(
    guest_id: int,
    payload: RegisteredGuestPayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, str]:
    with engine.connect() as conn:
        current = validate_guest_exists_or_404(conn, guest_id)
        if payload.is_minor and payload.guardian_id is not None:
            validate_guardian_or_400(conn, current["checkin_id"], payload.guardian_id, guest_id)

    if not edit_guest(engine, guest_id, payload.as_guest()):
        raise conflict_409(f"Guest {guest_id} could not be updated")

    return {"message": f"Guest {guest_id} updated"}


@router.delete("/guests/{guest_id}")
def delete_guest_endpoint(guest_id: int, engine: Engine = Depends(get_db_engine)) -> dict[str, str]:
    with engine.connect() as conn:
        validate_guest_exists_or_404(conn, guest_id)

    if not remove_guest(engine, guest_id):
        raise conflict_409(f"Guest {guest_id} could not be deleted")

    return {"message": f"Guest {guest_id} deleted"}
