"""
Validation helpers shared by the route handlers.

Each helper raises the HTTPException the API contract assigns to the failure:
400 for invalid input, 404 for unknown ids.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.engine import Connection

from stay_sync.db.readers.checkins import get_guest
from stay_sync.db.readers.properties import property_exists
from stay_sync.db.readers.reservations import get_reservation


def validate_property_exists_or_404(conn: Connection, property_id: int) -> None:
    """
    Raises:
        HTTPException: 404 if the property doesn't exist
    """
    if not property_exists(conn, property_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Property {property_id} not found",
        )


def validate_reservation_exists_or_404(conn: Connection, reservation_id: int) -> dict:
    """
    Fetch a reservation or raise 404.

    Returns:
        dict: The reservation row
    """
    reservation = get_reservation(conn, reservation_id)
    if reservation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Reservation {reservation_id} not found",
        )
    return reservation


def validate_guest_exists_or_404(conn: Connection, guest_id: int) -> dict:
    """
    Fetch a registered guest or raise 404.

    Returns:
        dict: The guest row
    """
    guest = get_guest(conn, guest_id)
    if guest is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Guest {guest_id} not found",
        )
    return guest


def validate_guardian_or_400(
    conn: Connection,
    checkin_id: Optional[int],
    guardian_id: int,
    guest_id: Optional[int] = None,
) -> None:
    """
    Raises:
        HTTPException: 400 unless the guardian is another adult of the same check-in
    """
    guardian = get_guest(conn, guardian_id)
    if (
        guardian is None
        or guardian["checkin_id"] != checkin_id
        or guardian["is_minor"]
        or guardian_id == guest_id
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Guardian {guardian_id} must be an adult registered in the same check-in",
        )


def validate_stay_or_400(check_in: date, check_out: date, pax_count: int, guest_name: str) -> None:
    """
    Raises:
        HTTPException: 400 for an empty or reversed stay, no guests, or no guest name
    """
    if check_out <= check_in:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="check_out must be after check_in",
        )
    if pax_count < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="pax_count must be at least 1",
        )
    if not guest_name or not guest_name.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="guest_name is required",
        )


def validate_month_or_400(year: int, month: int) -> None:
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid month {year}-{month}",
        )


def conflict_409(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)


def validate_year_or_400(year: int) -> None:
    if not 1 <= year <= 9999:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid year {year}",
        )
