from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from stay_sync.db.writers.reservations import GUEST_FIELDS


class GuestPayload(BaseModel):
    """
    Guest summary stored on the reservation. Only the name is required.
    """

    guest_name: str = Field(..., description="Name shown on the calendar events")
    guest_document: Optional[str] = Field(None, description="Identity document number")
    guest_email: Optional[str] = Field(None, description="Contact email")
    guest_phone: Optional[str] = Field(None, description="Contact phone")

    def as_guest(self) -> dict[str, Optional[str]]:
        return self.model_dump(include=set(GUEST_FIELDS))


class ReservationUpdatePayload(GuestPayload):
    """
    Schema for editing a reservation. All fields are rewritten.
    """

    check_in: date = Field(..., description="First night")
    check_out: date = Field(..., description="Departure date (exclusive)")
    pax_count: int = Field(1, description="Party size")
    is_paid: bool = Field(False, description="Whether the stay is paid")


class ReservationCreatePayload(ReservationUpdatePayload):
    """
    Schema for booking [check_in, check_out) on a property.
    """

    property_id: int = Field(..., description="Property to book")


class PaymentPayload(BaseModel):
    is_paid: bool = Field(..., description="New payment status")
