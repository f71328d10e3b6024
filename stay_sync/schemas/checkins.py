from datetime import date, time
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class CheckinPayload(BaseModel):
    """
    Schema for finalizing a check-in: payment record and signed consents.
    """

    payment_method: Literal["card", "transfer", "cash", "other"] = Field(
        ..., description="How the stay was paid"
    )
    payment_identifier: str = Field(
        ..., min_length=1, description="Card last digits, IBAN or receipt number"
    )
    payment_holder: str = Field(..., min_length=1, description="Holder of the payment method")
    card_expiry: Optional[str] = Field(
        None, pattern=r"^(0[1-9]|1[0-2])/\d{2}$", description="MM/YY, card payments only"
    )
    payment_date: date = Field(..., description="Date the payment was made")
    rules_accepted: bool = Field(..., description="House rules signed")
    gdpr_accepted: bool = Field(..., description="Data protection consent signed")

    def as_payment(self) -> dict[str, Any]:
        return self.model_dump()


class RegisteredGuestPayload(BaseModel):
    """
    Schema for one traveller of the guest register.

    Minors may name an adult of the same check-in as guardian_id.
    """

    fullname: str = Field(..., min_length=1, description="Given name(s)")
    surname1: str = Field(..., min_length=1, description="First surname")
    surname2: Optional[str] = Field(None, description="Second surname")
    sex: Optional[Literal["M", "F", "X"]] = Field(None, description="Sex as on the document")
    birth_date: date = Field(..., description="Date of birth")
    nationality: str = Field(..., min_length=1, description="Nationality, e.g. ESP")
    document_type: Optional[str] = Field(None, description="DNI, NIE, passport...")
    document_number: str = Field(..., min_length=1, description="Identity document number")
    support_number: Optional[str] = Field(None, description="Document support number")
    address: Optional[str] = Field(None, description="Street address")
    city: Optional[str] = Field(None, description="Municipality")
    country: Optional[str] = Field(None, description="Country of residence")
    phone: Optional[str] = Field(None, description="Contact phone")
    email: Optional[str] = Field(None, description="Contact email")
    is_minor: bool = Field(False, description="Whether the guest is a minor")
    guardian_id: Optional[int] = Field(None, description="Registered adult responsible")

    def as_guest(self) -> dict[str, Any]:
        return self.model_dump()


class CheckoutPayload(BaseModel):
    """
    Schema for the departure report.
    """

    exit_time: Optional[time] = Field(None, description="Local time the guests left")
    keys_returned: bool = Field(True, description="Whether all keys came back")
    damage_detected: bool = Field(False, description="Whether damage was found")
    damage_description: Optional[str] = Field(None, description="Damage report")

    def as_report(self) -> dict[str, Any]:
        return self.model_dump()
