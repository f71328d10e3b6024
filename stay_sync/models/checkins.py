"""SQLAlchemy models for the arrival paperwork of a reservation."""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from stay_sync.models.base import Base


class Checkin(Base):
    """
    ORM model for the check-in record of one reservation.

    The row is opened when the first guest is registered and finalized with
    the payment details and the signed house rules / data-protection consent.
    Finalizing also sets Reservation.has_checkin in the same transaction.
    """

    __tablename__ = "checkins"

    id = Column(Integer, primary_key=True, autoincrement=True)
    reservation_id = Column(
        Integer,
        ForeignKey("reservations.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    payment_method = Column(String, nullable=True)  # e.g. "card", "transfer", "cash"
    payment_identifier = Column(String, nullable=True)
    payment_holder = Column(String, nullable=True)
    card_expiry = Column(String(5), nullable=True)  # MM/YY, card payments only
    payment_date = Column(Date, nullable=True)
    rules_accepted = Column(Boolean, nullable=False, default=False)
    gdpr_accepted = Column(Boolean, nullable=False, default=False)
    signed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    finalized_at = Column(DateTime(timezone=True), nullable=True)


class RegisteredGuest(Base):
    """
    ORM model for one traveller in the guest register of a check-in.

    Minors may point at an adult of the same check-in as guardian.
    """

    __tablename__ = "guests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    checkin_id = Column(
        Integer,
        ForeignKey("checkins.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    fullname = Column(String, nullable=False)
    surname1 = Column(String, nullable=False)
    surname2 = Column(String, nullable=True)
    sex = Column(String(1), nullable=True)
    birth_date = Column(Date, nullable=False)
    nationality = Column(String, nullable=False)
    document_type = Column(String, nullable=True)
    document_number = Column(String, nullable=False)
    support_number = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    country = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    is_minor = Column(Boolean, nullable=False, default=False)
    guardian_id = Column(Integer, ForeignKey("guests.id", ondelete="SET NULL"), nullable=True)
