# models/checkouts.py

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Time
from sqlalchemy.sql import func

from stay_sync.models.base import Base


class Checkout(Base):
    """
    ORM model for the departure report of one reservation.

    Recording it also sets Reservation.has_checkout; a second report for the
    same reservation replaces the first.
    """

    __tablename__ = "checkouts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    reservation_id = Column(
        Integer,
        ForeignKey("reservations.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    exit_time = Column(Time, nullable=True)  # Local time the guests left
    keys_returned = Column(Boolean, nullable=False, default=True)
    damage_detected = Column(Boolean, nullable=False, default=False)
    damage_description = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
