# models/reservations.py

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from stay_sync.models.base import Base


class Reservation(Base):
    """
    ORM model for a guest booking of one property.

    The stay covers [check_in_date, check_out_date): the check-out date itself
    is not occupied. The calendar days of that range are flipped to reserved or
    paid in the same transaction that writes this row.

    The check-in and check-out calendar events ("operations") are tracked with
    their own remote ids and a shared ops_synced flag, guarded by ops_revision
    in the same way CalendarDay uses revision.
    """

    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    property_id = Column(
        Integer,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    guest_name = Column(String, nullable=False)
    guest_document = Column(String, nullable=True)
    guest_email = Column(String, nullable=True)
    guest_phone = Column(String, nullable=True)
    check_in_date = Column(Date, nullable=False)
    check_out_date = Column(Date, nullable=False, index=True)
    pax_count = Column(Integer, nullable=False, default=1)
    is_paid = Column(Boolean, nullable=False, default=False)
    has_checkin = Column(Boolean, nullable=False, default=False)
    has_checkout = Column(Boolean, nullable=False, default=False)
    remote_event_in_id = Column(String, nullable=True)
    remote_event_out_id = Column(String, nullable=True)
    ops_synced = Column(Boolean, nullable=False, default=False)
    ops_revision = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
