"""SQLAlchemy model for the per-property, per-date calendar ledger."""

from enum import Enum

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.sql import func

from stay_sync.models.base import Base


class Season(str, Enum):
    LOW = "low"
    AVERAGE = "average"
    HIGH = "high"
    NONE = "none"


class DayStatus(str, Enum):
    FREE = "free"
    RESERVED = "reserved"
    PAID = "paid"


OCCUPIED_STATUSES = (DayStatus.RESERVED.value, DayStatus.PAID.value)


class CalendarDay(Base):
    """
    ORM model for one date of one property.

    A row is created the first time a date is priced (or booked) and is never
    deleted afterwards; cancellations only reset its status to free.

    is_synced and remote_event_id together track the remote calendar event for
    the day: is_synced turns true only after the event write succeeded.
    revision is bumped on every local change that clears is_synced, so a push
    that raced with a local edit does not mark the newer state as synchronized.
    """

    __tablename__ = "days"

    property_id = Column(
        Integer,
        ForeignKey("properties.id", ondelete="CASCADE"),
        primary_key=True,
    )
    day_date = Column(Date, primary_key=True)
    price = Column(Numeric(10, 2), nullable=True)  # NULL when booked before being priced
    season = Column(String(16), nullable=False, default=Season.NONE.value)
    status = Column(String(16), nullable=False, default=DayStatus.FREE.value, index=True)
    is_synced = Column(Boolean, nullable=False, default=False, index=True)
    remote_event_id = Column(String, nullable=True)
    revision = Column(Integer, nullable=False, default=0)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
