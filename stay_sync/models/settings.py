"""SQLAlchemy model for the remote calendar configuration."""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from stay_sync.models.base import Base

SETTINGS_ROW_ID = 1


class CalendarSettings(Base):
    """
    ORM model holding the single Google Calendar target of the installation.

    There is exactly one row (id = 1). calendar_id is the Google calendar the
    ledger is mirrored into; credentials_path points at the OAuth client
    secrets JSON downloaded from Google Cloud.
    """

    __tablename__ = "calendar_settings"

    id = Column(Integer, primary_key=True, autoincrement=False)
    calendar_id = Column(String, nullable=True)
    credentials_path = Column(String, nullable=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
