"""SQLAlchemy model for managed rental properties (VUTs)."""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from stay_sync.models.base import Base


class Property(Base):
    """
    ORM model for a single rental unit.

    Every calendar day and reservation is partitioned by property.
    """

    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    url = Column(String, nullable=True)  # Listing page, informational only
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
