from typing import Optional

import structlog
from sqlalchemy import delete, insert, update
from sqlalchemy.engine import Engine

from stay_sync.models.properties import Property
from stay_sync.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def insert_property(engine: Engine, name: str, url: Optional[str] = None) -> int:
    """
    Register a new rental property.

    Args:
        engine: SQLAlchemy engine to open a transaction.
        name: Display name of the property.
        url: Optional listing URL.

    Returns:
        int: New property id
    """
    if not name or not name.strip():
        raise ValueError("Property name must not be empty")

    with engine.begin() as conn:
        result = conn.execute(
            insert(Property).values(name=name.strip(), url=url, created_at=utc_now())
        )
        property_id = int(result.inserted_primary_key[0])

    logger.info("property_registered", property_id=property_id, name=name)
    return property_id


def update_property(engine: Engine, property_id: int, name: str, url: Optional[str] = None) -> bool:
    """
    Rename a property and replace its listing URL.

    Returns:
        bool: False if the property does not exist
    """
    if not name or not name.strip():
        raise ValueError("Property name must not be empty")

    with engine.begin() as conn:
        result = conn.execute(
            update(Property).where(Property.id == property_id).values(name=name.strip(), url=url)
        )

    if result.rowcount == 0:
        return False
    logger.info("property_updated", property_id=property_id, name=name)
    return True


def delete_property(engine: Engine, property_id: int) -> bool:
    """
    Delete a property together with its days, reservations and check-in records.

    Remote calendar events already pushed for it are left in place.

    Returns:
        bool: False if the property does not exist
    """
    with engine.begin() as conn:
        result = conn.execute(delete(Property).where(Property.id == property_id))

    if result.rowcount == 0:
        return False
    logger.info("property_deleted", property_id=property_id)
    return True
