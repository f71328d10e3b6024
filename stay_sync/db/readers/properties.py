from typing import Any

from sqlalchemy import select
from sqlalchemy.engine import Connection

from stay_sync.models.properties import Property


def property_exists(conn: Connection, property_id: int) -> bool:
    """
    Check if a property is registered.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (int): Property id to check.

    Returns:
        bool: True if the property exists, False otherwise.
    """
    result = conn.execute(select(Property.id).where(Property.id == property_id))
    return result.fetchone() is not None


def list_properties(conn: Connection) -> list[dict[str, Any]]:
    result = conn.execute(select(Property.id, Property.name, Property.url).order_by(Property.id))
    return [dict(row) for row in result.mappings()]
