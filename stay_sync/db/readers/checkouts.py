from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from stay_sync.models.checkouts import Checkout


def get_checkout(conn: Connection, reservation_id: int) -> Optional[dict[str, Any]]:
    """Fetch the departure report of a reservation, if one was recorded."""
    row = (
        conn.execute(select(Checkout).where(Checkout.reservation_id == reservation_id))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None
