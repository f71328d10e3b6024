"""
Deterministic titles, descriptions and colors of the remote calendar events.

Color ids are Google Calendar's fixed event palette:
10 basil (green), 6 tangerine (orange), 11 tomato (red), 8 graphite (grey),
7 peacock (blue).
"""

from decimal import Decimal
from typing import Any, Optional

SEASON_COLORS = {
    "low": "10",
    "average": "6",
    "high": "11",
}
DEFAULT_COLOR = "8"

CHECKIN_PENDING_COLOR = "7"
CHECKIN_DONE_COLOR = "10"
CHECKOUT_PENDING_COLOR = "6"
CHECKOUT_DONE_COLOR = "8"


def color_for_season(season: Optional[str]) -> str:
    if season is None:
        return DEFAULT_COLOR
    return SEASON_COLORS.get(season.lower(), DEFAULT_COLOR)


def _format_price(price: Optional[Decimal]) -> Optional[str]:
    if price is None:
        return None
    return f"{Decimal(price):.0f}€"


def day_event_text(day: dict[str, Any]) -> tuple[str, str, str]:
    """
    Build (title, description, color_id) for a ledger day.

    Args:
        day: Row from get_unsynced_future_days (status, price, season, guest_name)

    Example:
        >>> day_event_text({"status": "paid", "price": Decimal("100"), "season": "high",
        ...                 "guest_name": "Ana"})
        ('[PAID] Ana - 100€', 'Status: paid\\nPrice: 100', '11')
    """
    status = day["status"]
    price = _format_price(day.get("price"))
    guest = day.get("guest_name")

    title = f"[{status.upper()}]"
    if guest:
        title += f" {guest}"
    if price:
        title += f" - {price}"

    price_value = day.get("price")
    description = f"Status: {status}\nPrice: {price_value if price_value is not None else '-'}"
    return title, description, color_for_season(day.get("season"))


def checkin_event_text(op: dict[str, Any]) -> tuple[str, str, str]:
    done = bool(op["has_checkin"])
    title = ("[✓] " if done else "➡ ") + f"CHECK-IN: {op['guest_name']}"
    description = f"Reservation ID: {op['id']}\nStatus: {'COMPLETED' if done else 'PENDING'}"
    return title, description, CHECKIN_DONE_COLOR if done else CHECKIN_PENDING_COLOR


def checkout_event_text(op: dict[str, Any]) -> tuple[str, str, str]:
    done = bool(op["has_checkout"])
    title = ("[✓] " if done else "⬅ ") + f"CHECK-OUT: {op['guest_name']}"
    description = f"Reservation ID: {op['id']}\nStatus: {'COMPLETED' if done else 'PENDING'}"
    return title, description, CHECKOUT_DONE_COLOR if done else CHECKOUT_PENDING_COLOR
