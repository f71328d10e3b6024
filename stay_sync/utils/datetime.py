"""Date and UTC datetime utilities."""

from datetime import date, datetime, timedelta, timezone
from typing import Iterator


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """
    Yield every date in the half-open range [start, end).

    Example:
        >>> list(iter_dates(date(2025, 6, 1), date(2025, 6, 3)))
        [datetime.date(2025, 6, 1), datetime.date(2025, 6, 2)]
    """
    current = start
    while current < end:
        yield current
        current += timedelta(days=1)


def stay_dates(check_in: date, check_out: date) -> list[date]:
    """Nights occupied by a stay: check-in inclusive, check-out exclusive."""
    return list(iter_dates(check_in, check_out))
