"""
Season classification of nightly prices.

The operator only configures prices; the season tier of each price follows
from its rank among all configured prices:

- one price is always "average"
- two prices are "low" and "high"
- otherwise the rank percentile r / (n - 1) buckets the price:
  below 0.33 is "low", below 0.66 is "average", the rest is "high"

Labels are recomputed from scratch whenever the price set changes, so they do
not depend on insertion order.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Union

from stay_sync.models.days import Season

LOW_PERCENTILE = 0.33
AVERAGE_PERCENTILE = 0.66

PriceLike = Union[Decimal, int, float, str]


def _as_price(value: PriceLike) -> Decimal:
    # str() keeps 0.1 as Decimal("0.1") instead of its binary expansion
    price = value if isinstance(value, Decimal) else Decimal(str(value))
    if price < 0:
        raise ValueError(f"Price must not be negative: {value}")
    return price


def classify_seasons(prices: Iterable[PriceLike]) -> dict[Decimal, Season]:
    """
    Assign a season tier to every distinct price.

    Args:
        prices: Configured nightly prices; duplicates are ignored

    Returns:
        dict[Decimal, Season]: Season per price, in ascending price order

    Example:
        >>> classify_seasons([30, 10, 20])
        {Decimal('10'): <Season.LOW: 'low'>, Decimal('20'): <Season.AVERAGE: 'average'>,
         Decimal('30'): <Season.HIGH: 'high'>}
    """
    ordered = sorted({_as_price(p) for p in prices})
    count = len(ordered)

    if count == 0:
        return {}
    if count == 1:
        return {ordered[0]: Season.AVERAGE}
    if count == 2:
        return {ordered[0]: Season.LOW, ordered[1]: Season.HIGH}

    seasons: dict[Decimal, Season] = {}
    for rank, price in enumerate(ordered):
        percentile = rank / (count - 1)
        if percentile < LOW_PERCENTILE:
            seasons[price] = Season.LOW
        elif percentile < AVERAGE_PERCENTILE:
            seasons[price] = Season.AVERAGE
        else:
            seasons[price] = Season.HIGH
    return seasons
