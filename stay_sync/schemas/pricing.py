from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from stay_sync.models.days import Season


class PriceRangePayload(BaseModel):
    """
    Schema for pricing a date range. Both dates are inclusive.
    """

    start_date: date = Field(..., description="First date to price")
    end_date: date = Field(..., description="Last date to price (inclusive)")
    price: Decimal = Field(..., ge=0, description="Nightly price")
    season: Season = Field(..., description="Season tier of the price")


class ClassifyPayload(BaseModel):
    prices: list[Decimal] = Field(..., description="Configured nightly prices")
