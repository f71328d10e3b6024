from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.engine import Engine

from stay_sync.dependencies import get_db_engine
from stay_sync.routes._helpers import conflict_409, validate_property_exists_or_404
from stay_sync.schemas.pricing import ClassifyPayload, PriceRangePayload
from stay_sync.services.booking import assign_price_range
from stay_sync.services.seasons import classify_seasons

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/seasons/classify")
def classify(payload: ClassifyPayload) -> dict[str, Any]:
    """
    Label each distinct price with its season tier.

    Example:
        >>> POST /seasons/classify {"prices": [50, 150]}
        {"seasons": [{"price": "50", "season": "low"}, {"price": "150", "season": "high"}]}
    """
    try:
        seasons = classify_seasons(payload.prices)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return {
        "seasons": [
            {"price": str(price), "season": season.value} for price, season in seasons.items()
        ]
    }


@router.put("/properties/{property_id}/prices")
def set_prices(
    property_id: int,
    payload: PriceRangePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, str]:
    """
    Price every free day of an inclusive date range.

    Reserved and paid days in the range keep their current price.
    """
    if payload.end_date < payload.start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must not be before start_date",
        )

    with engine.connect() as conn:
        validate_property_exists_or_404(conn, property_id)

    if not assign_price_range(
        engine,
        property_id,
        payload.start_date,
        payload.end_date,
        payload.price,
        payload.season,
    ):
        raise conflict_409("Price range could not be saved")

    return {
        "message": (
            f"Prices set for property {property_id} "
            f"from {payload.start_date.isoformat()} to {payload.end_date.isoformat()}"
        )
    }
