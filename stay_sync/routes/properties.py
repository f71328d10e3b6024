from datetime import date
from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.engine import Engine

from stay_sync.db.readers.days import get_month_days
from stay_sync.db.readers.properties import list_properties
from stay_sync.db.readers.stats import (
    get_monthly_occupancy,
    get_monthly_revenue,
    get_nationality_stats,
    get_upcoming_movements,
    get_yearly_occupancy,
    get_yearly_occupancy_by_month,
    get_yearly_revenue,
    get_yearly_revenue_by_month,
)
from stay_sync.db.writers.properties import delete_property, insert_property, update_property
from stay_sync.dependencies import get_db_engine
from stay_sync.routes._helpers import (
    validate_month_or_400,
    validate_property_exists_or_404,
    validate_year_or_400,
)
from stay_sync.schemas.properties import PropertyCreatePayload

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/properties", status_code=status.HTTP_201_CREATED)
def create_property(
    payload: PropertyCreatePayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Register a rental property.

    Returns:
        dict: The new property id
    """
    if not payload.name.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Property name is required"
        )

    try:
        property_id = insert_property(engine, payload.name, payload.url)
    except Exception as e:
        logger.exception("property_creation_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"id": property_id, "message": f"Property {property_id} created"}


@router.get("/properties")
def get_properties(engine: Engine = Depends(get_db_engine)) -> list[dict[str, Any]]:
    with engine.connect() as conn:
        return list_properties(conn)


@router.put("/properties/{property_id}")
def update_property_endpoint(
    property_id: int,
    payload: PropertyCreatePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, str]:
    if not payload.name.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Property name is required"
        )

    if not update_property(engine, property_id, payload.name, payload.url):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Property {property_id} not found"
        )

    return {"message": f"Property {property_id} updated"}


@router.delete("/properties/{property_id}")
def delete_property_endpoint(
    property_id: int, engine: Engine = Depends(get_db_engine)
) -> dict[str, str]:
    """
    Delete a property with its ledger, reservations and check-in records.

    Events already mirrored to the remote calendar are not removed.
    """
    if not delete_property(engine, property_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Property {property_id} not found"
        )

    return {"message": f"Property {property_id} deleted"}


@router.get("/properties/{property_id}/days")
def get_days(
    property_id: int,
    year: int = Query(..., description="Four-digit year"),
    month: int = Query(..., description="Month number, 1-12"),
    engine: Engine = Depends(get_db_engine),
) -> list[dict[str, Any]]:
    """
    List the ledger rows of one month, ordered by date.

    Dates that were never priced nor booked are absent.
    """
    validate_month_or_400(year, month)
    with engine.connect() as conn:
        validate_property_exists_or_404(conn, property_id)
        return get_month_days(conn, property_id, year, month)


@router.get("/properties/{property_id}/stats")
def get_stats(
    property_id: int,
    year: int = Query(..., description="Four-digit year"),
    month: int = Query(..., description="Month number, 1-12"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Revenue, occupancy and upcoming check-ins/check-outs of a property.

    Example:
        >>> GET /properties/1/stats?year=2025&month=6
        {"revenue": "300.00", "occupancy": 10.0, "upcoming": [...]}
    """
    validate_month_or_400(year, month)
    with engine.connect() as conn:
        validate_property_exists_or_404(conn, property_id)
        revenue = get_monthly_revenue(conn, property_id, year, month)
        occupancy = get_monthly_occupancy(conn, property_id, year, month)
        upcoming = get_upcoming_movements(conn, property_id, date.today())

    return {
        "property_id": property_id,
        "year": year,
        "month": month,
        "revenue": str(revenue),
        "occupancy": occupancy,
        "upcoming": upcoming,
    }


@router.get("/properties/{property_id}/stats/yearly")
def get_yearly_stats(
    property_id: int,
    year: int = Query(..., description="Four-digit year"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Revenue and occupancy of a property per month and for the whole year.

    Example:
        >>> GET /properties/1/stats/yearly?year=2025
        {"revenue": "300.00", "occupancy": 0.82,
         "months": [{"month": 1, "revenue": "0.00", "occupancy": 0.0}, ...]}
    """
    validate_year_or_400(year)
    with engine.connect() as conn:
        validate_property_exists_or_404(conn, property_id)
        revenue_by_month = get_yearly_revenue_by_month(conn, property_id, year)
        occupancy_by_month = get_yearly_occupancy_by_month(conn, property_id, year)
        revenue = get_yearly_revenue(conn, property_id, year)
        occupancy = get_yearly_occupancy(conn, property_id, year)

    return {
        "property_id": property_id,
        "year": year,
        "revenue": str(revenue),
        "occupancy": occupancy,
        "months": [
            {
                "month": month,
                "revenue": str(revenue_by_month[month]),
                "occupancy": occupancy_by_month[month],
            }
            for month in range(1, 13)
        ],
    }


@router.get("/properties/{property_id}/stats/nationalities")
def get_nationalities(
    property_id: int,
    limit: int = Query(10, ge=1, le=100, description="Maximum number of nationalities"),
    engine: Engine = Depends(get_db_engine),
) -> list[dict[str, Any]]:
    with engine.connect() as conn:
        validate_property_exists_or_404(conn, property_id)
        return get_nationality_stats(conn, property_id, limit=limit)
