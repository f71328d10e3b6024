"""
Aggregate readers over the calendar ledger used by dashboards and reports.

Revenue only counts paid nights; occupancy counts reserved and paid nights
against the number of days in the period (month or calendar year).
"""

from calendar import isleap, monthrange
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import extract, func, literal, select, union_all
from sqlalchemy.engine import Connection

from stay_sync.models.checkins import Checkin, RegisteredGuest
from stay_sync.models.days import OCCUPIED_STATUSES, CalendarDay, DayStatus
from stay_sync.models.reservations import Reservation


def _month_bounds(year: int, month: int) -> tuple[date, date]:
    return date(year, month, 1), date(year, month, monthrange(year, month)[1])


def _as_money(total: Any) -> Decimal:
    return Decimal(str(total)).quantize(Decimal("0.01"))


def get_monthly_revenue(conn: Connection, property_id: int, year: int, month: int) -> Decimal:
    """Sum of prices of paid nights in the month."""
    first, last = _month_bounds(year, month)
    total = conn.execute(
        select(func.coalesce(func.sum(CalendarDay.price), 0)).where(
            CalendarDay.property_id == property_id,
            CalendarDay.day_date >= first,
            CalendarDay.day_date <= last,
            CalendarDay.status == DayStatus.PAID.value,
        )
    ).scalar_one()
    return _as_money(total)


def get_monthly_occupancy(conn: Connection, property_id: int, year: int, month: int) -> float:
    """Percentage (0-100) of the month's days that are reserved or paid."""
    first, last = _month_bounds(year, month)
    occupied = conn.execute(
        select(func.count()).where(
            CalendarDay.property_id == property_id,
            CalendarDay.day_date >= first,
            CalendarDay.day_date <= last,
            CalendarDay.status.in_(OCCUPIED_STATUSES),
        )
    ).scalar_one()
    return occupied / last.day * 100.0


def get_upcoming_movements(
    conn: Connection, property_id: int, today: date, limit: int = 10
) -> list[dict[str, Any]]:
    """
    Next check-ins and check-outs of a property, ordered by date.

    Returns:
        list[dict]: Items with reservation_id, guest_name, date and type
            ("CHECK-IN" or "CHECK-OUT")
    """
    arrivals = select(
        Reservation.id.label("reservation_id"),
        Reservation.guest_name.label("guest_name"),
        Reservation.check_in_date.label("date"),
        literal("CHECK-IN").label("type"),
    ).where(Reservation.property_id == property_id, Reservation.check_in_date >= today)
    departures = select(
        Reservation.id.label("reservation_id"),
        Reservation.guest_name.label("guest_name"),
        Reservation.check_out_date.label("date"),
        literal("CHECK-OUT").label("type"),
    ).where(Reservation.property_id == property_id, Reservation.check_out_date >= today)

    movements = union_all(arrivals, departures).subquery()
    result = conn.execute(
        select(movements).order_by(movements.c.date, movements.c.reservation_id).limit(limit)
    )
    return [dict(row) for row in result.mappings()]


def _in_year(property_id: int, year: int) -> tuple[Any, ...]:
    return (
        CalendarDay.property_id == property_id,
        CalendarDay.day_date >= date(year, 1, 1),
        CalendarDay.day_date <= date(year, 12, 31),
    )


def get_yearly_revenue_by_month(
    conn: Connection, property_id: int, year: int
) -> dict[int, Decimal]:
    """
    Revenue of paid nights per month of a year.

    Returns:
        dict[int, Decimal]: Month number (1-12) -> revenue; months without
            paid nights are 0.00
    """
    month = extract("month", CalendarDay.day_date)
    result = conn.execute(
        select(month.label("month"), func.sum(CalendarDay.price).label("total"))
        .where(*_in_year(property_id, year), CalendarDay.status == DayStatus.PAID.value)
        .group_by(month)
    )
    revenue = {m: _as_money(0) for m in range(1, 13)}
    for row in result:
        revenue[int(row.month)] = _as_money(row.total or 0)
    return revenue


def get_yearly_occupancy_by_month(
    conn: Connection, property_id: int, year: int
) -> dict[int, float]:
    """
    Occupancy percentage (0-100) per month of a year.

    Returns:
        dict[int, float]: Month number (1-12) -> occupied nights / days in month * 100
    """
    month = extract("month", CalendarDay.day_date)
    result = conn.execute(
        select(month.label("month"), func.count().label("occupied"))
        .where(*_in_year(property_id, year), CalendarDay.status.in_(OCCUPIED_STATUSES))
        .group_by(month)
    )
    occupancy = {m: 0.0 for m in range(1, 13)}
    for row in result:
        m = int(row.month)
        occupancy[m] = row.occupied / monthrange(year, m)[1] * 100.0
    return occupancy


def get_yearly_revenue(conn: Connection, property_id: int, year: int) -> Decimal:
    """Sum of prices of paid nights in the calendar year."""
    total = conn.execute(
        select(func.coalesce(func.sum(CalendarDay.price), 0)).where(
            *_in_year(property_id, year), CalendarDay.status == DayStatus.PAID.value
        )
    ).scalar_one()
    return _as_money(total)


def get_yearly_occupancy(conn: Connection, property_id: int, year: int) -> float:
    """Percentage (0-100) of the year's days that are reserved or paid."""
    occupied = conn.execute(
        select(func.count()).where(
            *_in_year(property_id, year), CalendarDay.status.in_(OCCUPIED_STATUSES)
        )
    ).scalar_one()
    return occupied / (366 if isleap(year) else 365) * 100.0


def get_nationality_stats(
    conn: Connection, property_id: int, limit: int = 10
) -> list[dict[str, Any]]:
    """
    Most frequent nationalities in the guest registers of a property.

    Returns:
        list[dict]: Items with nationality and count, most frequent first
    """
    count = func.count(RegisteredGuest.id).label("count")
    result = conn.execute(
        select(RegisteredGuest.nationality.label("nationality"), count)
        .join(Checkin, Checkin.id == RegisteredGuest.checkin_id)
        .join(Reservation, Reservation.id == Checkin.reservation_id)
        .where(Reservation.property_id == property_id)
        .group_by(RegisteredGuest.nationality)
        .order_by(count.desc(), RegisteredGuest.nationality)
        .limit(limit)
    )
    return [dict(row) for row in result.mappings()]
