"""
District performance lookup and comparison against prior periods and the
state average.
"""

import logging
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database.models import District, Performance
from ..utils.errors import NotFoundError

logger = logging.getLogger(__name__)

HISTORY_MONTHS = 12


def shift_months(month: date, months: int) -> date:
    """Move a first-of-month date by a number of calendar months."""
    index = month.year * 12 + (month.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def round_half_up(value: float, places: int = 0):
    """Round with ties away from zero; an int when places is 0."""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def percent_change(current: float, previous: Optional[float]) -> float:
    """Change vs. previous in percent; 0 when there is nothing to compare against."""
    if not previous:
        return 0.0
    return round_half_up((current - previous) / previous * 100, 2)


def format_date(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime("%d %b %Y")


def format_month(value: date) -> str:
    return value.strftime("%b %Y")


def find_month(db: Session, state: str, district: str, month: date) -> Optional[Performance]:
    return db.query(Performance).filter(
        Performance.state_code == state,
        Performance.district_name == district,
        Performance.data_month == month,
    ).first()


def state_average(db: Session, state: str, month: date) -> Optional[dict]:
    """Mean households, days and wage across all districts of a state for one month."""
    row = db.query(
        func.count(Performance.id),
        func.avg(Performance.households_worked),
        func.avg(Performance.avg_days_provided),
        func.avg(Performance.avg_wage),
    ).filter(
        Performance.state_code == state,
        Performance.data_month == month,
    ).one()

    count, households, days, wage = row
    if not count:
        return None
    return {
        "households": float(households),
        "avg_days": float(days),
        "avg_wage": float(wage),
    }


def state_display_name(db: Session, state: str, district: str) -> str:
    row = db.query(District.state_name).filter(
        District.state_code == state,
        District.district_name == district,
    ).first()
    return row[0] if row else state


def get_district_data(db: Session, state: str, district: str) -> dict:
    """
    Latest metrics for a district with month-on-month, year-on-year and
    state-average comparisons.

    Raises:
        NotFoundError: if no performance row exists for the district
    """
    current = db.query(Performance).filter(
        Performance.state_code == state,
        Performance.district_name == district,
    ).order_by(Performance.data_month.desc()).first()

    if not current:
        raise NotFoundError(
            error="No data found for this district",
            message="Database initialization might be incomplete or district name is incorrect.",
        )

    latest_month = current.data_month
    last_month = find_month(db, state, district, shift_months(latest_month, -1))
    last_year = find_month(db, state, district, shift_months(latest_month, -12))
    averages = state_average(db, state, latest_month)

    households = current.households_worked
    last_month_households = last_month.households_worked if last_month else households
    last_year_households = last_year.households_worked if last_year else households

    if averages:
        avg_households = averages["households"]
        avg_days = averages["avg_days"]
        avg_wage = averages["avg_wage"]
    else:
        avg_households = households
        avg_days = current.avg_days_provided
        avg_wage = current.avg_wage

    historical = db.query(Performance).filter(
        Performance.state_code == state,
        Performance.district_name == district,
        Performance.data_month <= latest_month,
    ).order_by(Performance.data_month.desc()).limit(HISTORY_MONTHS).all()

    return {
        "district": district,
        "state": state_display_name(db, state, district),
        "lastUpdated": format_date(current.updated_at),
        "current": {
            "householdsWorked": households,
            "activeWorkers": current.active_workers,
            "womenWorkers": current.women_workers,
            "avgDays": round_half_up(current.avg_days_provided, 1),
            "avgWage": round_half_up(current.avg_wage, 2),
        },
        "comparison": {
            "lastMonth": {
                "previousValue": last_month_households,
                "change": percent_change(households, last_month_households) if last_month else 0.0,
            },
            "lastYear": {
                "previousValue": last_year_households,
                "change": percent_change(households, last_year_households) if last_year else 0.0,
            },
            "stateAvg": {
                "value": round_half_up(avg_households),
                "avgDays": round_half_up(avg_days, 1),
                "avgWage": round_half_up(avg_wage, 2),
                "position": "above" if households > avg_households else "below",
            },
        },
        "historical": [
            {"month": format_month(row.data_month), "value": row.households_worked}
            for row in reversed(historical)
        ],
    }
