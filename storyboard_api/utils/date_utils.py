"""
Date range helpers for the schedule calendar.
"""
from calendar import monthrange
from datetime import date, timedelta
from typing import Optional, Tuple


def get_month_date_range(day: date) -> Tuple[date, date]:
    """
    First and last day of the calendar month containing ``day``.

    monthrange handles 28/29/30/31 day months, leap years included.
    """
    _, last_day_of_month = monthrange(day.year, day.month)
    return date(day.year, day.month, 1), date(day.year, day.month, last_day_of_month)


def get_week_date_range(day: date) -> Tuple[date, date]:
    """Sunday to Saturday week containing ``day``."""
    # weekday(): Monday=0 ... Sunday=6
    days_since_sunday = (day.weekday() + 1) % 7
    start = day - timedelta(days=days_since_sunday)
    return start, start + timedelta(days=6)


def resolve_calendar_range(
    view: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    today: Optional[date] = None,
) -> Tuple[date, date]:
    """
    Use the explicit range when both ends are given, otherwise the current
    week or month depending on ``view``.
    """
    if start_date and end_date:
        return start_date, end_date

    today = today or date.today()
    if view == "week":
        return get_week_date_range(today)
    return get_month_date_range(today)
