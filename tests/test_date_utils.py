from datetime import date

from storyboard_api.utils.date_utils import (
    get_month_date_range,
    get_week_date_range,
    resolve_calendar_range,
)


def test_month_range_handles_leap_february():
    assert get_month_date_range(date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))
    assert get_month_date_range(date(2025, 12, 31)) == (date(2025, 12, 1), date(2025, 12, 31))


def test_week_runs_sunday_to_saturday():
    # 2024-01-03 is a Wednesday
    assert get_week_date_range(date(2024, 1, 3)) == (date(2023, 12, 31), date(2024, 1, 6))
    # Sunday starts its own week
    assert get_week_date_range(date(2023, 12, 31)) == (date(2023, 12, 31), date(2024, 1, 6))


def test_explicit_range_wins():
    start, end = date(2024, 5, 1), date(2024, 5, 3)
    assert resolve_calendar_range("week", start, end) == (start, end)


def test_default_range_depends_on_view():
    today = date(2024, 1, 3)
    assert resolve_calendar_range("week", today=today) == (date(2023, 12, 31), date(2024, 1, 6))
    assert resolve_calendar_range("month", today=today) == (date(2024, 1, 1), date(2024, 1, 31))
    # only one end given falls back to the view
    assert resolve_calendar_range("month", start_date=date(2024, 1, 20), today=today) == (
        date(2024, 1, 1),
        date(2024, 1, 31),
    )
