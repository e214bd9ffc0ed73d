from datetime import date

import pytest

from easyleave.core.calendar import (
    HolidayCalendar,
    calculate_leave_days,
    month_bounds,
    whole_months_between,
)

MONDAY = date(2026, 3, 23)
FRIDAY = date(2026, 3, 27)
SATURDAY = date(2026, 3, 28)
SUNDAY = date(2026, 3, 29)
LABOUR_DAY = date(2026, 5, 1)


def test_single_working_day_counts_one():
    assert calculate_leave_days(MONDAY, MONDAY) == 1


def test_single_sunday_counts_zero():
    assert calculate_leave_days(SUNDAY, SUNDAY) == 0


def test_single_holiday_counts_zero():
    assert calculate_leave_days(LABOUR_DAY, LABOUR_DAY, {LABOUR_DAY}) == 0
    assert calculate_leave_days(LABOUR_DAY, LABOUR_DAY) == 1


def test_inverted_range_is_zero():
    assert calculate_leave_days(FRIDAY, MONDAY) == 0


@pytest.mark.parametrize("start,end", [(None, FRIDAY), (MONDAY, None), (None, None)])
def test_missing_bound_is_zero(start, end):
    assert calculate_leave_days(start, end) == 0


def test_monday_to_friday_is_five():
    assert calculate_leave_days(MONDAY, FRIDAY) == 5


def test_saturday_is_a_working_day_sunday_is_not():
    assert calculate_leave_days(MONDAY, SATURDAY) == 6
    assert calculate_leave_days(MONDAY, SUNDAY) == 6


def test_holiday_calendar_excludes_configured_dates():
    cal = HolidayCalendar([LABOUR_DAY])
    # Mon 27 April .. Sun 3 May
    assert cal.leave_days(date(2026, 4, 27), date(2026, 5, 3)) == 5
    assert cal.is_holiday(LABOUR_DAY)
    assert not cal.is_holiday(MONDAY)


def test_whole_months_truncates_partial_month():
    assert whole_months_between(date(2025, 5, 16), date(2026, 3, 16)) == 10
    assert whole_months_between(date(2025, 5, 17), date(2026, 3, 16)) == 9
    assert whole_months_between(date(2026, 3, 1), date(2026, 3, 31)) == 0


def test_whole_months_future_start_is_zero():
    assert whole_months_between(date(2027, 1, 1), date(2026, 3, 16)) == 0


def test_month_bounds_december():
    assert month_bounds(date(2025, 12, 10)) == (date(2025, 12, 1), date(2025, 12, 31))
    assert month_bounds(date(2026, 2, 10)) == (date(2026, 2, 1), date(2026, 2, 28))
