from datetime import date, datetime, timedelta, timezone
from typing import Iterable

SUNDAY = 6


def utcnow() -> datetime:
    # naive UTC, the way timestamps are stored
    return datetime.now(timezone.utc).replace(tzinfo=None)


def month_bounds(d: date) -> tuple[date, date]:
    # m0 - first day of the month
    # m1 - last day of the month
    m0 = d.replace(day=1)
    if m0.month == 12:
        m1 = date(m0.year + 1, 1, 1) - timedelta(days=1)
    else:
        m1 = date(m0.year, m0.month + 1, 1) - timedelta(days=1)
    return m0, m1


def is_working_day(d: date, holidays: Iterable[date] = ()) -> bool:
    return d.weekday() != SUNDAY and d not in holidays


def calculate_leave_days(start: date | None, end: date | None,
                         holidays: Iterable[date] | None = None) -> int:
    """counts days in [start, end] that are neither Sunday nor a public holiday"""
    if start is None or end is None or end < start:
        return 0
    holidays = frozenset(holidays or ())
    days = 0
    cur = start
    while cur <= end:
        if is_working_day(cur, holidays):
            days += 1
        cur += timedelta(days=1)
    return days


def whole_months_between(start: date, today: date) -> int:
    """full months elapsed since start; an unfinished month counts as zero"""
    if start > today:
        return 0
    months = (today.year - start.year) * 12 + (today.month - start.month)
    if today.day < start.day:
        months -= 1
    return max(months, 0)


class HolidayCalendar:
    """Day counter bound to one configured holiday set."""

    def __init__(self, holidays: Iterable[date] = ()):
        self.holidays = frozenset(holidays)

    def leave_days(self, start: date | None, end: date | None) -> int:
        return calculate_leave_days(start, end, self.holidays)

    def is_holiday(self, d: date) -> bool:
        return d in self.holidays
