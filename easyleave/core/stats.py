from datetime import date, datetime, timedelta
from typing import Iterable

from easyleave.core.calendar import HolidayCalendar, month_bounds
from easyleave.core.types import PENDING_STATUSES, LeaveRequest, LeaveStatus

URGENT_AFTER_DAYS = 3


def leave_stats(requests: Iterable[LeaveRequest], calendar: HolidayCalendar,
                now: datetime) -> dict:
    """
    dashboard figures:
      - totals per status and per pending stage
      - approval rate over processed requests
      - consumed (started or finished) vs planned (future) approved days
      - ongoing leaves, requests submitted this month
      - urgent = pending for more than URGENT_AFTER_DAYS days
    """
    requests = list(requests)
    today = now.date()
    m0, m1 = month_bounds(today)

    approved = [r for r in requests if r.status == LeaveStatus.APPROVED]
    rejected = [r for r in requests if r.status == LeaveStatus.REJECTED]
    pending = [r for r in requests if r.status in PENDING_STATUSES]

    consumed = [r for r in approved if r.start_date <= today]
    planned = [r for r in approved if r.start_date > today]
    ongoing = [r for r in approved if r.start_date <= today <= r.end_date]

    processed = len(approved) + len(rejected)
    approval_rate = round(len(approved) / processed * 100, 1) if processed else 0.0

    urgent_cutoff = now - timedelta(days=URGENT_AFTER_DAYS)

    return {
        "total_requests": len(requests),
        "approved_requests": len(approved),
        "rejected_requests": len(rejected),
        "pending_requests": len(pending),
        "pending_by_stage": {
            status.value: sum(1 for r in pending if r.status == status)
            for status in PENDING_STATUSES
        },
        "approval_rate": approval_rate,
        "consumed_leaves": len(consumed),
        "consumed_days": sum(calendar.leave_days(r.start_date, r.end_date) for r in consumed),
        "planned_leaves": len(planned),
        "planned_days": sum(calendar.leave_days(r.start_date, r.end_date) for r in planned),
        "ongoing_leaves": len(ongoing),
        "requests_this_month": sum(
            1 for r in requests if m0 <= r.submission_date.date() <= m1
        ),
        "urgent_requests": sum(1 for r in pending if r.submission_date < urgent_cutoff),
    }


def period_of(today: date) -> dict:
    m0, m1 = month_bounds(today)
    return {"month_start": m0.isoformat(), "month_end": m1.isoformat()}
