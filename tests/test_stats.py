from datetime import date, datetime

from easyleave.core.calendar import HolidayCalendar
from easyleave.core.stats import leave_stats, period_of
from easyleave.core.types import LeaveCategory, LeaveRequest, LeaveStatus

NOW = datetime(2026, 3, 16, 9, 0)


def _req(status, start, end, submitted):
    return LeaveRequest(
        id=None,
        employee_id=1,
        leave_type=LeaveCategory.ANNUAL,
        start_date=start,
        end_date=end,
        status=status,
        submission_date=submitted,
    )


def test_dashboard_figures():
    requests = [
        # finished
        _req(LeaveStatus.APPROVED, date(2026, 2, 2), date(2026, 2, 6), datetime(2026, 1, 20)),
        # ongoing
        _req(LeaveStatus.APPROVED, date(2026, 3, 16), date(2026, 3, 17), datetime(2026, 3, 2)),
        # planned
        _req(LeaveStatus.APPROVED, date(2026, 4, 6), date(2026, 4, 8), datetime(2026, 3, 10)),
        _req(LeaveStatus.REJECTED, date(2026, 4, 6), date(2026, 4, 8), datetime(2026, 3, 11)),
        # urgent: pending since 10 March
        _req(LeaveStatus.PENDING_SUPERVISOR, date(2026, 4, 20), date(2026, 4, 21), datetime(2026, 3, 10)),
        _req(LeaveStatus.PENDING_HR, date(2026, 4, 20), date(2026, 4, 21), datetime(2026, 3, 15)),
    ]
    stats = leave_stats(requests, HolidayCalendar(), NOW)

    assert stats["total_requests"] == 6
    assert stats["approved_requests"] == 3
    assert stats["rejected_requests"] == 1
    assert stats["pending_requests"] == 2
    assert stats["pending_by_stage"] == {"PendingHR": 1, "PendingSupervisor": 1, "PendingManager": 0}
    assert stats["approval_rate"] == 75.0
    assert stats["consumed_leaves"] == 2
    assert stats["consumed_days"] == 7
    assert stats["planned_leaves"] == 1
    assert stats["planned_days"] == 3
    assert stats["ongoing_leaves"] == 1
    assert stats["requests_this_month"] == 5
    assert stats["urgent_requests"] == 1


def test_empty_stats():
    stats = leave_stats([], HolidayCalendar(), NOW)
    assert stats["total_requests"] == 0
    assert stats["approval_rate"] == 0.0


def test_period_of():
    assert period_of(date(2026, 3, 16)) == {"month_start": "2026-03-01", "month_end": "2026-03-31"}
