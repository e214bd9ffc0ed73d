import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from easyleave.core.calendar import HolidayCalendar, whole_months_between
from easyleave.core.config import LeavePolicy
from easyleave.core.types import Employee, LeaveCategory, LeaveRequest, LeaveStatus


@dataclass(frozen=True)
class Balance:
    category: LeaveCategory
    accrued: float
    consumed: int

    @property
    def available(self) -> int:
        # may be zero or negative, submission compares against it directly
        return math.floor(self.accrued - self.consumed)

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "accrued": round(self.accrued, 2),
            "consumed": self.consumed,
            "available": self.available,
        }


class EntitlementCalculator:
    """available = accrued - consumed, per employee and leave category.

    Annual leave accrues monthly from the first contract. Paternity and
    maternity have a fixed quota per calendar year. Other categories are
    uncapped and have no balance.
    """

    def __init__(self, policy: LeavePolicy, calendar: HolidayCalendar | None = None):
        self.policy = policy
        self.calendar = calendar or HolidayCalendar(policy.holidays)

    def is_capped(self, category: LeaveCategory) -> bool:
        return category == LeaveCategory.ANNUAL or category in self.policy.yearly_quotas

    def accrued(self, employee: Employee, category: LeaveCategory,
                today: date | None = None) -> float:
        today = today or date.today()
        if category == LeaveCategory.ANNUAL:
            first = employee.first_contract()
            if first is None:
                return 0.0
            return whole_months_between(first.start_date, today) * self.policy.annual_accrual_rate
        return float(self.policy.yearly_quotas.get(category, 0))

    def consumed(self, requests: Iterable[LeaveRequest], category: LeaveCategory,
                 today: date | None = None) -> int:
        today = today or date.today()
        yearly = category in self.policy.yearly_quotas
        total = 0
        for req in requests:
            if req.status != LeaveStatus.APPROVED or req.leave_type != category:
                continue
            if yearly and req.start_date.year != today.year:
                continue
            total += self.calendar.leave_days(req.start_date, req.end_date)
        return total

    def balance(self, employee: Employee, requests: Iterable[LeaveRequest],
                category: LeaveCategory, today: date | None = None) -> Balance | None:
        if not self.is_capped(category):
            return None
        requests = [r for r in requests if r.employee_id == employee.id]
        return Balance(
            category=category,
            accrued=self.accrued(employee, category, today),
            consumed=self.consumed(requests, category, today),
        )

    def balances(self, employee: Employee, requests: Iterable[LeaveRequest],
                 today: date | None = None) -> list[Balance]:
        requests = list(requests)
        result = []
        for category in LeaveCategory:
            bal = self.balance(employee, requests, category, today)
            if bal is not None:
                result.append(bal)
        return result
