"""Approval workflow for leave requests.

The transition table below is the only place that knows which role acts on
which stage. Every write goes through ``LeaveRequestStore.update`` with the
version that was read, so two approvers racing on the same request cannot
both win: the loser gets ``StaleTransition``.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable

from easyleave.core.calendar import HolidayCalendar, utcnow
from easyleave.core.config import LeavePolicy
from easyleave.core.entitlement import EntitlementCalculator
from easyleave.core.errors import (
    Forbidden,
    InsufficientBalance,
    InvalidTransition,
    NotFound,
    StaleTransition,
    ValidationError,
)
from easyleave.core.logging import get_logger
from easyleave.core.notifications import Delivery, NotificationDispatcher
from easyleave.core.stores import EmployeeDirectory, HistoryLog, LeaveRequestStore
from easyleave.core.types import (
    PENDING_STATUSES,
    Actor,
    CircumstanceType,
    Employee,
    HistoryAction,
    HistoryEntry,
    LeaveCategory,
    LeaveDraft,
    LeaveRequest,
    LeaveStatus,
    Role,
)

log = get_logger("workflow")


@dataclass(frozen=True)
class Stage:
    approver: Role
    on_approve: LeaveStatus
    on_reject: LeaveStatus = LeaveStatus.REJECTED


TRANSITIONS: dict[LeaveStatus, Stage] = {
    LeaveStatus.PENDING_HR: Stage(Role.HR, LeaveStatus.PENDING_SUPERVISOR),
    LeaveStatus.PENDING_SUPERVISOR: Stage(Role.SUPERVISOR, LeaveStatus.PENDING_MANAGER),
    LeaveStatus.PENDING_MANAGER: Stage(Role.MANAGER, LeaveStatus.APPROVED),
}

# HR rejections share the supervisor slot
REASON_FIELD = {
    Role.HR: "supervisor_reason",
    Role.SUPERVISOR: "supervisor_reason",
    Role.MANAGER: "manager_reason",
}

APPROVER_ROLES = frozenset(stage.approver for stage in TRANSITIONS.values())


def required_role(status: LeaveStatus) -> Role | None:
    stage = TRANSITIONS.get(status)
    return stage.approver if stage else None


def statuses_for(role: Role) -> list[LeaveStatus]:
    return [status for status, stage in TRANSITIONS.items() if stage.approver == role]


def next_status(status: LeaveStatus, role: Role, approve: bool) -> LeaveStatus:
    if status.is_terminal:
        raise InvalidTransition(f"request is already {status.value}")
    stage = TRANSITIONS[status]
    if role != stage.approver:
        raise InvalidTransition(
            f"{role.value} cannot act on a request in {status.value}, "
            f"{stage.approver.value} required"
        )
    return stage.on_approve if approve else stage.on_reject


@dataclass
class TransitionResult:
    request: LeaveRequest
    history: HistoryEntry
    days: int
    notifications: list[Delivery] = field(default_factory=list)

    @property
    def warnings(self) -> list[str]:
        return [f"notification to {d.to} failed: {d.error}"
                for d in self.notifications if not d.ok]


def assigned_to(req: LeaveRequest, actor: Actor) -> bool:
    """a supervisor stage belongs to the supervisor captured at submission, if any"""
    if req.status != LeaveStatus.PENDING_SUPERVISOR or req.supervisor_id is None:
        return True
    return actor.id == req.supervisor_id


def _coerce(enum_cls, value, what: str):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"unknown {what}: {value!r}") from None


class LeaveWorkflow:
    def __init__(self, store: LeaveRequestStore, history: HistoryLog,
                 directory: EmployeeDirectory, dispatcher: NotificationDispatcher,
                 policy: LeavePolicy, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.history = history
        self.directory = directory
        self.dispatcher = dispatcher
        self.policy = policy
        self.clock = clock
        self.calendar = HolidayCalendar(policy.holidays)
        self.entitlement = EntitlementCalculator(policy, self.calendar)

    # --- helpers ---
    def initial_status(self, category: LeaveCategory) -> LeaveStatus:
        if category in self.policy.hr_review_categories:
            return LeaveStatus.PENDING_HR
        return LeaveStatus.PENDING_SUPERVISOR

    def _employee(self, employee_id: int) -> Employee:
        employee = self.directory.get_by_id(employee_id)
        if employee is None:
            raise NotFound(f"employee {employee_id} not found")
        return employee

    def get(self, request_id: int) -> LeaveRequest:
        req = self.store.get_by_id(request_id)
        if req is None:
            raise NotFound(f"leave request {request_id} not found")
        return req

    def _validate_range(self, start: date | None, end: date | None) -> int:
        if start is None or end is None:
            raise ValidationError("start_date and end_date are required")
        if end < start:
            raise ValidationError("end_date cannot be before start_date")
        days = self.calendar.leave_days(start, end)
        if days == 0:
            raise ValidationError("the requested period contains no working days")
        return days

    def _check_balance(self, employee: Employee, category: LeaveCategory, days: int):
        bal = self.entitlement.balance(
            employee, self.store.list_by_employee(employee.id), category, self.clock().date()
        )
        if bal is not None and days > bal.available:
            raise InsufficientBalance(days, bal.available)

    def _validate_draft(self, draft: LeaveDraft) -> LeaveDraft:
        category = _coerce(LeaveCategory, draft.leave_type, "leave type")
        if category is None:
            raise ValidationError("leave_type is required")
        circumstance = _coerce(CircumstanceType, draft.circumstance_type, "circumstance type")
        if category == LeaveCategory.CIRCUMSTANCE and circumstance is None:
            raise ValidationError("circumstance_type is required for Circumstance leave")
        if category != LeaveCategory.CIRCUMSTANCE and circumstance is not None:
            raise ValidationError("circumstance_type only applies to Circumstance leave")
        if category == LeaveCategory.MATERNITY and not draft.document_url:
            if self.policy.require_maternity_document:
                raise ValidationError("document_url is required for Maternity leave")
            log.warning("maternity_document_missing")
        return LeaveDraft(
            leave_type=category,
            start_date=draft.start_date,
            end_date=draft.end_date,
            circumstance_type=circumstance,
            document_url=draft.document_url or None,
            comment=(draft.comment or "").strip(),
        )

    def _check_actor(self, req: LeaveRequest, actor: Actor):
        if actor.id == req.employee_id:
            raise InvalidTransition("approvers cannot act on their own request")
        if actor.role == Role.SUPERVISOR and not assigned_to(req, actor):
            raise InvalidTransition("only the employee's supervisor can act on this request")

    # --- operations ---
    def submit(self, draft: LeaveDraft, requester: Actor) -> TransitionResult:
        employee = self._employee(requester.id)
        draft = self._validate_draft(draft)
        days = self._validate_range(draft.start_date, draft.end_date)
        self._check_balance(employee, draft.leave_type, days)

        now = self.clock()
        req = LeaveRequest(
            id=None,
            employee_id=employee.id,
            leave_type=draft.leave_type,
            circumstance_type=draft.circumstance_type,
            start_date=draft.start_date,
            end_date=draft.end_date,
            status=self.initial_status(draft.leave_type),
            submission_date=now,
            supervisor_id=employee.supervisor_id,
            comment=draft.comment,
            document_url=draft.document_url,
        )
        with self.store.transaction():
            req = req.with_changes(id=self.store.create(req))
            entry = self.history.append(HistoryEntry(
                request_id=req.id,
                action=HistoryAction.SUBMITTED,
                status=req.status,
                actor_id=requester.id,
                actor_name=requester.name,
                actor_role=requester.role,
                timestamp=now,
                comment=draft.comment or None,
            ))

        log.info("request_submitted", request_id=req.id, employee_id=employee.id,
                 leave_type=req.leave_type.value, days=days, status=req.status.value)
        deliveries = self.dispatcher.submitted(req, employee)
        return TransitionResult(req, entry, days, deliveries)

    def approve(self, request_id: int, actor: Actor, comment: str | None = None,
                start_date: date | None = None, end_date: date | None = None) -> TransitionResult:
        req = self.get(request_id)
        self._check_actor(req, actor)
        status = next_status(req.status, actor.role, approve=True)

        patch: dict = {"status": status}
        comment = (comment or "").strip()
        if comment:
            patch["comment"] = comment

        start = start_date or req.start_date
        end = end_date or req.end_date
        days = self.calendar.leave_days(req.start_date, req.end_date)
        if (start, end) != (req.start_date, req.end_date):
            new_days = self._validate_range(start, end)
            if new_days > days:
                self._check_balance(self._employee(req.employee_id), req.leave_type, new_days)
            patch.update(start_date=start, end_date=end)
            days = new_days

        entry = HistoryEntry(
            request_id=req.id,
            action=HistoryAction.APPROVED,
            status=status,
            previous_status=req.status,
            actor_id=actor.id,
            actor_name=actor.name,
            actor_role=actor.role,
            timestamp=self.clock(),
            comment=comment or None,
        )
        updated, entry = self._commit(req, patch, entry)
        log.info("request_approved", request_id=req.id, actor_id=actor.id,
                 previous_status=req.status.value, status=status.value, days=days)
        return TransitionResult(updated, entry, days, self._notify(updated, actor))

    def reject(self, request_id: int, actor: Actor, reason: str) -> TransitionResult:
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("a rejection reason is required")
        req = self.get(request_id)
        self._check_actor(req, actor)
        status = next_status(req.status, actor.role, approve=False)

        patch = {"status": status, "supervisor_reason": "", "manager_reason": ""}
        patch[REASON_FIELD[actor.role]] = reason
        entry = HistoryEntry(
            request_id=req.id,
            action=HistoryAction.REJECTED,
            status=status,
            previous_status=req.status,
            actor_id=actor.id,
            actor_name=actor.name,
            actor_role=actor.role,
            timestamp=self.clock(),
            reason=reason,
        )
        updated, entry = self._commit(req, patch, entry)
        log.info("request_rejected", request_id=req.id, actor_id=actor.id,
                 previous_status=req.status.value)
        days = self.calendar.leave_days(updated.start_date, updated.end_date)
        return TransitionResult(updated, entry, days, self._notify(updated, actor))

    def _commit(self, req: LeaveRequest, patch: dict, entry: HistoryEntry):
        try:
            with self.store.transaction():
                updated = self.store.update(req.id, patch, expected_version=req.version)
                entry = self.history.append(entry)
        except StaleTransition:
            log.warning("stale_transition", request_id=req.id, expected_version=req.version)
            raise
        return updated, entry

    def _notify(self, req: LeaveRequest, actor: Actor) -> list[Delivery]:
        employee = self.directory.get_by_id(req.employee_id)
        if employee is None:
            log.warning("notification_skipped", request_id=req.id, reason="unknown employee")
            return []
        return self.dispatcher.transitioned(req, employee, actor)

    # --- read paths ---
    def view(self, request_id: int, actor: Actor) -> LeaveRequest:
        req = self.get(request_id)
        if actor.id != req.employee_id and actor.role not in APPROVER_ROLES | {Role.ADMIN}:
            raise Forbidden("you can only view your own leave requests")
        return req

    def history_for(self, request_id: int, actor: Actor) -> list[HistoryEntry]:
        self.view(request_id, actor)
        return self.history.get_by_request(request_id)

    def requests_of(self, employee_id: int) -> list[LeaveRequest]:
        return sorted(self.store.list_by_employee(employee_id),
                      key=lambda r: r.submission_date, reverse=True)

    def pending_for(self, actor: Actor) -> list[LeaveRequest]:
        """requests waiting on the actor; Admin sees every pending request"""
        admin = actor.role == Role.ADMIN
        statuses = list(PENDING_STATUSES) if admin else statuses_for(actor.role)
        if not statuses:
            return []
        requests = [r for r in self.store.list_by_status(statuses)
                    if r.employee_id != actor.id and (admin or assigned_to(r, actor))]
        return sorted(requests, key=lambda r: r.submission_date)
