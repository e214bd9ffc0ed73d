from dataclasses import dataclass

from easyleave.core.calendar import HolidayCalendar
from easyleave.core.logging import get_logger
from easyleave.core.stores import EmployeeDirectory, Notifier
from easyleave.core.types import Actor, Employee, LeaveRequest, LeaveStatus, Role

log = get_logger("notifications")

SIGNATURE = "Best regards,\nEasyLeave"


@dataclass(frozen=True)
class Message:
    to: str
    subject: str
    body: str


@dataclass(frozen=True)
class Delivery:
    to: str
    subject: str
    ok: bool
    error: str | None = None

    def to_dict(self) -> dict:
        data = {"to": self.to, "subject": self.subject, "ok": self.ok}
        if self.error:
            data["error"] = self.error
        return data


class LogNotifier:
    """Writes every notification to the log instead of sending it."""

    def notify(self, recipient_email: str, subject: str, body: str) -> None:
        log.info("notification", to=recipient_email, subject=subject, body=body)


# --- rendering ---
def _leave_label(req: LeaveRequest) -> str:
    if req.circumstance_type:
        return f"{req.leave_type.value} ({req.circumstance_type.value})"
    return req.leave_type.value


def _summary(req: LeaveRequest, days: int) -> str:
    return (
        f"  Type: {_leave_label(req)}\n"
        f"  Start date: {req.start_date:%d %B %Y}\n"
        f"  End date: {req.end_date:%d %B %Y}\n"
        f"  Working days: {days}\n"
    )


def render_submitted(req: LeaveRequest, employee: Employee, approver: Employee, days: int) -> Message:
    body = (
        f"Hello {approver.name},\n\n"
        f"{employee.name} has submitted a new leave request for your approval.\n\n"
        f"{_summary(req, days)}\n"
        f"You can review this request in the EasyLeave dashboard.\n\n"
        f"{SIGNATURE}"
    )
    return Message(approver.email, f"New Leave Request from {employee.name}", body)


def render_forwarded(req: LeaveRequest, employee: Employee, approver: Employee,
                     actor: Actor, days: int) -> Message:
    body = (
        f"Hello {approver.name},\n\n"
        f"A leave request from {employee.name} has been approved by "
        f"{actor.name} ({actor.role.value}) and is now awaiting your approval.\n\n"
        f"{_summary(req, days)}"
    )
    if req.comment:
        body += f"\nComment: {req.comment}\n"
    body += f"\n{SIGNATURE}"
    return Message(approver.email, f"Leave Request for {employee.name} needs your approval", body)


def render_progress(req: LeaveRequest, employee: Employee, actor: Actor) -> Message:
    body = (
        f"Hello {employee.name},\n\n"
        f"Your leave request has been approved by {actor.name} and is now "
        f"pending final approval from the manager.\n\n"
        f"{SIGNATURE}"
    )
    return Message(employee.email, "Update on your leave request", body)


def render_approved(req: LeaveRequest, employee: Employee, days: int) -> Message:
    body = (
        f"Hello {employee.name},\n\n"
        f"Your leave request has been fully approved.\n\n"
        f"{_summary(req, days)}"
    )
    if req.comment:
        body += f"\nComment: {req.comment}\n"
    body += f"\n{SIGNATURE}"
    return Message(employee.email, "Your leave request has been approved", body)


def render_rejected(req: LeaveRequest, employee: Employee, actor: Actor) -> Message:
    reason = req.supervisor_reason or req.manager_reason or "No reason provided."
    body = (
        f"Hello {employee.name},\n\n"
        f"Unfortunately, your recent leave request has been rejected by {actor.name}.\n\n"
        f"Reason: {reason}\n\n"
        f"{SIGNATURE}"
    )
    return Message(employee.email, "Your leave request has been rejected", body)


class NotificationDispatcher:
    """Decides who hears about a submission or transition and sends it.

    Delivery failures are logged and returned, never raised: by the time
    the dispatcher runs the transition is already committed.
    """

    def __init__(self, notifier: Notifier, directory: EmployeeDirectory,
                 calendar: HolidayCalendar | None = None):
        self.notifier = notifier
        self.directory = directory
        self.calendar = calendar or HolidayCalendar()

    def _days(self, req: LeaveRequest) -> int:
        return self.calendar.leave_days(req.start_date, req.end_date)

    def _send(self, messages: list[Message], request_id) -> list[Delivery]:
        deliveries = []
        for msg in messages:
            try:
                self.notifier.notify(msg.to, msg.subject, msg.body)
            except Exception as e:
                log.warning("notification_failed", request_id=request_id, to=msg.to,
                            subject=msg.subject, error=str(e))
                deliveries.append(Delivery(msg.to, msg.subject, False, str(e)))
                continue
            deliveries.append(Delivery(msg.to, msg.subject, True))
        return deliveries

    def _stage_approvers(self, req: LeaveRequest, employee: Employee) -> list[Employee]:
        if req.status == LeaveStatus.PENDING_HR:
            return self.directory.get_by_role(Role.HR)
        if req.status == LeaveStatus.PENDING_SUPERVISOR:
            supervisor_id = req.supervisor_id or employee.supervisor_id
            supervisor = self.directory.get_by_id(supervisor_id) if supervisor_id else None
            if supervisor is None:
                log.warning("no_supervisor_configured", request_id=req.id,
                            employee_id=employee.id)
                return []
            return [supervisor]
        if req.status == LeaveStatus.PENDING_MANAGER:
            manager = self.directory.get_manager()
            if manager is None:
                log.warning("no_manager_configured", request_id=req.id)
                return []
            return [manager]
        return []

    def submitted(self, req: LeaveRequest, employee: Employee) -> list[Delivery]:
        days = self._days(req)
        messages = [render_submitted(req, employee, approver, days)
                    for approver in self._stage_approvers(req, employee)]
        return self._send(messages, req.id)

    def transitioned(self, req: LeaveRequest, employee: Employee, actor: Actor) -> list[Delivery]:
        days = self._days(req)
        if req.status == LeaveStatus.APPROVED:
            messages = [render_approved(req, employee, days)]
        elif req.status == LeaveStatus.REJECTED:
            messages = [render_rejected(req, employee, actor)]
        else:
            messages = [render_forwarded(req, employee, approver, actor, days)
                        for approver in self._stage_approvers(req, employee)]
            if req.status == LeaveStatus.PENDING_MANAGER:
                messages.append(render_progress(req, employee, actor))
        return self._send(messages, req.id)
