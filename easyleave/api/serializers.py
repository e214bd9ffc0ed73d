from datetime import date

from easyleave.core.errors import ValidationError
from easyleave.core.types import Contract, Employee, HistoryEntry, LeaveRequest


def parse_date(value, field: str, required: bool = True) -> date | None:
    if value in (None, ""):
        if required:
            raise ValidationError(f"{field} is required")
        return None
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD)") from None


def parse_text(value, field: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    return value


def _iso(value):
    return value.isoformat() if value is not None else None


def request_to_dict(req: LeaveRequest, days: int | None = None) -> dict:
    data = {
        "id": req.id,
        "employee_id": req.employee_id,
        "leave_type": req.leave_type.value,
        "circumstance_type": req.circumstance_type.value if req.circumstance_type else None,
        "start_date": req.start_date.isoformat(),
        "end_date": req.end_date.isoformat(),
        "status": req.status.value,
        "supervisor_reason": req.supervisor_reason,
        "manager_reason": req.manager_reason,
        "comment": req.comment,
        "submission_date": _iso(req.submission_date),
        "document_url": req.document_url,
        "supervisor_id": req.supervisor_id,
        "version": req.version,
    }
    if days is not None:
        data["days"] = days
    return data


def entry_to_dict(entry: HistoryEntry) -> dict:
    return {
        "id": entry.id,
        "request_id": entry.request_id,
        "action": entry.action.value,
        "status": entry.status.value,
        "previous_status": entry.previous_status.value if entry.previous_status else None,
        "actor_id": entry.actor_id,
        "actor_name": entry.actor_name,
        "actor_role": entry.actor_role.value,
        "timestamp": _iso(entry.timestamp),
        "comment": entry.comment,
        "reason": entry.reason,
    }


def contract_to_dict(contract: Contract | None) -> dict | None:
    if contract is None:
        return None
    return {
        "title": contract.title,
        "team": contract.team,
        "contract_type": contract.contract_type.value,
        "start_date": contract.start_date.isoformat(),
        "end_date": _iso(contract.end_date),
    }


def employee_to_dict(employee: Employee, today: date | None = None) -> dict:
    return {
        "id": employee.id,
        "name": employee.name,
        "email": employee.email,
        "avatar": employee.avatar,
        "role": employee.role.value,
        "supervisor_id": employee.supervisor_id,
        "is_active": employee.is_active,
        "current_contract": contract_to_dict(employee.current_contract(today)),
        "contracts": [contract_to_dict(c) for c in employee.sorted_contracts()],
    }
