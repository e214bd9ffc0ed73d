"""SQLAlchemy implementations of the workflow's collaborator contracts."""
from contextlib import contextmanager
from enum import Enum
from typing import Iterable

from sqlalchemy import update
from sqlalchemy.orm import Session

from easyleave.core.errors import NotFound, StaleTransition, ValidationError
from easyleave.core.logging import get_logger
from easyleave.core.types import (
    CircumstanceType,
    Contract,
    ContractType,
    Employee,
    HistoryAction,
    HistoryEntry,
    LeaveCategory,
    LeaveRequest,
    LeaveStatus,
    Role,
)
from easyleave.database import models

log = get_logger("store")

PATCHABLE = frozenset({
    "status", "start_date", "end_date", "comment", "supervisor_reason", "manager_reason",
})


# --- row <-> domain ---
def _contract(row: models.Contract) -> Contract:
    return Contract(
        title=row.title,
        team=row.team,
        contract_type=ContractType(row.contract_type),
        start_date=row.start_date,
        end_date=row.end_date,
    )


def _employee(row: models.Employee) -> Employee:
    return Employee(
        id=row.emp_id,
        name=row.name,
        email=row.email,
        role=Role(row.role),
        supervisor_id=row.supervisor_id,
        avatar=row.avatar,
        is_active=row.is_active,
        contracts=[_contract(c) for c in row.contracts],
    )


def _request(row: models.LeaveRequest) -> LeaveRequest:
    return LeaveRequest(
        id=row.req_id,
        employee_id=row.emp_id,
        leave_type=LeaveCategory(row.leave_type),
        circumstance_type=CircumstanceType(row.circumstance_type) if row.circumstance_type else None,
        start_date=row.start_date,
        end_date=row.end_date,
        status=LeaveStatus(row.status),
        submission_date=row.submission_date,
        supervisor_id=row.supervisor_id,
        supervisor_reason=row.supervisor_reason or "",
        manager_reason=row.manager_reason or "",
        comment=row.comment or "",
        document_url=row.document_url,
        version=row.version,
    )


def _entry(row: models.LeaveHistory) -> HistoryEntry:
    return HistoryEntry(
        id=row.entry_id,
        request_id=row.req_id,
        action=HistoryAction(row.action),
        status=LeaveStatus(row.status),
        previous_status=LeaveStatus(row.previous_status) if row.previous_status else None,
        actor_id=row.actor_id,
        actor_name=row.actor_name,
        actor_role=Role(row.actor_role),
        timestamp=row.timestamp,
        comment=row.comment,
        reason=row.reason,
    )


def _column_value(value):
    return value.value if isinstance(value, Enum) else value


class SqlLeaveRequestStore:
    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def transaction(self):
        try:
            yield
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def create(self, request: LeaveRequest) -> int:
        row = models.LeaveRequest(
            emp_id=request.employee_id,
            leave_type=request.leave_type.value,
            circumstance_type=_column_value(request.circumstance_type),
            start_date=request.start_date,
            end_date=request.end_date,
            status=request.status.value,
            supervisor_reason=request.supervisor_reason,
            manager_reason=request.manager_reason,
            comment=request.comment,
            submission_date=request.submission_date,
            document_url=request.document_url,
            supervisor_id=request.supervisor_id,
            version=request.version,
        )
        self.session.add(row)
        self.session.flush()
        return row.req_id

    def get_by_id(self, request_id: int) -> LeaveRequest | None:
        row = self.session.get(models.LeaveRequest, request_id, populate_existing=True)
        return _request(row) if row else None

    def list_by_employee(self, employee_id: int) -> list[LeaveRequest]:
        rows = (
            models.LeaveRequest.query
            .filter_by(emp_id=employee_id)
            .order_by(models.LeaveRequest.req_id.asc())
            .all()
        )
        return [_request(r) for r in rows]

    def list_by_status(self, statuses: Iterable[LeaveStatus]) -> list[LeaveRequest]:
        values = [_column_value(s) for s in statuses]
        rows = (
            models.LeaveRequest.query
            .filter(models.LeaveRequest.status.in_(values))
            .order_by(models.LeaveRequest.req_id.asc())
            .all()
        )
        return [_request(r) for r in rows]

    def list_all(self) -> list[LeaveRequest]:
        rows = models.LeaveRequest.query.order_by(models.LeaveRequest.req_id.asc()).all()
        return [_request(r) for r in rows]

    def update(self, request_id: int, patch: dict, expected_version: int) -> LeaveRequest:
        unknown = set(patch) - PATCHABLE
        if unknown:
            raise ValueError(f"fields cannot be patched: {sorted(unknown)}")

        values = {key: _column_value(value) for key, value in patch.items()}
        values["version"] = expected_version + 1
        stmt = (
            update(models.LeaveRequest)
            .where(
                models.LeaveRequest.req_id == request_id,
                models.LeaveRequest.version == expected_version,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        if result.rowcount != 1:
            if self.session.get(models.LeaveRequest, request_id) is None:
                raise NotFound(f"leave request {request_id} not found")
            raise StaleTransition(
                f"leave request {request_id} changed since version {expected_version}"
            )
        return self.get_by_id(request_id)


class SqlHistoryLog:
    def __init__(self, session: Session):
        self.session = session

    def append(self, entry: HistoryEntry) -> HistoryEntry:
        row = models.LeaveHistory(
            req_id=entry.request_id,
            action=entry.action.value,
            status=entry.status.value,
            previous_status=_column_value(entry.previous_status),
            actor_id=entry.actor_id,
            actor_name=entry.actor_name,
            actor_role=entry.actor_role.value,
            timestamp=entry.timestamp,
            comment=entry.comment,
            reason=entry.reason,
        )
        self.session.add(row)
        self.session.flush()
        return _entry(row)

    def get_by_request(self, request_id: int) -> list[HistoryEntry]:
        rows = (
            models.LeaveHistory.query
            .filter_by(req_id=request_id)
            .order_by(models.LeaveHistory.timestamp.asc(), models.LeaveHistory.entry_id.asc())
            .all()
        )
        return [_entry(r) for r in rows]


class SqlEmployeeDirectory:
    """Read lookups for the workflow plus the admin-side writes."""

    def __init__(self, session: Session):
        self.session = session

    def _row(self, employee_id: int) -> models.Employee:
        row = self.session.get(models.Employee, employee_id)
        if row is None:
            raise NotFound(f"employee {employee_id} not found")
        return row

    def get_by_id(self, employee_id: int) -> Employee | None:
        row = self.session.get(models.Employee, employee_id)
        return _employee(row) if row else None

    def get_by_role(self, role: Role) -> list[Employee]:
        rows = (
            models.Employee.query
            .filter_by(role=_column_value(role), is_active=True)
            .order_by(models.Employee.emp_id.asc())
            .all()
        )
        return [_employee(r) for r in rows]

    def get_manager(self) -> Employee | None:
        managers = self.get_by_role(Role.MANAGER)
        return managers[0] if managers else None

    # --- admin ---
    def _check_supervisor(self, employee_id: int | None, supervisor_id: int | None):
        if supervisor_id is None:
            return
        if supervisor_id == employee_id:
            raise ValidationError("an employee cannot supervise themselves")
        cur = self.session.get(models.Employee, supervisor_id)
        if cur is None:
            raise ValidationError(f"supervisor {supervisor_id} does not exist")
        seen = set()
        while cur is not None and cur.emp_id not in seen:
            if employee_id is not None and cur.emp_id == employee_id:
                raise ValidationError("supervisor chain would form a cycle")
            seen.add(cur.emp_id)
            cur = cur.supervisor

    @staticmethod
    def _contract_row(contract: Contract) -> models.Contract:
        if contract.end_date is not None and contract.end_date < contract.start_date:
            raise ValidationError("contract end_date cannot be before start_date")
        return models.Contract(
            title=contract.title,
            team=contract.team,
            contract_type=ContractType(contract.contract_type).value,
            start_date=contract.start_date,
            end_date=contract.end_date,
        )

    def create_employee(self, name: str, email: str, role: Role = Role.EMPLOYEE,
                        supervisor_id: int | None = None, avatar: str | None = None,
                        contracts: Iterable[Contract] = ()) -> Employee:
        """employee and contracts are written in one commit, or not at all"""
        email = (email or "").strip().lower()
        if not name or not email:
            raise ValidationError("name and email are required")
        if models.Employee.query.filter_by(email=email).first():
            raise ValidationError(f"email {email} is already registered")
        self._check_supervisor(None, supervisor_id)
        contract_rows = [self._contract_row(c) for c in contracts]

        row = models.Employee(
            name=name.strip(),
            email=email,
            role=_column_value(Role(role)),
            supervisor_id=supervisor_id,
            avatar=avatar,
            contracts=contract_rows,
        )
        self.session.add(row)
        self.session.commit()
        log.info("employee_created", emp_id=row.emp_id, role=row.role, contracts=len(contract_rows))
        return _employee(row)

    def update_employee(self, employee_id: int, **changes) -> Employee:
        row = self._row(employee_id)
        if "supervisor_id" in changes:
            self._check_supervisor(employee_id, changes["supervisor_id"])
            row.supervisor_id = changes["supervisor_id"]
        if "role" in changes:
            row.role = Role(changes["role"]).value
        if "is_active" in changes:
            row.is_active = bool(changes["is_active"])
        self.session.commit()
        log.info("employee_updated", emp_id=employee_id, fields=sorted(changes))
        return _employee(row)

    def add_contract(self, employee_id: int, contract: Contract) -> Employee:
        row = self._row(employee_id)
        row.contracts.append(self._contract_row(contract))
        self.session.commit()
        self.session.refresh(row)
        return _employee(row)
