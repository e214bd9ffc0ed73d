from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum


class Role(str, Enum):
    EMPLOYEE = "Employee"
    SUPERVISOR = "Supervisor"
    MANAGER = "Manager"
    HR = "HR"
    ADMIN = "Admin"


class LeaveStatus(str, Enum):
    PENDING_HR = "PendingHR"
    PENDING_SUPERVISOR = "PendingSupervisor"
    PENDING_MANAGER = "PendingManager"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (LeaveStatus.APPROVED, LeaveStatus.REJECTED)


PENDING_STATUSES = (
    LeaveStatus.PENDING_HR,
    LeaveStatus.PENDING_SUPERVISOR,
    LeaveStatus.PENDING_MANAGER,
)


class LeaveCategory(str, Enum):
    ANNUAL = "Annual"
    SICK = "Sick"
    PATERNITY = "Paternity"
    MATERNITY = "Maternity"
    CIRCUMSTANCE = "Circumstance"


class CircumstanceType(str, Enum):
    BEREAVEMENT = "Bereavement"
    MARRIAGE = "Marriage"
    RELOCATION = "Relocation"


class ContractType(str, Enum):
    STAFF = "Staff"
    INDEPENDENT = "Independent"
    INTERNSHIP = "Internship"


class HistoryAction(str, Enum):
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    STATUS_CHANGED = "status_changed"


@dataclass(frozen=True)
class Actor:
    """Identity triple supplied by the caller; trusted as-is."""
    id: int
    role: Role
    name: str


@dataclass
class Contract:
    title: str
    team: str
    contract_type: ContractType
    start_date: date
    end_date: date | None = None


@dataclass
class Employee:
    id: int
    name: str
    email: str
    role: Role
    supervisor_id: int | None = None
    avatar: str | None = None
    is_active: bool = True
    contracts: list[Contract] = field(default_factory=list)

    def sorted_contracts(self) -> list[Contract]:
        return sorted(self.contracts, key=lambda c: c.start_date)

    def first_contract(self) -> Contract | None:
        ordered = self.sorted_contracts()
        return ordered[0] if ordered else None

    def current_contract(self, today: date | None = None) -> Contract | None:
        today = today or date.today()
        started = [c for c in self.sorted_contracts() if c.start_date <= today]
        return started[-1] if started else None

    def as_actor(self) -> Actor:
        return Actor(id=self.id, role=self.role, name=self.name)


@dataclass
class LeaveDraft:
    """What an employee fills in before submission."""
    leave_type: LeaveCategory
    start_date: date
    end_date: date
    circumstance_type: CircumstanceType | None = None
    document_url: str | None = None
    comment: str = ""


@dataclass
class LeaveRequest:
    id: int | None
    employee_id: int
    leave_type: LeaveCategory
    start_date: date
    end_date: date
    status: LeaveStatus
    submission_date: datetime
    circumstance_type: CircumstanceType | None = None
    supervisor_id: int | None = None
    supervisor_reason: str = ""
    manager_reason: str = ""
    comment: str = ""
    document_url: str | None = None
    version: int = 1

    def with_changes(self, **changes) -> "LeaveRequest":
        return replace(self, **changes)


@dataclass(frozen=True)
class HistoryEntry:
    request_id: int
    action: HistoryAction
    status: LeaveStatus
    actor_id: int
    actor_name: str
    actor_role: Role
    timestamp: datetime
    previous_status: LeaveStatus | None = None
    comment: str | None = None
    reason: str | None = None
    id: int | None = None
