"""Collaborator contracts consumed by the workflow.

Anything that satisfies these protocols can back the workflow; the SQL
implementations live in ``easyleave.database.store``.
"""
from typing import ContextManager, Iterable, Protocol

from easyleave.core.types import Employee, HistoryEntry, LeaveRequest, LeaveStatus, Role


class LeaveRequestStore(Protocol):
    def transaction(self) -> ContextManager[None]:
        """Group writes; commit on normal exit, discard everything on error."""

    def create(self, request: LeaveRequest) -> int: ...

    def get_by_id(self, request_id: int) -> LeaveRequest | None: ...

    def list_by_employee(self, employee_id: int) -> list[LeaveRequest]: ...

    def list_by_status(self, statuses: Iterable[LeaveStatus]) -> list[LeaveRequest]: ...

    def list_all(self) -> list[LeaveRequest]: ...

    def update(self, request_id: int, patch: dict, expected_version: int) -> LeaveRequest:
        """Apply patch if the stored version still equals expected_version.

        Raises StaleTransition otherwise.
        """


class HistoryLog(Protocol):
    def append(self, entry: HistoryEntry) -> HistoryEntry: ...

    def get_by_request(self, request_id: int) -> list[HistoryEntry]: ...


class EmployeeDirectory(Protocol):
    def get_by_id(self, employee_id: int) -> Employee | None: ...

    def get_by_role(self, role: Role) -> list[Employee]: ...

    def get_manager(self) -> Employee | None: ...


class Notifier(Protocol):
    def notify(self, recipient_email: str, subject: str, body: str) -> None: ...
