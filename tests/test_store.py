from datetime import date, datetime

import pytest

from easyleave import db
from easyleave.core.errors import NotFound, StaleTransition, ValidationError
from easyleave.core.types import (
    Contract,
    ContractType,
    HistoryAction,
    HistoryEntry,
    LeaveCategory,
    LeaveRequest,
    LeaveStatus,
    Role,
)
from easyleave.database import models
from easyleave.database.store import SqlEmployeeDirectory, SqlHistoryLog, SqlLeaveRequestStore


@pytest.fixture
def store(app):
    return SqlLeaveRequestStore(db.session)


@pytest.fixture
def stored(store, people):
    req = LeaveRequest(
        id=None,
        employee_id=people["alice"].id,
        leave_type=LeaveCategory.ANNUAL,
        start_date=date(2026, 3, 23),
        end_date=date(2026, 3, 27),
        status=LeaveStatus.PENDING_SUPERVISOR,
        submission_date=datetime(2026, 3, 16, 9, 0),
        supervisor_id=people["supervisor"].id,
    )
    with store.transaction():
        request_id = store.create(req)
    return store.get_by_id(request_id)


def test_create_and_fetch(store, stored, people):
    assert stored.id is not None
    assert stored.version == 1
    assert store.list_by_employee(people["alice"].id) == [stored]
    assert store.list_by_status([LeaveStatus.PENDING_SUPERVISOR]) == [stored]
    assert store.list_by_status([LeaveStatus.APPROVED]) == []
    assert store.get_by_id(999) is None


def test_update_bumps_version(store, stored):
    with store.transaction():
        updated = store.update(stored.id, {"status": LeaveStatus.PENDING_MANAGER, "comment": "ok"}, 1)
    assert updated.status == LeaveStatus.PENDING_MANAGER
    assert updated.comment == "ok"
    assert updated.version == 2


def test_update_with_old_version_is_stale(store, stored):
    with store.transaction():
        store.update(stored.id, {"status": LeaveStatus.PENDING_MANAGER}, 1)
    with pytest.raises(StaleTransition):
        with store.transaction():
            store.update(stored.id, {"status": LeaveStatus.REJECTED, "manager_reason": "x"}, 1)
    assert store.get_by_id(stored.id).status == LeaveStatus.PENDING_MANAGER


def test_update_unknown_request(store, app):
    with pytest.raises(NotFound):
        store.update(404, {"status": LeaveStatus.APPROVED}, 1)


def test_update_refuses_identity_fields(store, stored):
    with pytest.raises(ValueError):
        store.update(stored.id, {"employee_id": 3}, 1)


def test_history_is_ordered_by_timestamp(app, stored, people):
    log = SqlHistoryLog(db.session)
    sup = people["supervisor"]
    later = HistoryEntry(stored.id, HistoryAction.APPROVED, LeaveStatus.PENDING_MANAGER,
                         sup.id, sup.name, sup.role, datetime(2026, 3, 17, 10, 0),
                         previous_status=LeaveStatus.PENDING_SUPERVISOR)
    earlier = HistoryEntry(stored.id, HistoryAction.SUBMITTED, LeaveStatus.PENDING_SUPERVISOR,
                           people["alice"].id, "Alice Johnson", Role.EMPLOYEE, datetime(2026, 3, 16, 9, 0))
    log.append(later)
    log.append(earlier)
    db.session.commit()

    entries = log.get_by_request(stored.id)
    assert [e.action for e in entries] == [HistoryAction.SUBMITTED, HistoryAction.APPROVED]
    assert entries[1].previous_status == LeaveStatus.PENDING_SUPERVISOR
    assert all(e.id is not None for e in entries)


def test_directory_lookups(app, people):
    directory = SqlEmployeeDirectory(db.session)
    assert directory.get_manager().id == people["manager"].id
    assert [e.id for e in directory.get_by_role(Role.HR)] == [people["hr"].id]
    assert directory.get_by_id(999) is None

    alice = directory.get_by_id(people["alice"].id)
    assert alice.supervisor_id == people["supervisor"].id
    assert alice.first_contract().start_date == date(2025, 5, 16)


def test_contracts_are_appended_and_sorted(app, people):
    directory = SqlEmployeeDirectory(db.session)
    alice = directory.add_contract(people["alice"].id, Contract(
        "Senior Engineer", "Product", ContractType.STAFF, date(2026, 6, 1)))
    assert [c.start_date for c in alice.sorted_contracts()] == [date(2025, 5, 16), date(2026, 6, 1)]
    # the later contract has not started yet
    assert alice.current_contract(date(2026, 3, 16)).title == "Engineer"
    assert alice.current_contract(date(2026, 7, 1)).title == "Senior Engineer"


def test_contract_end_before_start_rejected(app, people):
    directory = SqlEmployeeDirectory(db.session)
    with pytest.raises(ValidationError):
        directory.add_contract(people["alice"].id, Contract(
            "Intern", "Design", ContractType.INTERNSHIP, date(2026, 6, 1), date(2026, 5, 1)))


def test_supervisor_changes_are_checked(app, people):
    directory = SqlEmployeeDirectory(db.session)
    with pytest.raises(ValidationError):
        directory.update_employee(people["alice"].id, supervisor_id=people["alice"].id)
    with pytest.raises(ValidationError):
        directory.update_employee(people["alice"].id, supervisor_id=999)
    # manager <- supervisor <- alice, so the manager cannot report to alice
    with pytest.raises(ValidationError):
        directory.update_employee(people["manager"].id, supervisor_id=people["alice"].id)

    updated = directory.update_employee(people["orphan"].id, supervisor_id=people["supervisor"].id,
                                        role=Role.SUPERVISOR)
    assert updated.supervisor_id == people["supervisor"].id
    assert updated.role == Role.SUPERVISOR


def test_duplicate_email_rejected(app, people):
    directory = SqlEmployeeDirectory(db.session)
    with pytest.raises(ValidationError):
        directory.create_employee("Other Alice", "ALICE@example.com")


def test_employee_with_invalid_contract_is_not_written(app, people):
    directory = SqlEmployeeDirectory(db.session)
    contracts = [
        Contract("Analyst", "Data", ContractType.STAFF, date(2025, 1, 1)),
        Contract("Analyst", "Data", ContractType.STAFF, date(2025, 6, 1), date(2025, 5, 1)),
    ]
    with pytest.raises(ValidationError):
        directory.create_employee("Pat Quinn", "pat@example.com", contracts=contracts)
    assert models.Employee.query.filter_by(email="pat@example.com").first() is None

    pat = directory.create_employee("Pat Quinn", "pat@example.com", contracts=contracts[:1])
    assert [c.title for c in pat.contracts] == ["Analyst"]


def test_inactive_employees_are_not_approvers(app, people):
    directory = SqlEmployeeDirectory(db.session)
    hr = directory.update_employee(people["hr"].id, is_active=False)
    assert hr.is_active is False
    assert directory.get_by_role(Role.HR) == []
    # still resolvable by id for history and profiles
    assert directory.get_by_id(people["hr"].id).is_active is False
