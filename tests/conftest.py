from datetime import date, datetime

import pytest

from easyleave import create_app, db
from easyleave.api import services
from easyleave.core.auth import generate_token
from easyleave.core.types import Contract, ContractType, Role

# Monday
NOW = datetime(2026, 3, 16, 9, 0, 0)
HOLIDAY = date(2026, 5, 1)


class RecordingNotifier:
    """Keeps every notification; raises for addresses listed in fail_for."""

    def __init__(self):
        self.sent = []
        self.fail_for = set()

    def notify(self, recipient_email, subject, body):
        if recipient_email in self.fail_for:
            raise ConnectionError(f"mailbox {recipient_email} unavailable")
        self.sent.append({"to": recipient_email, "subject": subject, "body": body})

    def to(self, email):
        return [m for m in self.sent if m["to"] == email]


class FixedClock:
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def app(notifier, clock):
    app = create_app(
        {
            "DATABASE_URL": "sqlite:///:memory:",
            "SECRET_KEY": "test-secret",
            "LOG_LEVEL": "WARNING",
            "PUBLIC_HOLIDAYS": HOLIDAY.isoformat(),
        },
        notifier=notifier,
        clock=clock,
    )
    app.config["TESTING"] = True
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _staff(start: date) -> Contract:
    return Contract(title="Engineer", team="Product", contract_type=ContractType.STAFF, start_date=start)


@pytest.fixture
def people(app):
    """
    manager <- supervisor <- alice
    plus HR, Admin and an employee without a supervisor
    """
    directory = services.directory()
    manager = directory.create_employee("Charlie Brown", "charlie@example.com", Role.MANAGER)
    manager = directory.add_contract(manager.id, _staff(date(2018, 7, 20)))
    supervisor = directory.create_employee("Bob Williams", "bob@example.com", Role.SUPERVISOR,
                                           supervisor_id=manager.id)
    supervisor = directory.add_contract(supervisor.id, _staff(date(2020, 3, 1)))
    hr = directory.create_employee("Diana Prince", "diana@example.com", Role.HR)
    admin = directory.create_employee("Ada Admin", "admin@example.com", Role.ADMIN)
    # ten whole months before NOW
    alice = directory.create_employee("Alice Johnson", "alice@example.com", Role.EMPLOYEE,
                                      supervisor_id=supervisor.id)
    alice = directory.add_contract(alice.id, _staff(date(2025, 5, 16)))
    orphan = directory.create_employee("Ethan Hunt", "ethan@example.com", Role.EMPLOYEE)
    orphan = directory.add_contract(orphan.id, _staff(date(2020, 1, 1)))
    return {
        "manager": manager,
        "supervisor": supervisor,
        "hr": hr,
        "admin": admin,
        "alice": alice,
        "orphan": orphan,
    }


@pytest.fixture
def workflow(app, people):
    return services.workflow()


@pytest.fixture
def auth(app):
    def _headers(employee):
        return {"Authorization": f"Bearer {generate_token(employee.as_actor())}"}
    return _headers
