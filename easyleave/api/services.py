from flask import current_app

from easyleave import db
from easyleave.core.calendar import HolidayCalendar
from easyleave.core.config import LeavePolicy
from easyleave.core.entitlement import EntitlementCalculator
from easyleave.core.notifications import NotificationDispatcher
from easyleave.core.workflow import LeaveWorkflow
from easyleave.database.store import SqlEmployeeDirectory, SqlHistoryLog, SqlLeaveRequestStore


def policy() -> LeavePolicy:
    return current_app.extensions["easyleave.policy"]


def clock():
    return current_app.extensions["easyleave.clock"]


def calendar() -> HolidayCalendar:
    return HolidayCalendar(policy().holidays)


def directory() -> SqlEmployeeDirectory:
    return SqlEmployeeDirectory(db.session)


def entitlement() -> EntitlementCalculator:
    return EntitlementCalculator(policy(), calendar())


def workflow() -> LeaveWorkflow:
    employees = directory()
    dispatcher = NotificationDispatcher(
        current_app.extensions["easyleave.notifier"], employees, calendar()
    )
    return LeaveWorkflow(
        store=SqlLeaveRequestStore(db.session),
        history=SqlHistoryLog(db.session),
        directory=employees,
        dispatcher=dispatcher,
        policy=policy(),
        clock=clock(),
    )
