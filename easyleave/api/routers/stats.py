from flask import Blueprint, request, jsonify

from easyleave import db
from easyleave.api import services
from easyleave.core.auth import actor_required
from easyleave.core.errors import ValidationError
from easyleave.core.stats import leave_stats, period_of
from easyleave.core.types import Role
from easyleave.database.store import SqlLeaveRequestStore

bp = Blueprint("stats", __name__, url_prefix="/stats")


@bp.route("", methods=["GET"])
@actor_required(Role.ADMIN, Role.MANAGER, Role.HR)
def get_stats():
    """
    dashboard statistics over every leave request,
    or over one employee's requests with ?employee_id=<id>
    """
    store = SqlLeaveRequestStore(db.session)
    employee_id = request.args.get("employee_id")
    if employee_id is not None:
        try:
            requests = store.list_by_employee(int(employee_id))
        except ValueError:
            raise ValidationError("employee_id must be an integer") from None
    else:
        requests = store.list_all()

    now = services.clock()()
    return jsonify({
        "period": period_of(now.date()),
        "employee_id": int(employee_id) if employee_id is not None else None,
        "stats": leave_stats(requests, services.calendar(), now),
    }), 200
