from flask import Blueprint, request, jsonify

from easyleave import db
from easyleave.api import services
from easyleave.api.serializers import employee_to_dict, parse_date, parse_text
from easyleave.core.auth import actor_required, current_actor
from easyleave.core.errors import Forbidden, NotFound, ValidationError
from easyleave.core.types import Contract, ContractType, Role
from easyleave.database.store import SqlLeaveRequestStore

bp = Blueprint("employees", __name__, url_prefix="/employees")

# roles allowed to look at anyone's profile and balance; supervisors see their reports
OVERSEERS = (Role.HR, Role.MANAGER, Role.ADMIN)


# --- helpers ---
def _role(value) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise ValidationError(f"unknown role: {value!r}") from None


def _supervisor_id(value) -> int | None:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("supervisor_id must be an integer") from None


def _contract(data: dict) -> Contract:
    if not isinstance(data, dict):
        raise ValidationError("each contract must be an object")
    for key in ("title", "team", "start_date"):
        if not data.get(key):
            raise ValidationError(f"{key} is required")
    try:
        contract_type = ContractType(data.get("contract_type", "Staff"))
    except ValueError:
        raise ValidationError(f"unknown contract type: {data.get('contract_type')!r}") from None
    return Contract(
        title=parse_text(data["title"], "title"),
        team=parse_text(data["team"], "team"),
        contract_type=contract_type,
        start_date=parse_date(data["start_date"], "start_date"),
        end_date=parse_date(data.get("end_date"), "end_date", required=False),
    )


def _visible_employee(employee_id: int):
    actor = current_actor()
    employee = services.directory().get_by_id(employee_id)
    allowed = (
        actor.id == employee_id
        or actor.role in OVERSEERS
        or (actor.role == Role.SUPERVISOR and employee is not None
            and employee.supervisor_id == actor.id)
    )
    if not allowed:
        raise Forbidden("you can only view your own profile or your reports")
    if employee is None:
        raise NotFound(f"employee {employee_id} not found")
    return employee


# --- endpoints ---
@bp.route("/<int:employee_id>", methods=["GET"])
@actor_required()
def get_employee(employee_id: int):
    employee = _visible_employee(employee_id)
    today = services.clock()().date()
    return jsonify({"employee": employee_to_dict(employee, today)}), 200


@bp.route("/<int:employee_id>/balance", methods=["GET"])
@actor_required()
def get_balance(employee_id: int):
    employee = _visible_employee(employee_id)
    today = services.clock()().date()
    requests = SqlLeaveRequestStore(db.session).list_by_employee(employee_id)
    balances = services.entitlement().balances(employee, requests, today)
    return jsonify({
        "employee_id": employee_id,
        "as_of": today.isoformat(),
        "balances": [b.to_dict() for b in balances],
    }), 200


@bp.route("", methods=["POST"])
@actor_required(Role.ADMIN)
def create_employee():
    data = request.get_json(silent=True) or {}
    contracts = [_contract(item) for item in data.get("contracts") or []]
    employee = services.directory().create_employee(
        name=parse_text(data.get("name"), "name").strip(),
        email=parse_text(data.get("email"), "email"),
        role=_role(data.get("role", Role.EMPLOYEE.value)),
        supervisor_id=_supervisor_id(data.get("supervisor_id")),
        avatar=parse_text(data.get("avatar"), "avatar") or None,
        contracts=contracts,
    )
    return jsonify({"employee": employee_to_dict(employee, services.clock()().date())}), 201


@bp.route("/<int:employee_id>", methods=["PATCH"])
@actor_required(Role.ADMIN)
def update_employee(employee_id: int):
    data = request.get_json(silent=True) or {}
    changes = {}
    if "role" in data:
        changes["role"] = _role(data["role"])
    if "supervisor_id" in data:
        changes["supervisor_id"] = _supervisor_id(data["supervisor_id"])
    if "is_active" in data:
        if not isinstance(data["is_active"], bool):
            raise ValidationError("is_active must be true or false")
        changes["is_active"] = data["is_active"]
    if not changes:
        raise ValidationError("nothing to update, expected role, supervisor_id or is_active")
    employee = services.directory().update_employee(employee_id, **changes)
    return jsonify({"employee": employee_to_dict(employee, services.clock()().date())}), 200


@bp.route("/<int:employee_id>/contracts", methods=["POST"])
@actor_required(Role.ADMIN)
def add_contract(employee_id: int):
    data = request.get_json(silent=True) or {}
    employee = services.directory().add_contract(employee_id, _contract(data))
    return jsonify({"employee": employee_to_dict(employee, services.clock()().date())}), 201
