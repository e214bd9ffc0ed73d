from flask import Blueprint, request, jsonify

from easyleave.api import services
from easyleave.api.serializers import entry_to_dict, parse_date, parse_text, request_to_dict
from easyleave.core.auth import actor_required, current_actor
from easyleave.core.types import LeaveDraft
from easyleave.core.workflow import TransitionResult

bp = Blueprint("requests", __name__, url_prefix="/requests")


# --- helpers ---
def _result(result: TransitionResult) -> dict:
    return {
        "request": request_to_dict(result.request, result.days),
        "history": entry_to_dict(result.history),
        "notifications": [d.to_dict() for d in result.notifications],
        "warnings": result.warnings,
    }


def _listing(requests) -> list[dict]:
    cal = services.calendar()
    return [request_to_dict(r, cal.leave_days(r.start_date, r.end_date)) for r in requests]


# --- endpoints ---
@bp.route("", methods=["POST"])
@actor_required()
def submit_request():
    data = request.get_json(silent=True) or {}
    draft = LeaveDraft(
        leave_type=data.get("leave_type"),
        start_date=parse_date(data.get("start_date"), "start_date"),
        end_date=parse_date(data.get("end_date"), "end_date"),
        circumstance_type=data.get("circumstance_type") or None,
        document_url=parse_text(data.get("document_url"), "document_url") or None,
        comment=parse_text(data.get("comment"), "comment"),
    )
    result = services.workflow().submit(draft, current_actor())
    return jsonify(_result(result)), 201


@bp.route("/mine", methods=["GET"])
@actor_required()
def my_requests():
    requests = services.workflow().requests_of(current_actor().id)
    return jsonify({"requests": _listing(requests)}), 200


@bp.route("/pending", methods=["GET"])
@actor_required()
def pending_requests():
    requests = services.workflow().pending_for(current_actor())
    return jsonify({"requests": _listing(requests)}), 200


@bp.route("/<int:request_id>", methods=["GET"])
@actor_required()
def get_request(request_id: int):
    req = services.workflow().view(request_id, current_actor())
    days = services.calendar().leave_days(req.start_date, req.end_date)
    return jsonify({"request": request_to_dict(req, days)}), 200


@bp.route("/<int:request_id>/approve", methods=["POST"])
@actor_required()
def approve_request(request_id: int):
    data = request.get_json(silent=True) or {}
    result = services.workflow().approve(
        request_id,
        current_actor(),
        comment=parse_text(data.get("comment"), "comment"),
        start_date=parse_date(data.get("start_date"), "start_date", required=False),
        end_date=parse_date(data.get("end_date"), "end_date", required=False),
    )
    return jsonify(_result(result)), 200


@bp.route("/<int:request_id>/reject", methods=["POST"])
@actor_required()
def reject_request(request_id: int):
    data = request.get_json(silent=True) or {}
    reason = parse_text(data.get("reason"), "reason")
    result = services.workflow().reject(request_id, current_actor(), reason)
    return jsonify(_result(result)), 200


@bp.route("/<int:request_id>/history", methods=["GET"])
@actor_required()
def request_history(request_id: int):
    entries = services.workflow().history_for(request_id, current_actor())
    return jsonify({"request_id": request_id, "history": [entry_to_dict(e) for e in entries]}), 200
