from flask import jsonify, request, current_app
from app.extensions import limiter
from app.services import complaints as complaint_service
from app.services import messages as message_service
from app.services.complaints import UNSET
from app.services.principal import current_principal
from . import bp


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _submit_limit():
    return current_app.config.get("SUBMIT_RATE_LIMIT") or "20 per minute"


@bp.post("")
@limiter.limit(_submit_limit)
def submit():
    """Classify and store a complaint. Guests may submit without a token."""
    data = _json_body()
    complaint = complaint_service.submit_complaint(data.get("complaint_text"), current_principal())
    return jsonify({"success": True, "complaint": complaint.to_dict()}), 200


@bp.get("")
def index():
    rows = complaint_service.list_complaints(
        current_principal(),
        status=request.args.get("status"),
        q=request.args.get("q"),
    )
    return jsonify({"success": True, "complaints": [c.to_dict() for c in rows]}), 200


@bp.put("")
def update():
    data = _json_body()
    complaint = complaint_service.update_complaint(
        current_principal(),
        data.get("id"),
        status=data.get("status", UNSET),
        feedback_helpful=data.get("feedback_helpful", UNSET),
    )
    return jsonify({"success": True, "complaint": complaint.to_dict()}), 200


@bp.get("/stats")
def stats():
    return jsonify({"success": True, "stats": complaint_service.complaint_stats(current_principal())}), 200


@bp.get("/<complaint_id>/messages")
def list_messages(complaint_id):
    rows = message_service.list_messages(current_principal(), complaint_id)
    return jsonify({"success": True, "messages": [m.to_dict() for m in rows]}), 200


@bp.post("/<complaint_id>/messages")
def post_message(complaint_id):
    data = _json_body()
    msg = message_service.post_message(current_principal(), complaint_id, data.get("message_text"))
    return jsonify({"success": True, "message": msg.to_dict()}), 201
