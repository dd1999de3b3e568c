# Overview: Flask API routes for consignment cases, their audit log and agent message.

# backend/jewelcase/routes/cases.py
"""
Case routes.

Payload shape (POST and PUT):
    {
      "name": "Kit A",
      "agent_id": 3,                    # optional; omitted/null leaves the case IDLE
      "photo": "...",                   # POST only, optional
      "status": "IN_FIELD",             # PUT only, required
      "items": [{"product_id": 1, "quantity": 2, "price_cents": 4500}]
    }

items is required on POST. On PUT it is optional; when present every line
item is replaced.
"""
from flask import Blueprint, current_app, jsonify, request

from ..extensions import db
from ..models import Case
from ..services import audit_service, case_service, messaging_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    parse_case_items,
    ValidationError,
    NotFoundError,
)

CASE_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "agent_id", "photo"},
    required_on_create={"name"},
)

CASE_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "agent_id", "status"},
    required_on_create={"name", "status"},
)

cases_bp = Blueprint("cases", __name__, url_prefix="/api/cases")


def _split_items(data: dict) -> tuple[dict, object]:
    data = dict(data)
    return data, data.pop("items", None)


@cases_bp.get("")
def list_cases_route():
    return jsonify(case_service.list_cases(db.session))


@cases_bp.post("")
def create_case_route():
    """
    Create a case with its items.

    Status is derived: IN_FIELD when an agent is given, IDLE otherwise.
    Return date is delivery + CASE_RETURN_WINDOW_DAYS.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        fields, raw_items = _split_items(data)
        patch = validate_payload(model=Case, payload=fields, policy=CASE_CREATE_POLICY, partial=False)
        if raw_items is None:
            raise ValidationError("items is required")
        items = parse_case_items(raw_items)

        case = case_service.create_case(
            db.session,
            name=patch["name"],
            items=items,
            agent_id=patch.get("agent_id"),
            photo=patch.get("photo"),
            return_window_days=current_app.config["CASE_RETURN_WINDOW_DAYS"],
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create case")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(case), 201


@cases_bp.get("/<int:case_id>")
def get_case_route(case_id: int):
    try:
        return jsonify(case_service.get_case(db.session, case_id=case_id)), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@cases_bp.put("/<int:case_id>")
def update_case_route(case_id: int):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        fields, raw_items = _split_items(data)
        patch = validate_payload(model=Case, payload=fields, policy=CASE_UPDATE_POLICY, partial=False)
        items = parse_case_items(raw_items) if raw_items is not None else None

        case = case_service.update_case(
            db.session,
            case_id=case_id,
            name=patch["name"],
            status=patch["status"],
            agent_id=patch.get("agent_id"),
            items=items,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update case %s", case_id)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(case), 200


@cases_bp.delete("/<int:case_id>")
def delete_case_route(case_id: int):
    try:
        case_service.delete_case(db.session, case_id=case_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"ok": True}), 200


@cases_bp.get("/<int:case_id>/logs")
def list_case_logs_route(case_id: int):
    """Audit entries for one case, newest first."""
    try:
        entries = audit_service.list_case_entries(db.session, case_id=case_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"items": entries, "count": len(entries)}), 200


@cases_bp.post("/<int:case_id>/logs")
def add_case_log_route(case_id: int):
    data = request.get_json(silent=True) or {}

    try:
        entry = audit_service.add_manual_entry(
            db.session,
            case_id=case_id,
            action=data.get("action"),
            details=data.get("details"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify(entry), 201


@cases_bp.get("/<int:case_id>/message")
def case_message_route(case_id: int):
    """Delivery message for the case's agent, plus a chat deep link."""
    try:
        return jsonify(messaging_service.case_message(db.session, case_id=case_id)), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
