# Overview: Flask API routes for the agent roster; parses input and returns JSON responses.

"""
Agent Routes

Agents are the field sellers who carry cases. Listing includes the derived
total sales and the commission it earns.

DELETE returns 409 with a structured payload while the agent still has a
case in field.
"""

from flask import Blueprint, request, jsonify

from ..extensions import db
from ..models import Agent
from ..services import agents_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    ValidationError,
    NotFoundError,
    ConflictError,
)

AGENT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "contact"},
    required_on_create={"name", "contact"},
)

agents_bp = Blueprint("agents", __name__, url_prefix="/api/agents")


@agents_bp.get("")
def list_agents_route():
    """
    List agents with derived totals.

    Returns:
        {items: [{id, name, contact, total_sales_cents, commission}], count}
    """
    return jsonify(agents_service.list_agents(db.session))


@agents_bp.post("")
def create_agent_route():
    data = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Agent, payload=data, policy=AGENT_POLICY, partial=False)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    agent = agents_service.create_agent(db.session, patch=patch)
    return jsonify(agent), 201


@agents_bp.put("/<int:agent_id>")
def update_agent_route(agent_id: int):
    data = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Agent, payload=data, policy=AGENT_POLICY, partial=False)
        agent = agents_service.update_agent(db.session, agent_id=agent_id, patch=patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify(agent), 200


@agents_bp.delete("/<int:agent_id>")
def delete_agent_route(agent_id: int):
    """
    Delete an agent.

    Returns:
        200 {ok: true}
        404 unknown agent
        409 {error, code: AGENT_HAS_CASES_IN_FIELD, details: {agent_id, in_field_cases}}
    """
    try:
        agents_service.delete_agent(db.session, agent_id=agent_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify(e.to_dict()), 409

    return jsonify({"ok": True}), 200
