# Overview: Flask API routes for the commission calculator and manual commissions.

"""
Commission Routes

- GET /api/commissions/quote?total_cents=...   tiered rate and payout
- /api/manual-commissions                       one-off entries (list, create, delete)
"""

from flask import Blueprint, current_app, jsonify, request

from ..extensions import db
from ..models import ManualCommission
from ..services import commission_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_manual_commission,
    ValidationError,
    NotFoundError,
)

MANUAL_COMMISSION_POLICY = ModelValidationPolicy(
    writable_fields={"agent_id", "product_name", "price_cents", "commission_value_cents"},
    required_on_create={"agent_id", "product_name", "price_cents", "commission_value_cents"},
)

commissions_bp = Blueprint("commissions", __name__, url_prefix="/api")


@commissions_bp.get("/commissions/quote")
def quote_route():
    raw = request.args.get("total_cents", "").strip()
    if not raw.isdigit():
        return jsonify({"error": "total_cents must be a non-negative integer"}), 400

    quote = commission_service.calculate_commission(int(raw))
    return jsonify(quote.to_dict()), 200


@commissions_bp.get("/manual-commissions")
def list_manual_commissions_route():
    items = commission_service.list_manual_commissions(db.session)
    return jsonify({"items": items, "count": len(items)})


@commissions_bp.post("/manual-commissions")
def create_manual_commission_route():
    data = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(
            model=ManualCommission,
            payload=data,
            policy=MANUAL_COMMISSION_POLICY,
            partial=False,
        )
        enforce_rules_manual_commission(patch)
        created = commission_service.create_manual_commission(db.session, patch=patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to create manual commission")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(created), 201


@commissions_bp.delete("/manual-commissions/<int:commission_id>")
def delete_manual_commission_route(commission_id: int):
    try:
        commission_service.delete_manual_commission(db.session, commission_id=commission_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"ok": True}), 200
