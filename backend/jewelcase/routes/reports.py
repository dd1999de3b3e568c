# Overview: Flask API routes for the dashboard and consignment reports.

from flask import Blueprint, jsonify

from ..extensions import db
from ..services import reporting_service

reports_bp = Blueprint("reports", __name__, url_prefix="/api")


@reports_bp.get("/stats")
def stats_route():
    """
    Dashboard numbers, recomputed on every call.

    Returns:
        {vgv_cents, active_cases, premium_cases, total_agents,
         sales_by_agent: [{agent_id, name, value_cents}]}
    """
    return jsonify(reporting_service.dashboard_stats(db.session))


@reports_bp.get("/reports/commissioned-items")
def commissioned_items_route():
    """Every line item out on consignment (non-idle cases) with a per-product summary."""
    return jsonify(reporting_service.commissioned_items(db.session))


@reports_bp.get("/reports/field-stock")
def field_stock_route():
    return jsonify(reporting_service.field_stock(db.session))
