# Overview: Service-layer operations for reporting; read-side joins and sums for the dashboard.

from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..models import Agent, Case, CaseLineItem, ManualCommission
from ..time_utils import to_utc_z
from .agents_service import agent_sales_totals
from .case_service import CASE_STATUS_IDLE, CASE_STATUS_IN_FIELD, PREMIUM_THRESHOLD_CENTS


def dashboard_stats(session: Session) -> dict:
    """
    Fresh dashboard numbers; every call re-aggregates the raw tables.

    - vgv_cents: case totals of every non-idle case plus all manual commission prices
    - active_cases: cases IN_FIELD
    - premium_cases: cases above the premium threshold, any status
    - sales_by_agent: per-agent case + manual totals, highest first
    """
    vgv_cases = (
        session.query(func.coalesce(func.sum(Case.total_value_cents), 0))
        .filter(Case.status != CASE_STATUS_IDLE)
        .scalar()
    )
    vgv_manual = session.query(func.coalesce(func.sum(ManualCommission.price_cents), 0)).scalar()

    active_cases = (
        session.query(func.count(Case.id)).filter(Case.status == CASE_STATUS_IN_FIELD).scalar()
    )
    premium_cases = (
        session.query(func.count(Case.id))
        .filter(Case.total_value_cents > PREMIUM_THRESHOLD_CENTS)
        .scalar()
    )
    total_agents = session.query(func.count(Agent.id)).scalar()

    ranking = sorted(agent_sales_totals(session), key=lambda row: (-row[1], row[0].id))

    return {
        "vgv_cents": int(vgv_cases or 0) + int(vgv_manual or 0),
        "active_cases": int(active_cases or 0),
        "premium_cases": int(premium_cases or 0),
        "total_agents": int(total_agents or 0),
        "sales_by_agent": [
            {"agent_id": agent.id, "name": agent.name, "value_cents": total}
            for agent, total in ranking
        ],
    }


def _non_idle_cases(session: Session) -> list[Case]:
    return (
        session.query(Case)
        .options(
            joinedload(Case.agent),
            joinedload(Case.items).joinedload(CaseLineItem.product),
        )
        .filter(Case.status != CASE_STATUS_IDLE)
        .order_by(Case.id.asc())
        .all()
    )


def commissioned_items(session: Session) -> dict:
    """
    Everything currently out on consignment, line by line, plus a per-product
    summary. Idle cases are excluded.
    """
    rows = []
    summary: dict[int, dict] = {}
    total_in_field_cents = 0

    for case in _non_idle_cases(session):
        for item in case.items:
            row = item.to_dict()
            row["agent_name"] = case.agent.name if case.agent else None
            row["case_name"] = case.name
            row["delivery_date"] = to_utc_z(case.delivery_date)
            rows.append(row)

            total_in_field_cents += item.subtotal_cents

            entry = summary.get(item.product_id)
            if entry is None:
                entry = summary[item.product_id] = {
                    "product_id": item.product_id,
                    "name": row["product_name"],
                    "category": row["product_category"],
                    "photo": row["product_photo"],
                    "total_qty": 0,
                    "total_value_cents": 0,
                }
            entry["total_qty"] += item.quantity
            entry["total_value_cents"] += item.subtotal_cents

    total_manual_commission_cents = session.query(
        func.coalesce(func.sum(ManualCommission.commission_value_cents), 0)
    ).scalar()

    return {
        "items": rows,
        "product_summary": sorted(summary.values(), key=lambda e: -e["total_value_cents"]),
        "total_in_field_cents": total_in_field_cents,
        "total_manual_commission_cents": int(total_manual_commission_cents or 0),
    }


def field_stock(session: Session) -> dict:
    """Quantity of each product currently out in non-idle cases."""
    rows = (
        session.query(CaseLineItem.product_id, func.sum(CaseLineItem.quantity))
        .join(Case, CaseLineItem.case_id == Case.id)
        .filter(Case.status != CASE_STATUS_IDLE)
        .group_by(CaseLineItem.product_id)
        .order_by(CaseLineItem.product_id.asc())
        .all()
    )
    return {
        "rows": [
            {"product_id": product_id, "in_field_quantity": int(qty or 0)}
            for product_id, qty in rows
        ],
    }
