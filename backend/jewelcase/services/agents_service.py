# Overview: Service-layer operations for the agent roster; encapsulates business logic and database work.

"""
Roster Service

- total_sales is derived on every read: sum of the agent's case totals plus
  sum of the agent's manual commission prices. Nothing is cached.
- Deleting an agent is refused while any of their cases is IN_FIELD.
  Otherwise the row is removed and remaining cases / manual commissions are
  detached (agent_id -> NULL) so no dangling reference survives.
"""
from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import Agent, Case, ManualCommission
from ..validation import ConflictError, NotFoundError
from .audit_service import ACTION_AGENT_REMOVED, append_log_entry
from .case_service import CASE_STATUS_IN_FIELD
from .commission_service import calculate_commission
from .transaction import atomic

AGENT_MUTABLE_FIELDS = ("name", "contact")


def _get_agent_or_404(session: Session, agent_id: int) -> Agent:
    agent = session.get(Agent, agent_id)
    if agent is None:
        raise NotFoundError("Agent not found")
    return agent


def agent_sales_totals(session: Session) -> list[tuple[Agent, int]]:
    """
    (agent, total_sales_cents) for every agent, ordered by name.

    Case and manual totals are aggregated in separate subqueries so one side
    cannot multiply the other through the join.
    """
    case_totals = (
        session.query(
            Case.agent_id.label("agent_id"),
            func.sum(Case.total_value_cents).label("total"),
        )
        .filter(Case.agent_id.isnot(None))
        .group_by(Case.agent_id)
        .subquery()
    )
    manual_totals = (
        session.query(
            ManualCommission.agent_id.label("agent_id"),
            func.sum(ManualCommission.price_cents).label("total"),
        )
        .filter(ManualCommission.agent_id.isnot(None))
        .group_by(ManualCommission.agent_id)
        .subquery()
    )

    rows = (
        session.query(
            Agent,
            func.coalesce(case_totals.c.total, 0),
            func.coalesce(manual_totals.c.total, 0),
        )
        .outerjoin(case_totals, case_totals.c.agent_id == Agent.id)
        .outerjoin(manual_totals, manual_totals.c.agent_id == Agent.id)
        .order_by(Agent.name.asc(), Agent.id.asc())
        .all()
    )
    return [(agent, int(cases_total) + int(manual_total)) for agent, cases_total, manual_total in rows]


def list_agents(session: Session) -> dict:
    items = []
    for agent, total_sales_cents in agent_sales_totals(session):
        row = agent.to_dict()
        row["total_sales_cents"] = total_sales_cents
        row["commission"] = calculate_commission(total_sales_cents).to_dict()
        items.append(row)
    return {"items": items, "count": len(items)}


def create_agent(session: Session, *, patch: dict) -> dict:
    with atomic(session):
        agent = Agent(name=patch["name"], contact=patch["contact"])
        session.add(agent)
    return agent.to_dict()


def update_agent(session: Session, *, agent_id: int, patch: dict) -> dict:
    with atomic(session):
        agent = _get_agent_or_404(session, agent_id)
        for field in AGENT_MUTABLE_FIELDS:
            setattr(agent, field, patch[field])
    return agent.to_dict()


def delete_agent(session: Session, *, agent_id: int) -> None:
    """
    Raises:
        NotFoundError: unknown agent
        ConflictError: agent still has cases IN_FIELD (agent row untouched)
    """
    with atomic(session):
        agent = _get_agent_or_404(session, agent_id)

        in_field = (
            session.query(func.count(Case.id))
            .filter(Case.agent_id == agent.id, Case.status == CASE_STATUS_IN_FIELD)
            .scalar()
        )
        if in_field:
            raise ConflictError(
                "agent has cases in field",
                code="AGENT_HAS_CASES_IN_FIELD",
                details={"agent_id": agent.id, "in_field_cases": int(in_field)},
            )

        for case in session.query(Case).filter(Case.agent_id == agent.id).all():
            case.agent_id = None
            append_log_entry(
                session,
                case_id=case.id,
                action=ACTION_AGENT_REMOVED,
                details=f"Agent {agent.name} (#{agent.id}) removed from roster; case detached.",
            )

        session.query(ManualCommission).filter(ManualCommission.agent_id == agent.id).update(
            {ManualCommission.agent_id: None}, synchronize_session=False
        )

        session.delete(agent)
