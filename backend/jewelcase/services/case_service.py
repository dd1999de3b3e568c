# backend/jewelcase/services/case_service.py
"""
Consignment case ledger.

WHY: A case is the unit of consignment: a named kit of products handed to an
agent for a fixed window. Its line items snapshot catalog prices at
assignment time, so later catalog edits never rewrite history.

LIFECYCLE:
1. IDLE: created without an agent (or brought back)
2. IN_FIELD: assigned to an agent; blocks that agent's deletion
3. RESTOCK_NEEDED: returned, waiting for replenishment

INVARIANTS:
- total_value_cents == sum(price_at_time_cents * quantity) over current items,
  recomputed by _recompute_total inside the same unit of work as the item change.
- Items are replaced wholesale on update (delete all, reinsert), never diffed.
- Create / update / delete each run as one atomic unit of work, audit entry included.
"""
from __future__ import annotations

from sqlalchemy.orm import Session, joinedload, selectinload

from ..models import Agent, Case, CaseLineItem, LogEntry, Product
from ..time_utils import add_days, days_until, utcnow
from ..validation import MAX_CASE_TOTAL_CENTS, NotFoundError, ValidationError
from .audit_service import ACTION_CREATE, ACTION_UPDATE, append_log_entry
from .commission_service import calculate_commission
from .transaction import atomic


# Case status constants
CASE_STATUS_IDLE = "IDLE"
CASE_STATUS_IN_FIELD = "IN_FIELD"
CASE_STATUS_RESTOCK_NEEDED = "RESTOCK_NEEDED"
CASE_STATUSES = (CASE_STATUS_IDLE, CASE_STATUS_IN_FIELD, CASE_STATUS_RESTOCK_NEEDED)

DEFAULT_RETURN_WINDOW_DAYS = 60

# Read-side flags only, never stored
PREMIUM_THRESHOLD_CENTS = 800_000
EXPIRING_WITHIN_DAYS = 7


def is_premium(total_value_cents: int) -> bool:
    return total_value_cents > PREMIUM_THRESHOLD_CENTS


def _get_case_or_404(session: Session, case_id: int) -> Case:
    case = session.get(Case, case_id)
    if case is None:
        raise NotFoundError("Case not found")
    return case


def _require_agent(session: Session, agent_id: int | None) -> Agent | None:
    if agent_id is None:
        return None
    agent = session.get(Agent, agent_id)
    if agent is None:
        raise ValidationError(f"Agent {agent_id} not found")
    return agent


def _build_line_items(session: Session, items: list[dict]) -> list[CaseLineItem]:
    """
    Turn parsed {product_id, quantity, price_cents} dicts into line items.

    Removed products are accepted (editing a historical case keeps its lines);
    unknown product ids are not.
    """
    product_ids = {i["product_id"] for i in items}
    found = set()
    if product_ids:
        found = {
            pid for (pid,) in session.query(Product.id).filter(Product.id.in_(product_ids)).all()
        }
    missing = sorted(product_ids - found)
    if missing:
        raise ValidationError(f"Unknown product_id(s): {', '.join(str(m) for m in missing)}")

    return [
        CaseLineItem(
            product_id=i["product_id"],
            quantity=i["quantity"],
            price_at_time_cents=i["price_cents"],
        )
        for i in items
    ]


def _recompute_total(case: Case) -> int:
    total = sum(item.price_at_time_cents * item.quantity for item in case.items)
    if total > MAX_CASE_TOTAL_CENTS:
        raise ValidationError(f"Case total cannot exceed {MAX_CASE_TOTAL_CENTS} cents")
    case.total_value_cents = total
    return total


def _validate_status(status: str, agent_id: int | None) -> str:
    status = (status or "").strip().upper()
    if status not in CASE_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(CASE_STATUSES)}")
    if status == CASE_STATUS_IN_FIELD and agent_id is None:
        raise ValidationError("A case in field must be assigned to an agent")
    return status


def case_to_dict(case: Case, *, include_items: bool = True, now=None) -> dict:
    """Serialize a case with its derived read-side fields."""
    data = case.to_dict()
    days_left = days_until(case.return_date, now=now)
    data["is_premium"] = is_premium(case.total_value_cents)
    data["commission"] = calculate_commission(case.total_value_cents).to_dict()
    data["days_left"] = days_left
    data["is_expiring"] = days_left is not None and days_left <= EXPIRING_WITHIN_DAYS
    if include_items:
        data["items"] = [item.to_dict() for item in case.items]
    return data


def list_cases(session: Session) -> dict:
    cases = (
        session.query(Case)
        .options(
            joinedload(Case.agent),
            selectinload(Case.items).joinedload(CaseLineItem.product),
        )
        .order_by(Case.id.asc())
        .all()
    )
    now = utcnow()
    return {
        "items": [case_to_dict(c, now=now) for c in cases],
        "count": len(cases),
    }


def get_case(session: Session, *, case_id: int) -> dict:
    return case_to_dict(_get_case_or_404(session, case_id))


def create_case(
    session: Session,
    *,
    name: str,
    items: list[dict],
    agent_id: int | None = None,
    photo: str | None = None,
    return_window_days: int = DEFAULT_RETURN_WINDOW_DAYS,
) -> dict:
    """
    Create a case and its items in one unit of work.

    Args:
        name: Kit name
        items: Parsed [{product_id, quantity, price_cents}]
        agent_id: Assigned agent; None leaves the case IDLE
        photo: Optional photo of the physical kit
        return_window_days: Days from delivery until the kit is due back

    Raises:
        ValidationError: unknown agent or product
    """
    with atomic(session):
        _require_agent(session, agent_id)

        delivery_date = utcnow()
        case = Case(
            name=name,
            agent_id=agent_id,
            photo=photo,
            delivery_date=delivery_date,
            return_date=add_days(delivery_date, return_window_days),
            status=CASE_STATUS_IN_FIELD if agent_id is not None else CASE_STATUS_IDLE,
        )
        case.items = _build_line_items(session, items)
        _recompute_total(case)

        session.add(case)
        session.flush()  # ensure case.id exists before the audit entry

        append_log_entry(
            session,
            case_id=case.id,
            action=ACTION_CREATE,
            details=f"Case created with {len(items)} items.",
        )

    return case_to_dict(case)


def update_case(
    session: Session,
    *,
    case_id: int,
    name: str,
    status: str,
    agent_id: int | None = None,
    items: list[dict] | None = None,
) -> dict:
    """
    Overwrite name / agent / status and, when items is given, replace every
    line item and recompute the total.
    """
    with atomic(session):
        case = _get_case_or_404(session, case_id)
        _require_agent(session, agent_id)
        status = _validate_status(status, agent_id)

        case.name = name
        case.agent_id = agent_id
        case.status = status

        details = "Case updated."
        if items is not None:
            new_items = _build_line_items(session, items)
            case.items.clear()
            session.flush()  # old rows are deleted before the new set lands
            case.items.extend(new_items)
            _recompute_total(case)
            details = f"Case updated; items replaced ({len(items)} items)."

        append_log_entry(session, case_id=case.id, action=ACTION_UPDATE, details=details)

    return case_to_dict(case)


def delete_case(session: Session, *, case_id: int) -> None:
    """Remove items, audit entries and the case row together."""
    with atomic(session):
        case = _get_case_or_404(session, case_id)
        session.query(LogEntry).filter(LogEntry.case_id == case.id).delete(
            synchronize_session=False
        )
        session.delete(case)  # items go with it (delete-orphan cascade)
