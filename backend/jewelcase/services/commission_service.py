# Overview: Commission calculator and the manual commission ledger.

"""
Commission rules

- Tiered rate on a case (or agent) total: 40% from 5,000.00 inclusive, 30% below.
- Rates are basis points; payout rounds half-up to the cent.
- Manual commissions are typed in directly and never go through the calculator.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session, joinedload

from ..models import Agent, ManualCommission
from ..validation import NotFoundError, ValidationError
from .transaction import atomic


HIGH_TIER_THRESHOLD_CENTS = 500_000
HIGH_TIER_RATE_BPS = 4000
BASE_RATE_BPS = 3000


@dataclass(frozen=True)
class CommissionQuote:
    total_cents: int
    rate_bps: int
    payout_cents: int

    @property
    def rate_percent(self) -> float:
        return self.rate_bps / 100

    def to_dict(self) -> dict:
        return {
            "total_cents": self.total_cents,
            "rate_bps": self.rate_bps,
            "rate_percent": self.rate_percent,
            "payout_cents": self.payout_cents,
        }


def commission_rate_bps(total_cents: int) -> int:
    return HIGH_TIER_RATE_BPS if total_cents >= HIGH_TIER_THRESHOLD_CENTS else BASE_RATE_BPS


def calculate_commission(total_cents: int) -> CommissionQuote:
    if total_cents < 0:
        raise ValidationError("total_cents must be >= 0")
    rate_bps = commission_rate_bps(total_cents)
    payout_cents = (total_cents * rate_bps + 5000) // 10000
    return CommissionQuote(total_cents=total_cents, rate_bps=rate_bps, payout_cents=payout_cents)


def list_manual_commissions(session: Session) -> list[dict]:
    rows = (
        session.query(ManualCommission)
        .options(joinedload(ManualCommission.agent))
        .order_by(ManualCommission.created_at.desc(), ManualCommission.id.desc())
        .all()
    )
    return [mc.to_dict() for mc in rows]


def create_manual_commission(session: Session, *, patch: dict) -> dict:
    """
    Create a manual commission from a validated patch dict
    (agent_id, product_name, price_cents, commission_value_cents).
    """
    with atomic(session):
        agent = session.get(Agent, patch["agent_id"])
        if agent is None:
            raise NotFoundError("Agent not found")

        mc = ManualCommission(
            agent_id=agent.id,
            product_name=patch["product_name"],
            price_cents=patch["price_cents"],
            commission_value_cents=patch["commission_value_cents"],
        )
        session.add(mc)

    return mc.to_dict()


def delete_manual_commission(session: Session, *, commission_id: int) -> None:
    with atomic(session):
        mc = session.get(ManualCommission, commission_id)
        if mc is None:
            raise NotFoundError("Manual commission not found")
        session.delete(mc)
