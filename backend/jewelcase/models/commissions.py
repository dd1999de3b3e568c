from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class ManualCommission(db.Model):
    """
    One-off commission entry not tied to any case.

    commission_value_cents is typed in by the operator; the tiered
    commission rate does not apply here.
    """
    __tablename__ = "manual_commissions"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    agent_id = db.Column(db.Integer, db.ForeignKey("agents.id"), nullable=True, index=True)
    product_name = db.Column(db.String(255), nullable=False)
    price_cents = db.Column(db.Integer, nullable=False)
    commission_value_cents = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    agent = db.relationship("Agent", backref=db.backref("manual_commissions", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "agent_id": self.agent_id,
            "agent_name": self.agent.name if self.agent else None,
            "product_name": self.product_name,
            "price_cents": self.price_cents,
            "commission_value_cents": self.commission_value_cents,
            "created_at": to_utc_z(self.created_at),
        }
