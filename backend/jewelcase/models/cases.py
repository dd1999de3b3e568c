from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Case(db.Model):
    """
    Consignment case (kit of products) handed to an agent.

    LIFECYCLE:
    - IDLE: no agent, sitting in the shop
    - IN_FIELD: assigned and out with the agent
    - RESTOCK_NEEDED: back from the field, needs replenishing

    total_value_cents is a denormalized cache of sum(price_at_time_cents * quantity)
    over the current items. Only case_service writes it, in the same unit of
    work that changes the items.
    """
    __tablename__ = "cases"
    __table_args__ = (
        db.Index("ix_cases_agent_status", "agent_id", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    agent_id = db.Column(db.Integer, db.ForeignKey("agents.id"), nullable=True, index=True)
    photo = db.Column(db.Text, nullable=True)

    delivery_date = db.Column(db.DateTime(timezone=True), nullable=True)
    return_date = db.Column(db.DateTime(timezone=True), nullable=True)

    status = db.Column(db.String(16), nullable=False, default="IDLE", index=True)
    total_value_cents = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    agent = db.relationship("Agent", backref=db.backref("cases", lazy=True))
    items = db.relationship(
        "CaseLineItem",
        back_populates="case",
        order_by="CaseLineItem.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Case id={self.id} name={self.name!r} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "agent_id": self.agent_id,
            "agent_name": self.agent.name if self.agent else None,
            "agent_contact": self.agent.contact if self.agent else None,
            "photo": self.photo,
            "delivery_date": to_utc_z(self.delivery_date),
            "return_date": to_utc_z(self.return_date),
            "status": self.status,
            "total_value_cents": self.total_value_cents,
            "created_at": to_utc_z(self.created_at),
        }


class CaseLineItem(db.Model):
    """
    One product line inside a case.

    price_at_time_cents is the catalog price snapshot taken when the item was
    assigned; display fields (name, category, photo) come from the current
    product row.
    """
    __tablename__ = "case_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    case_id = db.Column(db.Integer, db.ForeignKey("cases.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    price_at_time_cents = db.Column(db.Integer, nullable=False)

    case = db.relationship("Case", back_populates="items")
    product = db.relationship("Product")

    @property
    def subtotal_cents(self) -> int:
        return self.price_at_time_cents * self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "case_id": self.case_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "price_at_time_cents": self.price_at_time_cents,
            "subtotal_cents": self.subtotal_cents,
            "product_name": self.product.name if self.product else None,
            "product_category": self.product.category if self.product else None,
            "product_photo": self.product.photo if self.product else None,
        }
