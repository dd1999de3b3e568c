from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Product(db.Model):
    """
    Catalog entry for a piece of jewelry.

    Products are never hard-deleted: case line items keep referencing them
    for history, so removal flips status to REMOVED and hides the product
    from new-assignment pickers.

    Price is authoritative in cents. Line items snapshot it at assignment
    time, so later edits here do not change existing cases.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_status_name", "status", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(16), nullable=False)  # earring, ring, bracelet, necklace
    price_cents = db.Column(db.Integer, nullable=False, default=0)

    # URL or data URI, opaque to the backend
    photo = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(16), nullable=False, default="ACTIVE", index=True)  # ACTIVE, REMOVED

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "price_cents": self.price_cents,
            "photo": self.photo,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
