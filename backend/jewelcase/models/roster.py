from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Agent(db.Model):
    """
    Field sales agent who carries consignment cases.

    total_sales is derived at read time (see agents_service), never stored.
    """
    __tablename__ = "agents"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)

    # Messaging handle (phone number in any format; digits are used for deep links)
    contact = db.Column(db.String(64), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Agent id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "contact": self.contact,
            "created_at": to_utc_z(self.created_at),
        }
