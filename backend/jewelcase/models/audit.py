from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class LogEntry(db.Model):
    """
    Append-only audit trail, mostly per case.

    case_id is nullable so gateway events without a case can still be recorded.
    Rows are only ever inserted, except when their case is deleted.
    """
    __tablename__ = "logs"
    __table_args__ = (
        db.Index("ix_logs_case_created", "case_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    case_id = db.Column(db.Integer, db.ForeignKey("cases.id"), nullable=True)
    action = db.Column(db.String(64), nullable=False)
    details = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "case_id": self.case_id,
            "action": self.action,
            "details": self.details,
            "created_at": to_utc_z(self.created_at),
        }
