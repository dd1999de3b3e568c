# Overview: Append-only audit log for case events.

from __future__ import annotations

from sqlalchemy.orm import Session

from ..models import Case, LogEntry
from ..validation import NotFoundError, ValidationError
from .transaction import atomic

"""
Audit log invariants

- Entries are only inserted, never edited.
- Entries are written inside the same unit of work as the change they record
  (callers own the commit).
- Reads are newest first.
"""

ACTION_CREATE = "CREATE"
ACTION_UPDATE = "UPDATE"
ACTION_AGENT_REMOVED = "AGENT_REMOVED"
ACTION_MESSAGE_SENT = "MESSAGE_SENT"


def append_log_entry(
    session: Session,
    *,
    case_id: int | None,
    action: str,
    details: str | None = None,
) -> LogEntry:
    """Stage a log entry on the session; the caller commits."""
    entry = LogEntry(case_id=case_id, action=action, details=details)
    session.add(entry)
    session.flush()
    return entry


def add_manual_entry(session: Session, *, case_id: int, action: str | None, details: str | None) -> dict:
    """Operator-written entry against an existing case."""
    action = (action or "").strip()
    if not action:
        raise ValidationError("action is required")
    if len(action) > 64:
        raise ValidationError("action exceeds max length 64")

    with atomic(session):
        if session.get(Case, case_id) is None:
            raise NotFoundError("Case not found")

        entry = append_log_entry(session, case_id=case_id, action=action.upper(), details=details)

    return entry.to_dict()


def list_case_entries(session: Session, *, case_id: int) -> list[dict]:
    if session.get(Case, case_id) is None:
        raise NotFoundError("Case not found")

    entries = (
        session.query(LogEntry)
        .filter(LogEntry.case_id == case_id)
        .order_by(LogEntry.created_at.desc(), LogEntry.id.desc())
        .all()
    )
    return [e.to_dict() for e in entries]
