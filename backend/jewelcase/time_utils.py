from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def add_days(dt: datetime, days: int) -> datetime:
    return dt + timedelta(days=days)


def days_until(target: Optional[datetime], *, now: Optional[datetime] = None) -> Optional[int]:
    """
    Whole days from now until target, rounded up (a case due in 6h is due in 1 day).
    Negative once the target has passed.
    """
    if target is None:
        return None
    now = now or utcnow()
    seconds = (target - now).total_seconds()
    days, remainder = divmod(seconds, 86400)
    return int(days) + (1 if remainder > 0 else 0)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")
