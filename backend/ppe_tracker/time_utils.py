from __future__ import annotations

from datetime import datetime, time, timezone
from typing import Optional


def utcnow() -> datetime:
    """Timestamp for new rows: UTC, stored naive."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def start_of_day(dt: datetime) -> datetime:
    """Midnight of dt's date. Loans due before this are overdue."""
    return datetime.combine(dt.date(), time.min)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a client date such as a loan dueDate into UTC-naive.

    The request forms send either a bare date ("2026-11-01") or a full
    timestamp ("2026-11-01T09:30:00Z"); offsets are folded into UTC.
    Blank values mean "no date". Anything else raises ValueError.
    """
    if value is None or not value.strip():
        return None

    dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """Wire format for every timestamp in to_dict(): whole seconds, trailing Z."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.replace(microsecond=0).isoformat() + "Z"
