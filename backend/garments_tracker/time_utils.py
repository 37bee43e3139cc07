from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Naive UTC timestamp used for every createdAt/updatedAt/paidAt stamp."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_datestamp(dt: Optional[datetime] = None) -> str:
    """YYYYMMDD for the UTC calendar date of dt (default: now)."""
    return (dt or utcnow()).strftime("%Y%m%d")


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse client-supplied ISO-8601 text (approvedAt, tracking timestamps).

    Blank input yields None. Offsets and a trailing Z are folded into UTC;
    a value without an offset is taken to already be UTC. The result is
    always naive, matching what the columns store.
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed
    return parsed.astimezone(timezone.utc).replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """Render a stored (naive UTC) timestamp as ISO-8601 with a trailing 'Z'."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
