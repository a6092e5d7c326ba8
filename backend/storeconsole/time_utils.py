from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


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


def format_display_date(dt: Optional[datetime], missing: str = "No date") -> str:
    """
    Day-first calendar date used in exports (DD/MM/YYYY).

    Records written before timestamps were stamped have no date; those
    render as `missing` instead of failing.
    """
    if dt is None:
        return missing
    return dt.strftime("%d/%m/%Y")


def iso_date(dt: Optional[datetime] = None) -> str:
    """YYYY-MM-DD of `dt` (default: now), used in export filenames."""
    return (dt or utcnow()).date().isoformat()
