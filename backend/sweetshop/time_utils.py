"""
Timestamps are stored as naive UTC. Everything entering the API is
normalized to that on the way in, and everything leaving it carries a
trailing 'Z'.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional


DEFAULT_RANGE_DAYS = 30


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    "2024-07-01"               -> midnight UTC
    "2024-07-01T18:30"         -> taken as UTC
    "2024-07-01T18:30:00+05:30" or "...Z" -> converted to UTC

    Blank input is None; malformed input raises ValueError.
    """
    text = (value or "").strip()
    if not text:
        return None
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    return _as_naive_utc(datetime.fromisoformat(text))


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """Calendar date from "YYYY-MM-DD" or from a full ISO datetime."""
    text = (value or "").strip()
    if not text:
        return None
    if len(text) == 10:
        return date.fromisoformat(text)
    return parse_iso_datetime(text).date()


def parse_range_end(value: Optional[str]) -> Optional[datetime]:
    """Inclusive upper bound: a date-only value ("2024-07-31") covers that whole day."""
    end_dt = parse_iso_datetime(value)
    if end_dt is not None and len(value.strip()) == 10:
        end_dt = datetime.combine(end_dt.date(), time.max)
    return end_dt


def parse_date_range(start: Optional[str], end: Optional[str]) -> tuple[datetime, datetime]:
    """
    Resolve a reporting range.

    A date-only end covers that whole day. Missing bounds default to the
    last 30 days ending now.
    """
    end_dt = parse_range_end(end)
    if end_dt is None:
        end_dt = utcnow()

    start_dt = parse_iso_datetime(start)
    if start_dt is None:
        start_dt = datetime.combine((end_dt - timedelta(days=DEFAULT_RANGE_DAYS)).date(), time.min)

    if start_dt > end_dt:
        raise ValueError("startDate must be on or before endDate")
    return start_dt, end_dt


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """Second-precision ISO-8601 with a trailing 'Z'; naive input is UTC."""
    if dt is None:
        return None
    return _as_naive_utc(dt).replace(microsecond=0).isoformat() + "Z"


def to_iso_date(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d is not None else None
