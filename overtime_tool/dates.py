"""Date keys, weekday names and ISO-8601 durations."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

from overtime_tool.models import WEEKDAYS, DateRange

_DURATION_RE = re.compile(
    r'PT(?:(\d+(?:\.\d+)?)H)?(?:(\d+(?:\.\d+)?)M)?(?:(\d+(?:\.\d+)?)S)?'
)
_DATE_KEY_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def parse_iso_duration(value: Optional[str]) -> Decimal:
    """Parse ``PT8H30M`` style durations into hours. Unparseable input is 0."""
    if not value:
        return Decimal("0")
    match = _DURATION_RE.search(value)
    if not match:
        return Decimal("0")
    hours = Decimal(match.group(1) or "0")
    minutes = Decimal(match.group(2) or "0")
    seconds = Decimal(match.group(3) or "0")
    return hours + minutes / 60 + seconds / 3600


def parse_date_key(value: Optional[str]) -> Optional[date]:
    if not value or not _DATE_KEY_RE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def extract_date_key(value: Optional[str]) -> Optional[str]:
    """Calendar day of a timestamp, in the offset the timestamp was recorded with."""
    if not value:
        return None
    if len(value) == 10:
        return value if parse_date_key(value) else None
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    return parsed.date().isoformat()


def weekday_key(date_key: str) -> str:
    """``2024-01-15`` -> ``MONDAY``. Empty string for a malformed key."""
    parsed = parse_date_key(date_key)
    if parsed is None:
        return ""
    return WEEKDAYS[parsed.weekday()]


def date_range_keys(date_range: Optional[DateRange]) -> Optional[list[str]]:
    """Inclusive list of date keys, or None when the range is absent or malformed."""
    if date_range is None:
        return None
    start = parse_date_key(date_range.start)
    end = parse_date_key(date_range.end)
    if start is None or end is None:
        return None
    keys = []
    current = start
    while current <= end:
        keys.append(current.isoformat())
        current += timedelta(days=1)
    return keys


def hours_between(start: Optional[str], end: Optional[str]) -> Decimal:
    """Hours from ``start`` to ``end``; 0 when either timestamp is unusable or end precedes start."""
    start_dt = parse_timestamp(start)
    end_dt = parse_timestamp(end)
    if start_dt is None or end_dt is None:
        return Decimal("0")
    if (start_dt.tzinfo is None) != (end_dt.tzinfo is None):
        return Decimal("0")
    seconds = Decimal(str((end_dt - start_dt).total_seconds()))
    return max(seconds / 3600, Decimal("0"))
