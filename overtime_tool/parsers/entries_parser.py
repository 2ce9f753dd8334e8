"""Time entry parser.

Normalises Reports API style time entries into canonical TimeEntry records.

Accepted shapes per entry:
  timeInterval: {start, end, duration}       (flat start/end/duration also accepted)
  earnedRate / costRate: 5000 or {"amount": 5000}      (cents per hour)
  hourlyRate: {"amount": 5000}
  amounts: [{"type": "EARNED", "value": 120}, {"amountType": "cost", "amount": 80}]
  billable: missing means billable
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from overtime_tool.models import Amount, StrictValidationError, TimeEntry
from overtime_tool.numeric import to_decimal


def _extract_rate(value: Any) -> Optional[Decimal]:
    """Rate as a number, or nested under ``amount``; anything else is absent."""
    if isinstance(value, dict):
        value = value.get("amount")
    return to_decimal(value)


def _parse_amounts(raw: Any) -> tuple[Amount, ...]:
    if not isinstance(raw, list):
        return ()
    amounts = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        amount_type = str(item.get("type") or item.get("amountType") or "").upper()
        raw_value = item.get("value")
        if raw_value is None:
            raw_value = item.get("amount")
        value = to_decimal(raw_value)
        if not amount_type or value is None:
            continue
        amounts.append(Amount(type=amount_type, value=value))
    return tuple(amounts)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_entry(raw: dict[str, Any], index: int = 0) -> TimeEntry:
    interval = raw.get("timeInterval")
    if not isinstance(interval, dict):
        interval = {}

    return TimeEntry(
        id=str(raw.get("id") or raw.get("_id") or f"entry-{index}"),
        user_id=_optional_str(raw.get("userId")),
        user_name=_optional_str(raw.get("userName")),
        description=str(raw.get("description") or ""),
        start=_optional_str(interval.get("start", raw.get("start"))),
        end=_optional_str(interval.get("end", raw.get("end"))),
        duration=_optional_str(interval.get("duration", raw.get("duration"))),
        type=_optional_str(raw.get("type")),
        billable=raw.get("billable") is not False,
        earned_rate=_extract_rate(raw.get("earnedRate")),
        cost_rate=_extract_rate(raw.get("costRate")),
        hourly_rate=_extract_rate(raw.get("hourlyRate")),
        amounts=_parse_amounts(raw.get("amounts")),
    )


def parse_entries(raw_entries: Optional[list[Any]]) -> list[TimeEntry]:
    """Parse a list of raw entry dicts. Items that are not objects are skipped."""
    if not raw_entries:
        return []
    return [
        parse_entry(raw, index)
        for index, raw in enumerate(raw_entries)
        if isinstance(raw, dict)
    ]


def load_entries(path: str | Path) -> list[TimeEntry]:
    """Load entries from a JSON file holding a list or {"timeentries": [...]}."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise StrictValidationError([f"{path.name}: invalid JSON ({e})"]) from e

    if isinstance(data, dict):
        data = data.get("timeentries", data.get("entries"))
    if not isinstance(data, list):
        raise StrictValidationError([f"{path.name}: expected a list of time entries"])
    return parse_entries(data)
