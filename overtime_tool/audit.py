"""Audit Engine.

Generates full traceability JSON output for an analysis run.
"""

from __future__ import annotations

import json
from dataclasses import asdict, fields
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Optional

from overtime_tool.models import (
    AmountBreakdown,
    AnalyzedEntry,
    DateRange,
    DayData,
    UserAnalysis,
    UserTotals,
)


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal and Enum values."""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def _breakdown(b: AmountBreakdown) -> dict:
    return {
        "rate": float(b.rate),
        "regular_amount": float(b.regular_amount),
        "overtime_amount_base": float(b.overtime_amount_base),
        "base_amount": float(b.base_amount),
        "tier1_premium": float(b.tier1_premium),
        "tier2_premium": float(b.tier2_premium),
        "total_amount_with_ot": float(b.total_amount_with_ot),
        "total_amount_no_ot": float(b.total_amount_no_ot),
        "overtime_rate": float(b.overtime_rate),
    }


def _totals(totals: UserTotals) -> dict:
    return {
        f.name: (float(v) if isinstance(v, Decimal) else v)
        for f in fields(totals)
        for v in [getattr(totals, f.name)]
    }


def _entry(item: AnalyzedEntry) -> dict:
    entry, analysis = item.entry, item.analysis
    return {
        "id": entry.id,
        "description": entry.description,
        "start": entry.start,
        "end": entry.end,
        "type": entry.type,
        "class": analysis.entry_class.value,
        "billable": analysis.is_billable,
        "regular": float(analysis.regular),
        "overtime": float(analysis.overtime),
        "tier1_hours": float(analysis.tier1_hours),
        "tier2_hours": float(analysis.tier2_hours),
        "amount": float(analysis.amount),
        "profit": float(analysis.profit),
        "tags": list(analysis.tags),
        "amounts": {
            "earned": _breakdown(analysis.amounts.earned),
            "cost": _breakdown(analysis.amounts.cost),
            "profit": _breakdown(analysis.amounts.profit),
        },
    }


def _day(date_key: str, day: DayData) -> dict:
    meta = asdict(day.meta)
    meta["capacity"] = float(day.meta.capacity)
    return {
        "date": date_key,
        "meta": meta,
        "regular": float(day.regular_hours),
        "overtime": float(day.overtime_hours),
        "entries": [_entry(e) for e in day.entries],
    }


def generate_audit_dict(
    results: list[UserAnalysis],
    date_range: Optional[DateRange] = None,
) -> dict:
    """Build audit dictionary from computed analysis (no file I/O)."""
    users = [
        {
            "user_id": user.user_id,
            "user_name": user.user_name,
            "totals": _totals(user.totals),
            "days": [_day(date_key, day) for date_key, day in user.days.items()],
        }
        for user in results
    ]

    def total_of(attr: str) -> float:
        return float(sum((getattr(u.totals, attr) for u in results), Decimal("0")))

    return {
        "date_range": {
            "start": date_range.start if date_range else None,
            "end": date_range.end if date_range else None,
        },
        "users": users,
        "summary": {
            "total_users": len(results),
            "total_hours": total_of("total"),
            "regular_hours": total_of("regular"),
            "overtime_hours": total_of("overtime"),
            "expected_capacity": total_of("expected_capacity"),
            "amount": total_of("amount"),
            "amount_earned": total_of("amount_earned"),
            "amount_cost": total_of("amount_cost"),
            "amount_profit": total_of("amount_profit"),
            "ot_premium": total_of("ot_premium"),
            "ot_premium_tier2": total_of("ot_premium_tier2"),
        },
    }


def generate_audit(
    results: list[UserAnalysis],
    output_path: str | Path,
    date_range: Optional[DateRange] = None,
) -> Path:
    """Generate audit JSON file from computed analysis."""
    output_path = Path(output_path)
    audit = generate_audit_dict(results, date_range)
    output_path.write_text(json.dumps(audit, indent=2, cls=DecimalEncoder), encoding='utf-8')
    return output_path
