"""Tests for audit JSON output."""

import json
from decimal import Decimal

from overtime_tool.audit import DecimalEncoder, generate_audit, generate_audit_dict
from overtime_tool.engine.calculator import calculate_analysis
from overtime_tool.models import AmountDisplay, CalcSnapshot, DateRange, Holiday, TimeEntry, User

RANGE = DateRange(start="2024-01-15", end="2024-01-16")


def _make_results():
    snapshot = CalcSnapshot(
        users=(User(id="u1", name="Alice"),),
        holidays={"u1": {"2024-01-16": Holiday(name="Founders Day")}},
    )
    entries = [
        TimeEntry(id="e1", user_id="u1", start="2024-01-15T09:00:00Z", duration="PT9H",
                  earned_rate=Decimal("5000"), cost_rate=Decimal("3000")),
    ]
    return calculate_analysis(entries, snapshot, RANGE)


class TestAuditDict:
    def test_structure(self):
        audit = generate_audit_dict(_make_results(), RANGE)
        assert audit["date_range"] == {"start": "2024-01-15", "end": "2024-01-16"}
        assert audit["summary"]["total_users"] == 1
        user = audit["users"][0]
        assert user["user_name"] == "Alice"
        assert [d["date"] for d in user["days"]] == ["2024-01-15", "2024-01-16"]

    def test_entry_carries_all_bases(self):
        audit = generate_audit_dict(_make_results(), RANGE)
        entry = audit["users"][0]["days"][0]["entries"][0]
        assert entry["regular"] == 8.0
        assert entry["overtime"] == 1.0
        assert entry["class"] == "work"
        assert entry["amounts"]["earned"]["total_amount_with_ot"] == 475.0
        assert entry["amounts"]["cost"]["total_amount_with_ot"] == 285.0
        assert entry["amounts"]["profit"]["total_amount_with_ot"] == 190.0

    def test_day_meta(self):
        audit = generate_audit_dict(_make_results(), RANGE)
        meta = audit["users"][0]["days"][1]["meta"]
        assert meta["is_holiday"] is True
        assert meta["holiday_name"] == "Founders Day"
        assert meta["capacity"] == 0.0

    def test_summary_sums(self):
        audit = generate_audit_dict(_make_results(), RANGE)
        summary = audit["summary"]
        assert summary["total_hours"] == 9.0
        assert summary["overtime_hours"] == 1.0
        assert summary["expected_capacity"] == 8.0
        assert summary["amount_profit"] == 190.0

    def test_without_range(self):
        audit = generate_audit_dict([], None)
        assert audit["date_range"] == {"start": None, "end": None}
        assert audit["summary"]["total_hours"] == 0.0


class TestAuditFile:
    def test_written_json_is_loadable(self, tmp_path):
        out = generate_audit(_make_results(), tmp_path / "audit.json", RANGE)
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["users"][0]["totals"]["overtime"] == 1.0
        assert data["users"][0]["totals"]["holiday_count"] == 1

    def test_encoder_handles_decimal_and_enum(self):
        text = json.dumps({"a": Decimal("1.50"), "b": AmountDisplay.COST}, cls=DecimalEncoder)
        assert json.loads(text) == {"a": 1.5, "b": "cost"}
