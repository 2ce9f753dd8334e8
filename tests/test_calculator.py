"""Tests for the overtime analysis engine."""

from decimal import Decimal

import pytest

from overtime_tool.engine.calculator import calculate_analysis
from overtime_tool.models import (
    AmountDisplay,
    CalcSnapshot,
    CalculationParams,
    DateRange,
    EntryClass,
    GlobalOverride,
    Holiday,
    OvertimeConfig,
    OverrideValues,
    TimeEntry,
    TimeOffInfo,
    User,
    UserProfile,
)

WEEK = DateRange(start="2024-01-15", end="2024-01-19")  # Monday to Friday
MONDAY = DateRange(start="2024-01-15", end="2024-01-15")


def _make_snapshot(users=("u1",), **kwargs) -> CalcSnapshot:
    return CalcSnapshot(
        users=tuple(User(id=u, name=f"User {u}") for u in users),
        **kwargs,
    )


def _make_entry(start: str, duration: str, user_id: str = "u1", **kwargs) -> TimeEntry:
    defaults = dict(
        id=f"{user_id}-{start}",
        user_id=user_id,
        start=start,
        duration=duration,
        earned_rate=Decimal("5000"),
        cost_rate=Decimal("3000"),
    )
    defaults.update(kwargs)
    return TimeEntry(**defaults)


class TestShape:
    def test_no_range_returns_empty(self):
        assert calculate_analysis([], _make_snapshot(), None) == []

    def test_malformed_range_returns_empty(self):
        assert calculate_analysis([], _make_snapshot(), DateRange(start="2024-13-01", end="2024-01-02")) == []

    def test_reversed_range_has_no_days(self):
        results = calculate_analysis([], _make_snapshot(), DateRange(start="2024-01-19", end="2024-01-15"))
        assert len(results) == 1
        assert results[0].days == {}

    def test_user_without_entries_gets_capacity(self):
        results = calculate_analysis(None, _make_snapshot(), WEEK)
        assert len(results) == 1
        user = results[0]
        assert list(user.days) == [
            "2024-01-15", "2024-01-16", "2024-01-17", "2024-01-18", "2024-01-19",
        ]
        assert user.totals.expected_capacity == Decimal("40")
        assert user.totals.total == Decimal("0")

    def test_unknown_user_gets_synthetic_record(self):
        entries = [_make_entry("2024-01-15T09:00:00Z", "PT2H", user_id="ghost", user_name="Ghost")]
        results = calculate_analysis(entries, _make_snapshot(), MONDAY)
        names = [r.user_name for r in results]
        assert "Ghost" in names

    def test_missing_user_id_and_name(self):
        entries = [_make_entry("2024-01-15T09:00:00Z", "PT2H", user_id=None)]
        results = calculate_analysis(entries, _make_snapshot(users=()), MONDAY)
        assert (results[0].user_id, results[0].user_name) == ("unknown", "Unknown")

    def test_entries_outside_range_ignored(self):
        entries = [_make_entry("2024-02-01T09:00:00Z", "PT2H")]
        results = calculate_analysis(entries, _make_snapshot(), MONDAY)
        assert results[0].totals.total == Decimal("0")

    def test_entries_without_date_skipped(self):
        entries = [None, _make_entry("", "PT2H"), _make_entry("not a date", "PT2H")]
        results = calculate_analysis(entries, _make_snapshot(), MONDAY)
        assert results[0].totals.total == Decimal("0")

    def test_sorted_by_name_ignoring_case_and_accents(self):
        snap = CalcSnapshot(users=(
            User(id="3", name="zoe"),
            User(id="1", name="Émile"),
            User(id="2", name="adam"),
        ))
        results = calculate_analysis([], snap, MONDAY)
        assert [r.user_name for r in results] == ["adam", "Émile", "zoe"]

    def test_idempotent(self):
        entries = [
            _make_entry("2024-01-15T09:00:00Z", "PT5H"),
            _make_entry("2024-01-15T14:00:00Z", "PT4H"),
        ]
        snap = _make_snapshot()
        assert calculate_analysis(entries, snap, WEEK) == calculate_analysis(entries, snap, WEEK)


class TestHours:
    def test_tail_attribution(self):
        entries = [
            _make_entry("2024-01-15T14:00:00Z", "PT4H"),
            _make_entry("2024-01-15T09:00:00Z", "PT5H"),
        ]
        user = calculate_analysis(entries, _make_snapshot(), MONDAY)[0]
        day = user.days["2024-01-15"]
        splits = [(e.analysis.regular, e.analysis.overtime) for e in day.entries]
        assert splits == [(Decimal("5"), Decimal("0")), (Decimal("3"), Decimal("1"))]
        assert user.totals.regular == Decimal("8")
        assert user.totals.overtime == Decimal("1")

    def test_break_and_pto_excluded_from_capacity(self):
        entries = [
            _make_entry("2024-01-15T08:00:00Z", "PT1H", type="BREAK"),
            _make_entry("2024-01-15T09:00:00Z", "PT8H"),
            _make_entry("2024-01-15T17:00:00Z", "PT2H", type="HOLIDAY_TIME_ENTRY"),
        ]
        user = calculate_analysis(entries, _make_snapshot(), MONDAY)[0]
        t = user.totals
        assert t.overtime == Decimal("0")
        assert t.breaks == Decimal("1")
        assert t.vacation_entry_hours == Decimal("2")
        assert t.regular == Decimal("11")
        day = user.days["2024-01-15"]
        assert day.entries[0].analysis.is_break
        assert day.entries[0].analysis.entry_class == EntryClass.BREAK
        assert "BREAK" in day.entries[0].analysis.tags

    def test_billable_split_uses_work_entries_only(self):
        entries = [
            _make_entry("2024-01-15T08:00:00Z", "PT1H", type="BREAK"),
            _make_entry("2024-01-15T09:00:00Z", "PT6H"),
            _make_entry("2024-01-15T15:00:00Z", "PT4H", billable=False),
        ]
        t = calculate_analysis(entries, _make_snapshot(), MONDAY)[0].totals
        assert t.billable_worked == Decimal("6")
        assert t.billable_ot == Decimal("0")
        assert t.non_billable_worked == Decimal("2")
        assert t.non_billable_ot == Decimal("2")

    def test_conservation(self):
        entries = [
            _make_entry("2024-01-15T08:00:00Z", "PT3H20M"),
            _make_entry("2024-01-15T12:00:00Z", "PT5H10M"),
            _make_entry("2024-01-16T08:00:00Z", "PT9H"),
        ]
        user = calculate_analysis(entries, _make_snapshot(), WEEK)[0]
        for day in user.days.values():
            for item in day.entries:
                a = item.analysis
                assert a.total == a.regular + a.overtime
        assert user.totals.regular + user.totals.overtime == user.totals.total

    def test_tier_straddle_across_days(self):
        snap = _make_snapshot(params=CalculationParams(tier2_threshold_hours=Decimal("2")))
        entries = [
            _make_entry("2024-01-15T09:00:00Z", "PT9H30M"),
            _make_entry("2024-01-16T09:00:00Z", "PT9H"),
        ]
        user = calculate_analysis(entries, snap, WEEK)[0]
        day1 = user.days["2024-01-15"].entries[0].analysis
        day2 = user.days["2024-01-16"].entries[0].analysis
        assert (day1.tier1_hours, day1.tier2_hours) == (Decimal("1.5"), Decimal("0"))
        assert (day2.tier1_hours, day2.tier2_hours) == (Decimal("0.5"), Decimal("0.5"))

    def test_tiered_ot_disabled(self):
        snap = _make_snapshot(
            params=CalculationParams(tier2_threshold_hours=Decimal("1")),
            config=OvertimeConfig(enable_tiered_ot=False),
        )
        entries = [_make_entry("2024-01-15T09:00:00Z", "PT12H")]
        a = calculate_analysis(entries, snap, MONDAY)[0].days["2024-01-15"].entries[0].analysis
        assert (a.tier1_hours, a.tier2_hours) == (Decimal("4"), Decimal("0"))


class TestDays:
    def test_holiday_and_time_off_same_day(self):
        snap = _make_snapshot(
            holidays={"u1": {"2024-01-15": Holiday(name="Founders Day")}},
            time_off={"u1": {"2024-01-15": TimeOffInfo(is_full_day=False, hours=Decimal("3"))}},
        )
        user = calculate_analysis([], snap, MONDAY)[0]
        meta = user.days["2024-01-15"].meta
        assert meta.capacity == Decimal("0")
        assert meta.is_holiday and meta.is_time_off
        assert user.totals.holiday_hours == Decimal("8")
        assert user.totals.time_off_hours == Decimal("3")
        assert user.totals.holiday_count == 1
        assert user.totals.time_off_count == 1

    def test_work_on_holiday_is_overtime(self):
        snap = _make_snapshot(holidays={"u1": {"2024-01-15": Holiday(name="H")}})
        entries = [_make_entry("2024-01-15T09:00:00Z", "PT3H")]
        user = calculate_analysis(entries, snap, MONDAY)[0]
        a = user.days["2024-01-15"].entries[0].analysis
        assert a.overtime == Decimal("3")
        assert "HOLIDAY" in a.tags

    def test_non_working_days_reduce_expected_capacity(self):
        snap = _make_snapshot(profiles={"u1": UserProfile(
            work_capacity_hours=Decimal("7"),
            working_days=frozenset({"MONDAY", "TUESDAY", "WEDNESDAY"}),
        )})
        user = calculate_analysis([], snap, WEEK)[0]
        assert user.totals.expected_capacity == Decimal("21")
        assert user.days["2024-01-19"].meta.is_non_working


class TestAmounts:
    def test_rounding_stability(self):
        entries = [_make_entry("2024-01-15T09:00:00Z", "PT7H30M", earned_rate=Decimal("3333"), cost_rate=None)]
        for _ in range(3):
            user = calculate_analysis(entries, _make_snapshot(), MONDAY)[0]
            assert user.totals.amount == Decimal("249.98")

    def test_overtime_amounts(self):
        entries = [_make_entry("2024-01-15T09:00:00Z", "PT10H")]
        t = calculate_analysis(entries, _make_snapshot(), MONDAY)[0].totals
        assert t.amount_earned == Decimal("550.00")
        assert t.amount_cost == Decimal("330.00")
        assert t.amount_profit == Decimal("220.00")
        assert t.ot_premium == Decimal("50.00")
        assert t.amount_base == Decimal("500.00")
        assert t.profit == t.amount_profit

    @pytest.mark.parametrize("display,expected", [
        (AmountDisplay.EARNED, Decimal("400.00")),
        (AmountDisplay.COST, Decimal("240.00")),
        (AmountDisplay.PROFIT, Decimal("160.00")),
    ])
    def test_amount_display(self, display, expected):
        snap = _make_snapshot(config=OvertimeConfig(amount_display=display))
        entries = [_make_entry("2024-01-15T09:00:00Z", "PT8H")]
        assert calculate_analysis(entries, snap, MONDAY)[0].totals.amount == expected

    def test_non_billable_has_negative_profit(self):
        entries = [_make_entry("2024-01-15T09:00:00Z", "PT8H", billable=False)]
        t = calculate_analysis(entries, _make_snapshot(), MONDAY)[0].totals
        assert t.amount_earned == Decimal("0")
        assert t.amount_profit == Decimal("-240.00")

    def test_oversized_rate_yields_zero_amount(self):
        entries = [_make_entry("2024-01-15T09:00:00Z", "PT8H", earned_rate=Decimal("1e30"))]
        user = calculate_analysis(entries, _make_snapshot(), MONDAY)[0]
        assert user.totals.regular == Decimal("8")
        assert user.totals.amount_earned == Decimal("0.00")

    def test_oversized_capacity_override(self):
        snap = _make_snapshot(overrides={"u1": GlobalOverride(values=OverrideValues(capacity="1e30"))})
        entries = [_make_entry("2024-01-15T09:00:00Z", "PT8H")]
        user = calculate_analysis(entries, snap, MONDAY)[0]
        assert user.totals.regular == Decimal("8")
        assert user.totals.overtime == Decimal("0")
        assert user.totals.expected_capacity == Decimal("0")
