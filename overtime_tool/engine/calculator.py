"""Overtime Analysis Engine.

Pure transformation (entries, snapshot, date range) -> per-user analysis.
No I/O, no shared state: running the same input twice gives the same output.
"""

from __future__ import annotations

import logging
import unicodedata
from collections import defaultdict
from dataclasses import fields
from decimal import Decimal
from typing import Iterable, Optional

from overtime_tool.dates import date_range_keys, extract_date_key
from overtime_tool.engine.allocator import Allocation, allocate_day
from overtime_tool.engine.amounts import extract_rates, price
from overtime_tool.engine.day_context import DayContext, build_day_context
from overtime_tool.engine.resolver import (
    resolve_multiplier,
    resolve_tier2_multiplier,
    resolve_tier2_threshold,
)
from overtime_tool.models import (
    ZERO,
    AnalyzedEntry,
    CalcSnapshot,
    DateRange,
    DayData,
    EntryAmounts,
    EntryAnalysis,
    EntryClass,
    TimeEntry,
    UserAnalysis,
    UserTotals,
)
from overtime_tool.numeric import round_hours, round_money

logger = logging.getLogger(__name__)

UNKNOWN_USER_ID = "unknown"
UNKNOWN_USER_NAME = "Unknown"

HOUR_TOTALS = (
    "regular", "overtime", "total", "breaks", "vacation_entry_hours",
    "billable_worked", "non_billable_worked", "billable_ot", "non_billable_ot",
    "expected_capacity", "holiday_hours", "time_off_hours",
)


def _sort_key(analysis: UserAnalysis) -> tuple[str, str, str]:
    folded = unicodedata.normalize("NFKD", analysis.user_name)
    folded = "".join(c for c in folded if not unicodedata.combining(c)).casefold()
    return folded, analysis.user_name, analysis.user_id


def _entry_tags(context: DayContext, entry_class: EntryClass) -> tuple[str, ...]:
    tags = []
    if context.is_holiday:
        tags.append("HOLIDAY")
    if context.is_non_working:
        tags.append("OFF-DAY")
    if context.is_time_off:
        tags.append("TIME-OFF")
    if entry_class == EntryClass.BREAK:
        tags.append("BREAK")
    return tuple(tags)


def _accumulate_entry(totals: UserTotals, alloc: Allocation, analysis: EntryAnalysis) -> None:
    totals.total += alloc.duration
    totals.regular += alloc.regular
    totals.overtime += alloc.overtime

    if alloc.entry_class == EntryClass.BREAK:
        totals.breaks += alloc.duration
    elif alloc.entry_class == EntryClass.PTO:
        totals.vacation_entry_hours += alloc.duration
    elif analysis.is_billable:
        totals.billable_worked += alloc.regular
        totals.billable_ot += alloc.overtime
    else:
        totals.non_billable_worked += alloc.regular
        totals.non_billable_ot += alloc.overtime

    amounts = analysis.amounts
    primary = analysis.primary
    totals.amount += primary.total_amount_with_ot
    totals.amount_base += primary.base_amount
    totals.ot_premium += primary.tier1_premium
    totals.ot_premium_tier2 += primary.tier2_premium

    totals.amount_earned += amounts.earned.total_amount_with_ot
    totals.amount_cost += amounts.cost.total_amount_with_ot
    totals.amount_profit += amounts.profit.total_amount_with_ot
    totals.amount_earned_base += amounts.earned.base_amount
    totals.amount_cost_base += amounts.cost.base_amount
    totals.amount_profit_base += amounts.profit.base_amount
    totals.ot_premium_earned += amounts.earned.tier1_premium
    totals.ot_premium_cost += amounts.cost.tier1_premium
    totals.ot_premium_profit += amounts.profit.tier1_premium
    totals.ot_premium_tier2_earned += amounts.earned.tier2_premium
    totals.ot_premium_tier2_cost += amounts.cost.tier2_premium
    totals.ot_premium_tier2_profit += amounts.profit.tier2_premium


def _accumulate_day(totals: UserTotals, context: DayContext) -> None:
    totals.expected_capacity += context.effective_capacity
    if context.is_holiday:
        totals.holiday_count += 1
        totals.holiday_hours += context.holiday_hours
    if context.is_time_off:
        totals.time_off_count += 1
        totals.time_off_hours += context.time_off_hours


def finalize_totals(totals: UserTotals) -> None:
    """Round every accumulator once, after all days are summed."""
    for f in fields(totals):
        value = getattr(totals, f.name)
        if not isinstance(value, Decimal):
            continue
        if f.name in HOUR_TOTALS:
            setattr(totals, f.name, round_hours(value))
        else:
            setattr(totals, f.name, round_money(value))
    totals.profit = totals.amount_profit


def analyze_entry(
    alloc: Allocation,
    context: DayContext,
    multiplier: Decimal,
    tier2_multiplier: Decimal,
    snapshot: CalcSnapshot,
) -> EntryAnalysis:
    rates = extract_rates(alloc.entry, alloc.duration)
    amounts: EntryAmounts = price(
        alloc.regular, alloc.overtime, alloc.tier1, alloc.tier2,
        rates, multiplier, tier2_multiplier,
    )
    primary = amounts.for_display(snapshot.config.amount_display)
    return EntryAnalysis(
        regular=round_hours(alloc.regular),
        overtime=round_hours(alloc.overtime),
        tier1_hours=round_hours(alloc.tier1),
        tier2_hours=round_hours(alloc.tier2),
        entry_class=alloc.entry_class,
        is_billable=alloc.entry.billable,
        amount=primary.total_amount_with_ot,
        profit=amounts.profit.total_amount_with_ot,
        primary=primary,
        amounts=amounts,
        tags=_entry_tags(context, alloc.entry_class),
    )


def analyze_user(
    analysis: UserAnalysis,
    entries_by_date: dict[str, list[TimeEntry]],
    date_keys: list[str],
    snapshot: CalcSnapshot,
) -> UserAnalysis:
    """Fold every day of the range for one user, in chronological order."""
    user_id = analysis.user_id
    totals = analysis.totals
    overtime_so_far = ZERO

    for date_key in date_keys:
        day_entries = entries_by_date.get(date_key, [])
        context = build_day_context(user_id, date_key, day_entries, snapshot)
        multiplier = resolve_multiplier(user_id, date_key, snapshot)
        tier2_threshold = resolve_tier2_threshold(user_id, date_key, snapshot)
        tier2_multiplier = resolve_tier2_multiplier(user_id, date_key, snapshot)

        allocations, overtime_so_far = allocate_day(
            day_entries,
            context.effective_capacity,
            overtime_so_far,
            tier2_threshold,
            tiered=snapshot.config.enable_tiered_ot,
        )

        day = DayData(meta=context.to_meta())
        for alloc in allocations:
            entry_analysis = analyze_entry(alloc, context, multiplier, tier2_multiplier, snapshot)
            day.entries.append(AnalyzedEntry(entry=alloc.entry, analysis=entry_analysis))
            _accumulate_entry(totals, alloc, entry_analysis)

        analysis.days[date_key] = day
        _accumulate_day(totals, context)

    finalize_totals(totals)
    return analysis


def group_entries(
    entries: Iterable[Optional[TimeEntry]],
) -> dict[str, dict[str, list[TimeEntry]]]:
    """user id -> date key -> entries. Entries without a usable date are dropped."""
    grouped: dict[str, dict[str, list[TimeEntry]]] = defaultdict(lambda: defaultdict(list))
    skipped = 0
    for entry in entries:
        if entry is None:
            skipped += 1
            continue
        date_key = extract_date_key(entry.start)
        if date_key is None:
            skipped += 1
            continue
        grouped[entry.user_id or UNKNOWN_USER_ID][date_key].append(entry)
    if skipped:
        logger.debug("Skipped %d entries without a usable date", skipped)
    return grouped


def calculate_analysis(
    entries: Optional[Iterable[Optional[TimeEntry]]],
    snapshot: CalcSnapshot,
    date_range: Optional[DateRange],
) -> list[UserAnalysis]:
    """Build the per-user, per-day overtime analysis.

    Every known user gets a row for every date in range, with or without
    entries. Users that only appear on entries get a synthetic record.
    """
    date_keys = date_range_keys(date_range)
    if date_keys is None:
        logger.debug("No usable date range; returning an empty analysis")
        return []

    grouped = group_entries(entries or [])

    analyses: dict[str, UserAnalysis] = {}
    for user in snapshot.users:
        if user is None:
            continue
        analyses[user.id] = UserAnalysis(user_id=user.id, user_name=user.name)

    for user_id, by_date in grouped.items():
        if user_id in analyses:
            continue
        first = next(e for day in by_date.values() for e in day)
        user_name = first.user_name or UNKNOWN_USER_NAME
        logger.debug("Entry user %s not in user list; adding as %r", user_id, user_name)
        analyses[user_id] = UserAnalysis(user_id=user_id, user_name=user_name)

    for user_id, analysis in analyses.items():
        analyze_user(analysis, grouped.get(user_id, {}), date_keys, snapshot)

    results = sorted(analyses.values(), key=_sort_key)
    logger.info(
        "Analysed %d users over %d days (%d entries)",
        len(results),
        len(date_keys),
        sum(len(day) for by_date in grouped.values() for day in by_date.values()),
    )
    return results
