"""Entry Classifier & Allocator.

Business Rules:
- BREAK entries and PTO entries (HOLIDAY / TIME_OFF and their *_TIME_ENTRY
  variants) are always regular hours and never consume the day's capacity.
- Work entries are taken in start-time order. Once the day's capacity is
  used up every further hour is overtime ("last in is overtime first").
- Overtime is further split into tier 1 / tier 2 against a cumulative
  per-user overtime counter that carries across days.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from overtime_tool.dates import hours_between, parse_iso_duration
from overtime_tool.models import (
    HOLIDAY_TYPES,
    TIME_OFF_TYPES,
    ZERO,
    EntryClass,
    TimeEntry,
)


@dataclass(frozen=True)
class Allocation:
    entry: TimeEntry
    entry_class: EntryClass
    duration: Decimal
    regular: Decimal
    overtime: Decimal
    tier1: Decimal
    tier2: Decimal


def classify_entry(entry: TimeEntry) -> EntryClass:
    if entry.type == "BREAK":
        return EntryClass.BREAK
    if entry.type in HOLIDAY_TYPES or entry.type in TIME_OFF_TYPES:
        return EntryClass.PTO
    return EntryClass.WORK


def entry_duration_hours(entry: TimeEntry) -> Decimal:
    """ISO duration first; falls back to end - start when that yields nothing."""
    duration = parse_iso_duration(entry.duration)
    if duration == 0 and entry.start and entry.end:
        duration = hours_between(entry.start, entry.end)
    return duration


def split_tail(accumulated: Decimal, duration: Decimal, capacity: Decimal) -> tuple[Decimal, Decimal]:
    """Split one work entry into (regular, overtime) given hours already worked."""
    if accumulated >= capacity:
        return ZERO, duration
    if accumulated + duration <= capacity:
        return duration, ZERO
    regular = capacity - accumulated
    return regular, duration - regular


def split_tiers(
    overtime: Decimal,
    overtime_before: Decimal,
    threshold: Decimal,
) -> tuple[Decimal, Decimal]:
    """Split overtime into (tier1, tier2) against the cumulative threshold."""
    if overtime <= 0 or threshold <= 0:
        return overtime, ZERO
    overtime_after = overtime_before + overtime
    if overtime_before >= threshold:
        return ZERO, overtime
    if overtime_after <= threshold:
        return overtime, ZERO
    tier1 = threshold - overtime_before
    return tier1, overtime - tier1


def sort_day_entries(entries: Sequence[TimeEntry]) -> list[TimeEntry]:
    return sorted(entries, key=lambda e: e.start or "")


def allocate_day(
    entries: Sequence[TimeEntry],
    capacity: Decimal,
    overtime_before: Decimal,
    tier2_threshold: Decimal,
    tiered: bool = True,
) -> tuple[list[Allocation], Decimal]:
    """Allocate one day's entries.

    ``overtime_before`` is the user's cumulative overtime from earlier days.
    Returns the allocations in start-time order and the updated cumulative
    overtime, which the caller passes into the next day.
    """
    allocations: list[Allocation] = []
    daily_accumulator = ZERO
    overtime_accumulator = overtime_before
    threshold = tier2_threshold if tiered else ZERO

    for entry in sort_day_entries(entries):
        duration = entry_duration_hours(entry)
        entry_class = classify_entry(entry)

        if entry_class == EntryClass.WORK:
            regular, overtime = split_tail(daily_accumulator, duration, capacity)
            daily_accumulator += duration
        else:
            regular, overtime = duration, ZERO

        tier1, tier2 = split_tiers(overtime, overtime_accumulator, threshold)
        overtime_accumulator += overtime

        allocations.append(Allocation(
            entry=entry,
            entry_class=entry_class,
            duration=duration,
            regular=regular,
            overtime=overtime,
            tier1=tier1,
            tier2=tier2,
        ))

    return allocations, overtime_accumulator
