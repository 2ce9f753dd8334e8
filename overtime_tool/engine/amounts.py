"""Amount Calculator.

All monetary calculations done in Python with Decimal precision. Rates come
in as cents per hour; every currency output is rounded to 2 places.

Premiums are paid on top of the straight-rate overtime amount:
  tier 1 premium = tier1 hours x rate x (multiplier - 1)
  tier 2 premium = tier2 hours x rate x (tier2 multiplier - 1)
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from overtime_tool.models import (
    ZERO,
    AmountBreakdown,
    EntryAmounts,
    EntryRates,
    TimeEntry,
)
from overtime_tool.numeric import round_money

CENTS = Decimal("100")


def sum_amounts(entry: TimeEntry, amount_type: str) -> Decimal:
    target = amount_type.upper()
    return sum((a.value for a in entry.amounts if a.type.upper() == target), ZERO)


def rate_from_amounts(entry: TimeEntry, amount_type: str, duration: Decimal) -> Decimal:
    """Derive a cents-per-hour rate from the entry's amount totals."""
    if not duration:
        return ZERO
    total = sum_amounts(entry, amount_type)
    if not total:
        return ZERO
    return round_money(total / duration * CENTS)


def _first_rate(*candidates: Optional[Decimal]) -> Decimal:
    for value in candidates:
        if value:
            return value
    return ZERO


def extract_rates(entry: TimeEntry, duration: Decimal) -> EntryRates:
    """Earned, cost and profit rates for an entry, in cents per hour.

    Non-billable entries earn nothing; their cost is still tracked, so their
    profit rate goes negative.
    """
    if entry.billable:
        earned = _first_rate(entry.earned_rate, entry.hourly_rate)
        if not earned:
            earned = rate_from_amounts(entry, "EARNED", duration)
    else:
        earned = ZERO

    cost = _first_rate(entry.cost_rate)
    if not cost:
        cost = rate_from_amounts(entry, "COST", duration)

    return EntryRates(earned=earned, cost=cost, profit=earned - cost)


def price_basis(
    rate_cents: Decimal,
    regular_hours: Decimal,
    overtime_hours: Decimal,
    tier1_hours: Decimal,
    tier2_hours: Decimal,
    multiplier: Decimal,
    tier2_multiplier: Decimal,
) -> AmountBreakdown:
    rate = rate_cents / CENTS
    regular_amount = round_money(regular_hours * rate)
    overtime_amount_base = round_money(overtime_hours * rate)
    tier1_premium = round_money(tier1_hours * rate * (multiplier - 1))
    tier2_premium = round_money(tier2_hours * rate * (tier2_multiplier - 1))
    return AmountBreakdown(
        rate=rate,
        regular_amount=regular_amount,
        overtime_amount_base=overtime_amount_base,
        base_amount=regular_amount + overtime_amount_base,
        tier1_premium=tier1_premium,
        tier2_premium=tier2_premium,
        total_amount_with_ot=round_money(
            regular_amount + overtime_amount_base + tier1_premium + tier2_premium
        ),
        total_amount_no_ot=regular_amount,
        overtime_rate=round_money(rate * multiplier),
    )


def price(
    regular_hours: Decimal,
    overtime_hours: Decimal,
    tier1_hours: Decimal,
    tier2_hours: Decimal,
    rates: EntryRates,
    multiplier: Decimal,
    tier2_multiplier: Decimal,
) -> EntryAmounts:
    """Price one entry's hour split on all three bases."""
    def basis(rate_cents: Decimal) -> AmountBreakdown:
        return price_basis(
            rate_cents, regular_hours, overtime_hours, tier1_hours, tier2_hours,
            multiplier, tier2_multiplier,
        )

    return EntryAmounts(
        earned=basis(rates.earned),
        cost=basis(rates.cost),
        profit=basis(rates.profit),
    )
