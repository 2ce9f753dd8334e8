"""Strict Validation Engine.

Validates configuration and date range before the analysis runs. The engine
itself never raises on domain data; these checks are for the CLI and API.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from overtime_tool.dates import parse_date_key
from overtime_tool.models import (
    AmountDisplay,
    CalcSnapshot,
    DateRange,
    StrictValidationError,
)


def _check_number(errors: list[str], label: str, value: Optional[Decimal], minimum: Decimal) -> None:
    if value is None or not value.is_finite():
        errors.append(f"{label} must be a finite number, got {value!r}")
    elif value < minimum:
        errors.append(f"{label} must be >= {minimum}, got {value}")


def validate_snapshot(snapshot: CalcSnapshot) -> CalcSnapshot:
    """Validate calculation defaults and user data in the snapshot.

    Collects every problem, then raises once.
    """
    errors: list[str] = []
    params = snapshot.params

    _check_number(errors, "dailyThreshold", params.daily_threshold, Decimal("0"))
    _check_number(errors, "overtimeMultiplier", params.overtime_multiplier, Decimal("1"))
    _check_number(errors, "tier2ThresholdHours", params.tier2_threshold_hours, Decimal("0"))
    _check_number(errors, "tier2Multiplier", params.tier2_multiplier, Decimal("1"))

    if not isinstance(snapshot.config.amount_display, AmountDisplay):
        errors.append(f"amountDisplay must be one of earned/cost/profit, got {snapshot.config.amount_display!r}")

    seen: set[str] = set()
    for user in snapshot.users:
        if not user.id:
            errors.append(f"User {user.name!r} has no id")
        elif user.id in seen:
            errors.append(f"Duplicate user id {user.id}")
        seen.add(user.id)

    for user_id, by_date in snapshot.time_off.items():
        for date_key, info in by_date.items():
            if info.hours < 0:
                errors.append(f"{user_id} on {date_key}: negative time-off hours={info.hours}")

    for user_id, profile in snapshot.profiles.items():
        if profile.work_capacity_hours is not None and profile.work_capacity_hours < 0:
            errors.append(f"{user_id}: negative profile capacity={profile.work_capacity_hours}")

    if errors:
        raise StrictValidationError(errors)

    return snapshot


def validate_date_range(date_range: Optional[DateRange]) -> DateRange:
    errors: list[str] = []

    if date_range is None:
        raise StrictValidationError(["Date range is required"])

    start = parse_date_key(date_range.start)
    end = parse_date_key(date_range.end)
    if start is None:
        errors.append(f"Start date {date_range.start!r} is not a valid YYYY-MM-DD date")
    if end is None:
        errors.append(f"End date {date_range.end!r} is not a valid YYYY-MM-DD date")
    if start is not None and end is not None and start > end:
        errors.append(f"Start date {date_range.start} is after end date {date_range.end}")

    if errors:
        raise StrictValidationError(errors)

    return date_range
