"""Configuration Resolver.

Resolves the effective value of a tunable parameter for one user on one day.
Precedence, first usable value wins:

  1. Per-day override for the date (PerDayOverride only)
  2. Weekly override for the date's weekday (WeeklyOverride only)
  3. The user's mode-independent override
  4. Profile capacity (capacity only, when use_profile_capacity is on)
  5. Calculation default

A stored value that does not parse counts as absent and the chain continues.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Optional

from overtime_tool.dates import weekday_key
from overtime_tool.models import (
    CalcSnapshot,
    OverrideValues,
    PerDayOverride,
    WeeklyOverride,
)
from overtime_tool.numeric import parse_float


class Parameter(Enum):
    CAPACITY = "capacity"
    MULTIPLIER = "multiplier"
    TIER2_THRESHOLD = "tier2_threshold"
    TIER2_MULTIPLIER = "tier2_multiplier"


def _value(values: Optional[OverrideValues], parameter: Parameter) -> Optional[Decimal]:
    if values is None:
        return None
    return parse_float(getattr(values, parameter.value))


def _default(parameter: Parameter, user_id: str, snapshot: CalcSnapshot) -> Decimal:
    params = snapshot.params
    if parameter == Parameter.CAPACITY:
        if snapshot.config.use_profile_capacity:
            profile = snapshot.profiles.get(user_id)
            if profile is not None and profile.work_capacity_hours is not None:
                return profile.work_capacity_hours
        return params.daily_threshold
    if parameter == Parameter.MULTIPLIER:
        return params.overtime_multiplier
    if parameter == Parameter.TIER2_THRESHOLD:
        return params.tier2_threshold_hours or Decimal("0")
    return params.tier2_multiplier or Decimal("2.0")


def resolve(
    parameter: Parameter,
    user_id: str,
    date_key: str,
    snapshot: CalcSnapshot,
) -> Decimal:
    """Walk the override chain for ``parameter`` and return the winning value."""
    override = snapshot.overrides.get(user_id)

    if override is not None:
        if isinstance(override, PerDayOverride):
            found = _value(override.per_day.get(date_key), parameter)
            if found is not None:
                return found
        elif isinstance(override, WeeklyOverride):
            found = _value(override.weekly.get(weekday_key(date_key)), parameter)
            if found is not None:
                return found

        found = _value(override.values, parameter)
        if found is not None:
            return found

    return _default(parameter, user_id, snapshot)


def resolve_capacity(user_id: str, date_key: str, snapshot: CalcSnapshot) -> Decimal:
    return resolve(Parameter.CAPACITY, user_id, date_key, snapshot)


def resolve_multiplier(user_id: str, date_key: str, snapshot: CalcSnapshot) -> Decimal:
    return resolve(Parameter.MULTIPLIER, user_id, date_key, snapshot)


def resolve_tier2_threshold(user_id: str, date_key: str, snapshot: CalcSnapshot) -> Decimal:
    return resolve(Parameter.TIER2_THRESHOLD, user_id, date_key, snapshot)


def resolve_tier2_multiplier(user_id: str, date_key: str, snapshot: CalcSnapshot) -> Decimal:
    return resolve(Parameter.TIER2_MULTIPLIER, user_id, date_key, snapshot)
