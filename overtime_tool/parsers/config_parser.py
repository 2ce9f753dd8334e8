"""Configuration snapshot parser.

Reads the per-run JSON configuration (users, profiles, holidays, time off,
per-user overrides, feature toggles and calculation defaults) into a
CalcSnapshot. Problems are collected and raised together.
"""

from __future__ import annotations

import json
from datetime import timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from overtime_tool.dates import extract_date_key, parse_date_key, parse_iso_duration
from overtime_tool.models import (
    WEEKDAYS,
    AmountDisplay,
    CalcSnapshot,
    CalculationParams,
    GlobalOverride,
    Holiday,
    OvertimeConfig,
    OverrideValues,
    PerDayOverride,
    StrictValidationError,
    TimeOffInfo,
    User,
    UserOverride,
    UserProfile,
    WeeklyOverride,
)
from overtime_tool.numeric import to_decimal

_CONFIG_FLAGS = {
    "useProfileCapacity": "use_profile_capacity",
    "useProfileWorkingDays": "use_profile_working_days",
    "applyHolidays": "apply_holidays",
    "applyTimeOff": "apply_time_off",
    "enableTieredOT": "enable_tiered_ot",
}

_FLAG_STRINGS = {"true": True, "false": False}

_PARAMS = {
    "dailyThreshold": "daily_threshold",
    "overtimeMultiplier": "overtime_multiplier",
    "tier2ThresholdHours": "tier2_threshold_hours",
    "tier2Multiplier": "tier2_multiplier",
}


def _mapping(raw: Any, label: str, errors: list[str]) -> dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        errors.append(f"{label} must be an object keyed by user id")
        return {}
    return raw


def _stored(value: Any) -> Optional[str]:
    """Override values are kept as the strings the editor stored."""
    if value is None:
        return None
    return str(value)


def _override_values(raw: Any) -> OverrideValues:
    if not isinstance(raw, dict):
        return OverrideValues()
    return OverrideValues(
        capacity=_stored(raw.get("capacity")),
        multiplier=_stored(raw.get("multiplier")),
        tier2_threshold=_stored(raw.get("tier2Threshold")),
        tier2_multiplier=_stored(raw.get("tier2Multiplier")),
    )


def parse_override(raw: dict[str, Any]) -> UserOverride:
    """Build the tagged override variant selected by ``mode``."""
    values = _override_values(raw)
    mode = raw.get("mode")

    if mode == "perDay":
        per_day = raw.get("perDayOverrides")
        per_day = per_day if isinstance(per_day, dict) else {}
        return PerDayOverride(
            values=values,
            per_day={str(k): _override_values(v) for k, v in per_day.items()},
        )
    if mode == "weekly":
        weekly = raw.get("weeklyOverrides")
        weekly = weekly if isinstance(weekly, dict) else {}
        return WeeklyOverride(
            values=values,
            weekly={str(k).upper(): _override_values(v) for k, v in weekly.items()},
        )
    return GlobalOverride(values=values)


def _parse_users(raw: Any, errors: list[str]) -> tuple[User, ...]:
    users = []
    for item in raw or []:
        if not isinstance(item, dict) or not item.get("id"):
            errors.append(f"User record without id: {item!r}")
            continue
        users.append(User(id=str(item["id"]), name=str(item.get("name") or item["id"])))
    return tuple(users)


def _parse_profiles(raw: Any, errors: list[str]) -> dict[str, UserProfile]:
    profiles = {}
    for user_id, item in _mapping(raw, "profiles", errors).items():
        if not isinstance(item, dict):
            errors.append(f"Profile for {user_id} is not an object")
            continue
        capacity = to_decimal(item.get("workCapacityHours"))
        if capacity is None and item.get("workCapacity"):
            capacity = parse_iso_duration(item["workCapacity"])
        working_days = item.get("workingDays")
        if working_days is not None:
            days = {str(d).upper() for d in working_days}
            unknown = days - set(WEEKDAYS)
            if unknown:
                errors.append(f"Profile for {user_id} has unknown working days: {sorted(unknown)}")
            working_days = frozenset(days & set(WEEKDAYS))
        profiles[str(user_id)] = UserProfile(work_capacity_hours=capacity, working_days=working_days)
    return profiles


def _expand_period(period: dict[str, Any]) -> list[str]:
    start = parse_date_key(extract_date_key(period.get("startDate")))
    end = parse_date_key(extract_date_key(period.get("endDate") or period.get("startDate")))
    if start is None or end is None:
        return []
    keys = []
    current = start
    while current <= end:
        keys.append(current.isoformat())
        current += timedelta(days=1)
    return keys


def _parse_holidays(raw: Any, errors: list[str]) -> dict[str, dict[str, Holiday]]:
    """Accepts {user: {date: holiday}} or {user: [holiday with datePeriod]}."""
    holidays: dict[str, dict[str, Holiday]] = {}
    for user_id, items in _mapping(raw, "holidays", errors).items():
        by_date: dict[str, Holiday] = {}
        if isinstance(items, dict):
            for date_key, item in items.items():
                if parse_date_key(date_key) is None:
                    errors.append(f"Holiday for {user_id} has invalid date {date_key!r}")
                    continue
                item = item if isinstance(item, dict) else {"name": item}
                by_date[date_key] = Holiday(name=str(item.get("name") or ""), project_id=item.get("projectId"))
        elif isinstance(items, list):
            for item in items:
                if not isinstance(item, dict):
                    continue
                keys = _expand_period(item.get("datePeriod") or {})
                if not keys:
                    errors.append(f"Holiday {item.get('name')!r} for {user_id} has no valid datePeriod")
                holiday = Holiday(name=str(item.get("name") or ""), project_id=item.get("projectId"))
                for key in keys:
                    by_date[key] = holiday
        else:
            errors.append(f"Holidays for {user_id} must be an object or list")
        holidays[str(user_id)] = by_date
    return holidays


def _parse_time_off(raw: Any, errors: list[str]) -> dict[str, dict[str, TimeOffInfo]]:
    time_off: dict[str, dict[str, TimeOffInfo]] = {}
    for user_id, items in _mapping(raw, "timeOff", errors).items():
        by_date: dict[str, TimeOffInfo] = {}
        if not isinstance(items, dict):
            errors.append(f"Time off for {user_id} must be an object keyed by date")
            continue
        for date_key, item in items.items():
            if parse_date_key(date_key) is None:
                errors.append(f"Time off for {user_id} has invalid date {date_key!r}")
                continue
            if not isinstance(item, dict):
                errors.append(f"Time off for {user_id} on {date_key} is not an object")
                continue
            hours = to_decimal(item.get("hours")) or Decimal("0")
            by_date[date_key] = TimeOffInfo(is_full_day=bool(item.get("isFullDay")), hours=hours)
        time_off[str(user_id)] = by_date
    return time_off


def _flag(raw: Any, key: str, default: bool, errors: list[str]) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in _FLAG_STRINGS:
        return _FLAG_STRINGS[raw.strip().lower()]
    errors.append(f"config.{key} must be true or false, got {raw!r}")
    return default


def _parse_config(raw: Any, defaults: OvertimeConfig, errors: list[str]) -> OvertimeConfig:
    raw = raw or {}
    kwargs: dict[str, Any] = {}
    for key, attr in _CONFIG_FLAGS.items():
        default = getattr(defaults, attr)
        kwargs[attr] = _flag(raw[key], key, default, errors) if key in raw else default

    display = raw.get("amountDisplay")
    if display is None:
        kwargs["amount_display"] = defaults.amount_display
    else:
        try:
            kwargs["amount_display"] = AmountDisplay(str(display).lower())
        except ValueError:
            errors.append(f"amountDisplay must be earned, cost or profit, got {display!r}")
            kwargs["amount_display"] = defaults.amount_display
    return OvertimeConfig(**kwargs)


def _parse_params(raw: Any, defaults: CalculationParams, errors: list[str]) -> CalculationParams:
    raw = raw or {}
    kwargs: dict[str, Decimal] = {}
    for key, attr in _PARAMS.items():
        if key not in raw:
            kwargs[attr] = getattr(defaults, attr)
            continue
        value = to_decimal(raw[key])
        if value is None:
            errors.append(f"calcParams.{key} must be a number, got {raw[key]!r}")
            value = getattr(defaults, attr)
        kwargs[attr] = value
    return CalculationParams(**kwargs)


def parse_snapshot(
    raw: dict[str, Any],
    default_config: Optional[OvertimeConfig] = None,
    default_params: Optional[CalculationParams] = None,
) -> CalcSnapshot:
    """Parse a raw configuration document into a CalcSnapshot."""
    if not isinstance(raw, dict):
        raise StrictValidationError(["Configuration must be a JSON object"])

    errors: list[str] = []
    snapshot = CalcSnapshot(
        users=_parse_users(raw.get("users"), errors),
        profiles=_parse_profiles(raw.get("profiles"), errors),
        holidays=_parse_holidays(raw.get("holidays"), errors),
        time_off=_parse_time_off(raw.get("timeOff"), errors),
        overrides={
            str(user_id): parse_override(item)
            for user_id, item in _mapping(raw.get("overrides"), "overrides", errors).items()
            if isinstance(item, dict)
        },
        config=_parse_config(raw.get("config"), default_config or OvertimeConfig(), errors),
        params=_parse_params(raw.get("calcParams"), default_params or CalculationParams(), errors),
    )

    if errors:
        raise StrictValidationError(errors)

    return snapshot


def load_snapshot(
    path: str | Path,
    default_config: Optional[OvertimeConfig] = None,
    default_params: Optional[CalculationParams] = None,
) -> CalcSnapshot:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise StrictValidationError([f"{path.name}: invalid JSON ({e})"]) from e
    return parse_snapshot(data, default_config, default_params)
