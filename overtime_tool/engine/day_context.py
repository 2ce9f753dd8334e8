"""Day Context Builder.

Determines, per user per day, the holiday / non-working / time-off flags and
the capacity left for regular work once those are applied. The flags are not
exclusive: a holiday that also carries a time-off record keeps both.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from overtime_tool.dates import parse_iso_duration, weekday_key
from overtime_tool.engine.resolver import resolve_capacity
from overtime_tool.models import (
    HOLIDAY_TYPES,
    TIME_OFF_TYPES,
    ZERO,
    CalcSnapshot,
    DayMeta,
    Holiday,
    TimeEntry,
    TimeOffInfo,
)


@dataclass(frozen=True)
class DayContext:
    effective_capacity: Decimal
    base_capacity: Decimal
    is_holiday: bool = False
    holiday_name: str = ""
    holiday_project_id: Optional[str] = None
    is_non_working: bool = False
    is_time_off: bool = False
    holiday_hours: Decimal = ZERO
    time_off_hours: Decimal = ZERO

    def to_meta(self) -> DayMeta:
        return DayMeta(
            capacity=self.effective_capacity,
            is_holiday=self.is_holiday,
            holiday_name=self.holiday_name,
            is_non_working=self.is_non_working,
            is_time_off=self.is_time_off,
            holiday_project_id=self.holiday_project_id,
        )


def is_working_day(user_id: str, date_key: str, snapshot: CalcSnapshot) -> bool:
    if not snapshot.config.use_profile_working_days:
        return True
    profile = snapshot.profiles.get(user_id)
    if profile is None or profile.working_days is None:
        return True
    return weekday_key(date_key) in profile.working_days


def get_holiday(user_id: str, date_key: str, snapshot: CalcSnapshot) -> Optional[Holiday]:
    if not snapshot.config.apply_holidays:
        return None
    return snapshot.holidays.get(user_id, {}).get(date_key)


def get_time_off(user_id: str, date_key: str, snapshot: CalcSnapshot) -> Optional[TimeOffInfo]:
    if not snapshot.config.apply_time_off:
        return None
    return snapshot.time_off.get(user_id, {}).get(date_key)


def build_day_context(
    user_id: str,
    date_key: str,
    day_entries: Sequence[TimeEntry],
    snapshot: CalcSnapshot,
) -> DayContext:
    config = snapshot.config
    base_capacity = resolve_capacity(user_id, date_key, snapshot)
    clamped = max(base_capacity, ZERO)
    capacity = clamped

    is_non_working = not is_working_day(user_id, date_key, snapshot)
    if is_non_working:
        capacity = ZERO

    is_holiday = False
    holiday_name = ""
    holiday_project_id = None
    holiday_hours = ZERO

    holiday = get_holiday(user_id, date_key, snapshot)
    if holiday is not None:
        is_holiday = True
        holiday_name = holiday.name
        holiday_project_id = holiday.project_id
        holiday_hours = capacity
        capacity = ZERO
    elif not config.apply_holidays and any(e.type in HOLIDAY_TYPES for e in day_entries):
        # Source system tagged the day itself; no holiday record to consult
        is_holiday = True
        holiday_hours = clamped
        capacity = ZERO

    is_time_off = False
    time_off_hours = ZERO

    time_off = get_time_off(user_id, date_key, snapshot)
    if time_off is not None:
        is_time_off = True
        if time_off.is_full_day:
            time_off_hours = clamped
            capacity = ZERO
        else:
            time_off_hours = max(time_off.hours, ZERO)
            capacity -= min(capacity, time_off_hours)
    elif not config.apply_time_off:
        tagged = [e for e in day_entries if e.type in TIME_OFF_TYPES]
        if tagged:
            is_time_off = True
            time_off_hours = sum((parse_iso_duration(e.duration) for e in tagged), ZERO)
            capacity = max(ZERO, capacity - time_off_hours)

    return DayContext(
        effective_capacity=capacity,
        base_capacity=base_capacity,
        is_holiday=is_holiday,
        holiday_name=holiday_name,
        holiday_project_id=holiday_project_id,
        is_non_working=is_non_working,
        is_time_off=is_time_off,
        holiday_hours=holiday_hours,
        time_off_hours=time_off_hours,
    )
