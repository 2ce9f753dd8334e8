"""Canonical Data Model for the overtime analysis tool."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

ZERO = Decimal("0")


class EntryClass(Enum):
    WORK = "work"
    BREAK = "break"
    PTO = "pto"


class AmountDisplay(Enum):
    EARNED = "earned"
    COST = "cost"
    PROFIT = "profit"


HOLIDAY_TYPES = frozenset({"HOLIDAY", "HOLIDAY_TIME_ENTRY"})
TIME_OFF_TYPES = frozenset({"TIME_OFF", "TIME_OFF_TIME_ENTRY"})
WEEKDAYS = (
    "MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY",
)


# --- Inputs -----------------------------------------------------------------


@dataclass(frozen=True)
class Amount:
    """One item of the Reports API ``amounts`` array (major currency units)."""
    type: str
    value: Decimal


@dataclass(frozen=True)
class TimeEntry:
    """Single recorded time interval (canonical form).

    Rates are in minor currency units (cents per hour).
    """
    id: str
    user_id: Optional[str]
    start: Optional[str]
    end: Optional[str] = None
    duration: Optional[str] = None
    type: Optional[str] = None
    billable: bool = True
    user_name: Optional[str] = None
    description: str = ""
    earned_rate: Optional[Decimal] = None
    cost_rate: Optional[Decimal] = None
    hourly_rate: Optional[Decimal] = None
    amounts: tuple[Amount, ...] = ()


@dataclass(frozen=True)
class User:
    id: str
    name: str


@dataclass(frozen=True)
class UserProfile:
    work_capacity_hours: Optional[Decimal] = None
    working_days: Optional[frozenset[str]] = None


@dataclass(frozen=True)
class Holiday:
    name: str
    project_id: Optional[str] = None


@dataclass(frozen=True)
class TimeOffInfo:
    is_full_day: bool
    hours: Decimal = ZERO


@dataclass(frozen=True)
class DateRange:
    start: str
    end: str


@dataclass(frozen=True)
class OverrideValues:
    """Tunable parameters as stored by the override editor (strings)."""
    capacity: Optional[str] = None
    multiplier: Optional[str] = None
    tier2_threshold: Optional[str] = None
    tier2_multiplier: Optional[str] = None


@dataclass(frozen=True)
class GlobalOverride:
    values: OverrideValues = field(default_factory=OverrideValues)


@dataclass(frozen=True)
class WeeklyOverride:
    values: OverrideValues = field(default_factory=OverrideValues)
    weekly: dict[str, OverrideValues] = field(default_factory=dict)


@dataclass(frozen=True)
class PerDayOverride:
    values: OverrideValues = field(default_factory=OverrideValues)
    per_day: dict[str, OverrideValues] = field(default_factory=dict)


UserOverride = Union[GlobalOverride, WeeklyOverride, PerDayOverride]


@dataclass(frozen=True)
class OvertimeConfig:
    use_profile_capacity: bool = True
    use_profile_working_days: bool = True
    apply_holidays: bool = True
    apply_time_off: bool = True
    enable_tiered_ot: bool = True
    amount_display: AmountDisplay = AmountDisplay.EARNED


@dataclass(frozen=True)
class CalculationParams:
    daily_threshold: Decimal = Decimal("8")
    overtime_multiplier: Decimal = Decimal("1.5")
    tier2_threshold_hours: Decimal = ZERO
    tier2_multiplier: Decimal = Decimal("2.0")


@dataclass(frozen=True)
class CalcSnapshot:
    """Everything the engine reads besides the entries themselves."""
    users: tuple[User, ...] = ()
    profiles: dict[str, UserProfile] = field(default_factory=dict)
    holidays: dict[str, dict[str, Holiday]] = field(default_factory=dict)
    time_off: dict[str, dict[str, TimeOffInfo]] = field(default_factory=dict)
    overrides: dict[str, UserOverride] = field(default_factory=dict)
    config: OvertimeConfig = field(default_factory=OvertimeConfig)
    params: CalculationParams = field(default_factory=CalculationParams)


# --- Outputs ----------------------------------------------------------------


@dataclass(frozen=True)
class EntryRates:
    """Hourly rates in cents for the three amount bases."""
    earned: Decimal = ZERO
    cost: Decimal = ZERO
    profit: Decimal = ZERO


@dataclass(frozen=True)
class AmountBreakdown:
    rate: Decimal
    regular_amount: Decimal
    overtime_amount_base: Decimal
    base_amount: Decimal
    tier1_premium: Decimal
    tier2_premium: Decimal
    total_amount_with_ot: Decimal
    total_amount_no_ot: Decimal
    overtime_rate: Decimal


@dataclass(frozen=True)
class EntryAmounts:
    earned: AmountBreakdown
    cost: AmountBreakdown
    profit: AmountBreakdown

    def for_display(self, display: AmountDisplay) -> AmountBreakdown:
        if display == AmountDisplay.COST:
            return self.cost
        if display == AmountDisplay.PROFIT:
            return self.profit
        return self.earned


@dataclass(frozen=True)
class EntryAnalysis:
    regular: Decimal
    overtime: Decimal
    tier1_hours: Decimal
    tier2_hours: Decimal
    entry_class: EntryClass
    is_billable: bool
    amount: Decimal
    profit: Decimal
    primary: AmountBreakdown
    amounts: EntryAmounts
    tags: tuple[str, ...] = ()

    @property
    def is_break(self) -> bool:
        return self.entry_class == EntryClass.BREAK

    @property
    def total(self) -> Decimal:
        return self.regular + self.overtime


@dataclass(frozen=True)
class AnalyzedEntry:
    entry: TimeEntry
    analysis: EntryAnalysis


@dataclass(frozen=True)
class DayMeta:
    capacity: Decimal
    is_holiday: bool = False
    holiday_name: str = ""
    is_non_working: bool = False
    is_time_off: bool = False
    holiday_project_id: Optional[str] = None


@dataclass
class DayData:
    meta: DayMeta
    entries: list[AnalyzedEntry] = field(default_factory=list)

    @property
    def regular_hours(self) -> Decimal:
        return sum((e.analysis.regular for e in self.entries), ZERO)

    @property
    def overtime_hours(self) -> Decimal:
        return sum((e.analysis.overtime for e in self.entries), ZERO)

    @property
    def total_hours(self) -> Decimal:
        return self.regular_hours + self.overtime_hours


@dataclass
class UserTotals:
    regular: Decimal = ZERO
    overtime: Decimal = ZERO
    total: Decimal = ZERO
    breaks: Decimal = ZERO
    vacation_entry_hours: Decimal = ZERO
    billable_worked: Decimal = ZERO
    non_billable_worked: Decimal = ZERO
    billable_ot: Decimal = ZERO
    non_billable_ot: Decimal = ZERO
    amount: Decimal = ZERO
    amount_base: Decimal = ZERO
    amount_earned: Decimal = ZERO
    amount_cost: Decimal = ZERO
    amount_profit: Decimal = ZERO
    amount_earned_base: Decimal = ZERO
    amount_cost_base: Decimal = ZERO
    amount_profit_base: Decimal = ZERO
    profit: Decimal = ZERO
    ot_premium: Decimal = ZERO
    ot_premium_tier2: Decimal = ZERO
    ot_premium_earned: Decimal = ZERO
    ot_premium_cost: Decimal = ZERO
    ot_premium_profit: Decimal = ZERO
    ot_premium_tier2_earned: Decimal = ZERO
    ot_premium_tier2_cost: Decimal = ZERO
    ot_premium_tier2_profit: Decimal = ZERO
    expected_capacity: Decimal = ZERO
    holiday_count: int = 0
    time_off_count: int = 0
    holiday_hours: Decimal = ZERO
    time_off_hours: Decimal = ZERO


@dataclass
class UserAnalysis:
    user_id: str
    user_name: str
    days: dict[str, DayData] = field(default_factory=dict)
    totals: UserTotals = field(default_factory=UserTotals)


class StrictValidationError(Exception):
    """Raised when strict validation fails."""
    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Strict validation failed with {len(errors)} error(s):\n" +
                         "\n".join(f"  - {e}" for e in errors))
