"""Pydantic request/response models for the Overtime API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DateRange(BaseModel):
    start: str | None = None
    end: str | None = None


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    entries: list[dict[str, Any]] = Field(default_factory=list)
    config: dict[str, Any] = Field(default_factory=dict)
    date_range: DateRange = Field(alias="dateRange")
    include_excel: bool = Field(False, alias="includeExcel")


class UserSummary(BaseModel):
    user_id: str
    user_name: str
    expected_capacity: float
    regular_hours: float
    overtime_hours: float
    total_hours: float
    break_hours: float
    billable_worked: float
    non_billable_worked: float
    billable_ot: float
    non_billable_ot: float
    holiday_count: int
    time_off_count: int
    ot_premium: float
    ot_premium_tier2: float
    amount: float
    profit: float


class AnalysisSummary(BaseModel):
    total_users: int
    total_hours: float
    regular_hours: float
    overtime_hours: float
    amount: float
    profit: float
    amount_display: str
    date_range: DateRange


class AnalyzeResponse(BaseModel):
    success: bool
    summary: AnalysisSummary | None = None
    users: list[UserSummary] | None = None
    excel_base64: str | None = None
    audit: dict | None = None
    error_type: str | None = None
    errors: list[str] | None = None
