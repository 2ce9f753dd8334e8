"""API routes for the Overtime Analysis Tool."""

from __future__ import annotations

import base64
import logging
import tempfile
from decimal import Decimal
from pathlib import Path

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool

from overtime_tool.models import DateRange as RangeModel, StrictValidationError, UserAnalysis
from overtime_tool.parsers import parse_entries, parse_snapshot
from overtime_tool.engine import AnalysisRequest, get_runner, validate_date_range, validate_snapshot
from overtime_tool.excel import generate_excel_report
from overtime_tool.audit import generate_audit_dict
from overtime_tool.settings import get_settings

from api.schemas import (
    AnalysisSummary,
    AnalyzeRequest,
    AnalyzeResponse,
    DateRange,
    UserSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


def _user_summary(user: UserAnalysis) -> UserSummary:
    t = user.totals
    return UserSummary(
        user_id=user.user_id,
        user_name=user.user_name,
        expected_capacity=float(t.expected_capacity),
        regular_hours=float(t.regular),
        overtime_hours=float(t.overtime),
        total_hours=float(t.total),
        break_hours=float(t.breaks),
        billable_worked=float(t.billable_worked),
        non_billable_worked=float(t.non_billable_worked),
        billable_ot=float(t.billable_ot),
        non_billable_ot=float(t.non_billable_ot),
        holiday_count=t.holiday_count,
        time_off_count=t.time_off_count,
        ot_premium=float(t.ot_premium),
        ot_premium_tier2=float(t.ot_premium_tier2),
        amount=float(t.amount),
        profit=float(t.profit),
    )


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(request: AnalyzeRequest):
    """Analyse time entries for the given date range.

    Accepts JSON with raw time entries, the per-run configuration
    (users, profiles, holidays, time off, overrides, toggles, defaults)
    and the date range. Returns JSON with a summary, per-user totals,
    audit data and optionally a base64-encoded Excel report.
    """
    settings = get_settings()

    try:
        # Step 1: Parse inputs
        entries = parse_entries(request.entries)
        snapshot = parse_snapshot(request.config, settings.default_config(), settings.default_params())

        # Step 2: Validate
        date_range = validate_date_range(
            RangeModel(start=request.date_range.start or "", end=request.date_range.end or "")
        )
        validate_snapshot(snapshot)

        # Step 3: Calculate
        runner = get_runner(settings.offload_enabled, settings.offload_workers)
        results = await run_in_threadpool(
            runner.run,
            AnalysisRequest(entries=tuple(entries), snapshot=snapshot, date_range=date_range),
        )

        # Step 4: Optional Excel
        excel_b64 = None
        if request.include_excel:
            with tempfile.TemporaryDirectory() as tmpdir:
                out_excel = Path(tmpdir) / "Overtime_Report.xlsx"
                generate_excel_report(results, out_excel, date_range)
                excel_b64 = base64.b64encode(out_excel.read_bytes()).decode("ascii")

        # Step 5: Audit dict
        audit = generate_audit_dict(results, date_range)

        def total_of(attr: str) -> float:
            return float(sum((getattr(u.totals, attr) for u in results), Decimal("0")))

        summary = AnalysisSummary(
            total_users=len(results),
            total_hours=total_of("total"),
            regular_hours=total_of("regular"),
            overtime_hours=total_of("overtime"),
            amount=total_of("amount"),
            profit=total_of("profit"),
            amount_display=snapshot.config.amount_display.value,
            date_range=DateRange(start=date_range.start, end=date_range.end),
        )

        return AnalyzeResponse(
            success=True,
            summary=summary,
            users=[_user_summary(u) for u in results],
            excel_base64=excel_b64,
            audit=audit,
        )

    except StrictValidationError as e:
        return AnalyzeResponse(
            success=False,
            error_type="validation_error",
            errors=e.errors,
        )
    except Exception as e:
        logger.exception("Analysis failed")
        return AnalyzeResponse(
            success=False,
            error_type="processing_error",
            errors=[str(e)],
        )
