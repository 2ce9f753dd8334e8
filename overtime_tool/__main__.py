"""CLI entry point.

Usage:
    python -m overtime_tool \
        --entries "entries.json" \
        --config "config.json" \
        --start 2024-01-01 --end 2024-01-31 \
        --out "Overtime_Report.xlsx" \
        --audit-out "Audit.json" \
        --csv-out "Overtime_Detailed.csv"
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from overtime_tool.models import DateRange, StrictValidationError


def analyze(
    entries: str = typer.Option(..., "--entries", help="Path to time entries JSON"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to users/profiles/overrides config JSON"),
    start: str = typer.Option(..., "--start", help="First day of the range (YYYY-MM-DD)"),
    end: str = typer.Option(..., "--end", help="Last day of the range (YYYY-MM-DD)"),
    out: Optional[str] = typer.Option("Overtime_Report.xlsx", "--out", help="Output Excel file path"),
    audit_out: Optional[str] = typer.Option("Audit.json", "--audit-out", help="Output audit JSON file path"),
    csv_out: Optional[str] = typer.Option(None, "--csv-out", help="Output detailed CSV file path"),
    offload: Optional[bool] = typer.Option(None, "--offload/--no-offload", help="Run the analysis in a worker process"),
) -> None:
    """Analyse time entries for regular and overtime hours and export the results."""
    from overtime_tool.settings import get_settings
    from overtime_tool.logging_config import setup_logging
    from overtime_tool.parsers import load_entries, load_snapshot, parse_snapshot
    from overtime_tool.engine import AnalysisRequest, get_runner, validate_date_range, validate_snapshot
    from overtime_tool.excel import generate_excel_report, write_csv
    from overtime_tool.audit import generate_audit

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_json)
    use_offload = settings.offload_enabled if offload is None else offload

    typer.echo(f"Entries: {entries}")
    typer.echo(f"Config: {config or '(defaults)'}")
    typer.echo(f"Range: {start} .. {end}")
    typer.echo(f"Offload: {use_offload}")
    typer.echo("")

    try:
        # Step 1: Load inputs
        typer.echo("Loading time entries...")
        time_entries = load_entries(entries)
        typer.echo(f"  -> {len(time_entries)} entries")

        typer.echo("Loading configuration...")
        if config:
            snapshot = load_snapshot(config, settings.default_config(), settings.default_params())
        else:
            snapshot = parse_snapshot({}, settings.default_config(), settings.default_params())
        typer.echo(f"  -> {len(snapshot.users)} users, {len(snapshot.overrides)} overrides")

        # Step 2: Validate
        typer.echo("\nRunning strict validation...")
        date_range = validate_date_range(DateRange(start=start, end=end))
        validate_snapshot(snapshot)
        typer.echo("  Validation PASSED")

        # Step 3: Calculate
        typer.echo("\nCalculating overtime...")
        runner = get_runner(use_offload, settings.offload_workers)
        results = runner.run(AnalysisRequest(
            entries=tuple(time_entries),
            snapshot=snapshot,
            date_range=date_range,
        ))

        display = snapshot.config.amount_display.value
        for user in results:
            t = user.totals
            typer.echo(f"  {user.user_name} ({user.user_id}):")
            typer.echo(f"    Capacity: {t.expected_capacity}h")
            typer.echo(f"    Regular:  {t.regular}h   Overtime: {t.overtime}h   Breaks: {t.breaks}h")
            typer.echo(f"    OT premium: {t.ot_premium} (tier 2: {t.ot_premium_tier2})")
            typer.echo(f"    Amount ({display}): {t.amount}   Profit: {t.profit}")

        typer.echo(f"\n  USERS: {len(results)}")

        # Step 4: Export
        if out:
            typer.echo(f"\nGenerating Excel report: {out}...")
            generate_excel_report(results, Path(out), date_range)
            typer.echo(f"  Excel report saved to: {out}")

        if audit_out:
            typer.echo(f"\nGenerating audit file: {audit_out}...")
            generate_audit(results, Path(audit_out), date_range)
            typer.echo(f"  Audit file saved to: {audit_out}")

        if csv_out:
            typer.echo(f"\nGenerating CSV export: {csv_out}...")
            write_csv(results, Path(csv_out))
            typer.echo(f"  CSV saved to: {csv_out}")

        typer.echo("\nSUCCESS: Overtime analysis generated.")

    except StrictValidationError as e:
        typer.echo("\nSTRICT VALIDATION FAILED:", err=True)
        for error in e.errors:
            typer.echo(f"  ERROR: {error}", err=True)
        typer.echo("\nReport NOT generated.", err=True)
        raise typer.Exit(1)

    except Exception as e:
        typer.echo(f"\nFATAL ERROR: {e}", err=True)
        raise typer.Exit(1)


def main() -> None:
    typer.run(analyze)


if __name__ == "__main__":
    main()
