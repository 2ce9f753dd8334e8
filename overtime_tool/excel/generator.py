"""Excel Report Generator.

Writes a fresh workbook with a Summary sheet (one row per user) and a
Detailed sheet (one row per entry per day, with a placeholder row for days
without entries). Excel formulas are NOT relied upon — all values are
pre-computed in Python.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

import openpyxl
from openpyxl.styles import Alignment, Border, Font, Side
from openpyxl.utils import get_column_letter

from overtime_tool.models import DateRange, UserAnalysis

THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin'),
)

HEADER_FONT = Font(name='Calibri', size=11, bold=True)
DATA_FONT = Font(name='Calibri', size=11)
TITLE_FONT = Font(name='Calibri', size=12, bold=True)
CENTER_ALIGN = Alignment(horizontal='center', vertical='center')
DOLLAR_FORMAT = '_("$"* #,##0.00_);_("$"* \\(#,##0.00\\);_("$"* "-"??_);_(@_)'
NUMBER_FORMAT = '#,##0.00'
DATE_FORMAT = 'yyyy-mm-dd'

FORMULA_PREFIXES = ('=', '+', '-', '@', '\t', '\r')
EMPTY_DAY_LABEL = '(no entries)'

SUMMARY_HEADERS = [
    'User', 'Capacity', 'Regular', 'Overtime', 'Total', 'Breaks', 'Time Off Entries',
    'Billable Worked', 'Billable OT', 'Non-Billable Worked', 'Non-Billable OT',
    'Holidays', 'Time Off Days', 'OT Premium', 'Tier 2 Premium', 'Amount', 'Profit',
]
MONEY_COLUMNS = {'OT Premium', 'Tier 2 Premium', 'Rate', 'Amount', 'Profit'}

DETAILED_HEADERS = [
    'User', 'Date', 'Start', 'End', 'Description', 'Type', 'Class', 'Billable',
    'Regular', 'Overtime', 'Tier 1 OT', 'Tier 2 OT', 'Rate', 'Amount', 'Profit',
    'Capacity', 'Tags',
]


def sanitize_formula_injection(value: Any) -> Any:
    """Neutralise text that a spreadsheet would evaluate as a formula."""
    if isinstance(value, str) and value.startswith(FORMULA_PREFIXES):
        return "'" + value
    return value


def _num(value: Decimal) -> float:
    return float(value)


def summary_rows(results: list[UserAnalysis]) -> list[list[Any]]:
    rows = []
    for user in results:
        t = user.totals
        rows.append([
            user.user_name,
            _num(t.expected_capacity), _num(t.regular), _num(t.overtime), _num(t.total),
            _num(t.breaks), _num(t.vacation_entry_hours),
            _num(t.billable_worked), _num(t.billable_ot),
            _num(t.non_billable_worked), _num(t.non_billable_ot),
            t.holiday_count, t.time_off_count,
            _num(t.ot_premium), _num(t.ot_premium_tier2), _num(t.amount), _num(t.profit),
        ])
    return rows


def detailed_rows(results: list[UserAnalysis]) -> list[list[Any]]:
    """One row per entry; days without entries get a single placeholder row."""
    rows = []
    for user in results:
        for date_key, day in user.days.items():
            capacity = _num(day.meta.capacity)
            if not day.entries:
                tags = []
                if day.meta.is_holiday:
                    tags.append('HOLIDAY')
                if day.meta.is_non_working:
                    tags.append('OFF-DAY')
                if day.meta.is_time_off:
                    tags.append('TIME-OFF')
                rows.append([
                    user.user_name, date_key, '', '', EMPTY_DAY_LABEL, '', '', '',
                    0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, capacity, ' '.join(tags),
                ])
                continue
            for item in day.entries:
                entry, analysis = item.entry, item.analysis
                rows.append([
                    user.user_name, date_key, entry.start or '', entry.end or '',
                    entry.description, entry.type or '', analysis.entry_class.value,
                    'Yes' if analysis.is_billable else 'No',
                    _num(analysis.regular), _num(analysis.overtime),
                    _num(analysis.tier1_hours), _num(analysis.tier2_hours),
                    _num(analysis.primary.rate), _num(analysis.amount), _num(analysis.profit),
                    capacity, ' '.join(analysis.tags),
                ])
    return rows


def _write_header(ws, row: int, headers: list[str]) -> None:
    for col, label in enumerate(headers, start=1):
        c = ws.cell(row=row, column=col)
        c.value = label
        c.font = HEADER_FONT
        c.alignment = CENTER_ALIGN
        c.border = THIN_BORDER


def _write_row(ws, row: int, values: list[Any], headers: list[str], font: Font = DATA_FONT) -> None:
    for col, (label, value) in enumerate(zip(headers, values), start=1):
        c = ws.cell(row=row, column=col)
        c.value = sanitize_formula_injection(value)
        c.font = font
        c.border = THIN_BORDER
        if label in MONEY_COLUMNS:
            c.number_format = DOLLAR_FORMAT
        elif isinstance(value, float):
            c.number_format = NUMBER_FORMAT


def _write_summary_sheet(ws, results: list[UserAnalysis], date_range: Optional[DateRange]) -> None:
    last_col = len(SUMMARY_HEADERS)
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=last_col)
    title = ws.cell(row=1, column=1)
    title.value = 'Overtime Summary'
    if date_range is not None:
        title.value += f' ({date_range.start} to {date_range.end})'
    title.font = TITLE_FONT
    title.alignment = CENTER_ALIGN

    _write_header(ws, 2, SUMMARY_HEADERS)
    rows = summary_rows(results)
    row = 3
    for values in rows:
        _write_row(ws, row, values, SUMMARY_HEADERS)
        row += 1

    # Totals row
    totals: list[Any] = ['Total']
    for col in range(1, last_col):
        totals.append(sum(r[col] for r in rows) if rows else 0)
    totals = [round(v, 2) if isinstance(v, float) else v for v in totals]
    _write_row(ws, row, totals, SUMMARY_HEADERS, font=HEADER_FONT)

    ws.column_dimensions['A'].width = 28
    for col in range(2, last_col + 1):
        ws.column_dimensions[get_column_letter(col)].width = 14


def _write_detailed_sheet(ws, results: list[UserAnalysis]) -> None:
    _write_header(ws, 1, DETAILED_HEADERS)
    for row, values in enumerate(detailed_rows(results), start=2):
        _write_row(ws, row, values, DETAILED_HEADERS)
        date_cell = ws.cell(row=row, column=2)
        date_cell.value = datetime.strptime(values[1], '%Y-%m-%d')
        date_cell.number_format = DATE_FORMAT

    widths = {'A': 28, 'B': 12, 'C': 26, 'D': 26, 'E': 36, 'Q': 24}
    for col in range(1, len(DETAILED_HEADERS) + 1):
        letter = get_column_letter(col)
        ws.column_dimensions[letter].width = widths.get(letter, 12)
    ws.freeze_panes = 'A2'


def generate_excel_report(
    results: list[UserAnalysis],
    output_path: str | Path,
    date_range: Optional[DateRange] = None,
) -> Path:
    """Generate the Excel overtime report from computed results."""
    output_path = Path(output_path)

    wb = openpyxl.Workbook()
    summary = wb.active
    summary.title = 'Summary'
    _write_summary_sheet(summary, results, date_range)
    _write_detailed_sheet(wb.create_sheet('Detailed'), results)

    wb.save(str(output_path))
    return output_path
