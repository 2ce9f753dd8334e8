"""CSV export of the detailed per-entry rows."""

from __future__ import annotations

import csv
from pathlib import Path

from overtime_tool.excel.generator import DETAILED_HEADERS, detailed_rows, sanitize_formula_injection
from overtime_tool.models import UserAnalysis


def write_csv(results: list[UserAnalysis], output_path: str | Path) -> Path:
    output_path = Path(output_path)
    with output_path.open('w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(DETAILED_HEADERS)
        for row in detailed_rows(results):
            writer.writerow([sanitize_formula_injection(v) for v in row])
    return output_path
