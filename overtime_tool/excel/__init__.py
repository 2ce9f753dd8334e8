"""Report exports."""
from overtime_tool.excel.generator import generate_excel_report, sanitize_formula_injection
from overtime_tool.excel.csv_export import write_csv

__all__ = ["generate_excel_report", "sanitize_formula_injection", "write_csv"]
