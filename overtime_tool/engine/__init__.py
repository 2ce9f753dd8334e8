"""Validation, allocation and calculation engines."""
from overtime_tool.engine.validator import validate_date_range, validate_snapshot
from overtime_tool.engine.calculator import calculate_analysis
from overtime_tool.engine.offload import AnalysisRequest, get_runner

__all__ = [
    "validate_date_range",
    "validate_snapshot",
    "calculate_analysis",
    "AnalysisRequest",
    "get_runner",
]
