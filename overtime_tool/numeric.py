"""Decimal helpers shared by the engine and the parsers."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

HOURS_PLACES = Decimal("0.0001")
MONEY_PLACES = Decimal("0.01")

# Leading numeric prefix, the same way a JS form's parseFloat reads "7.5h" as 7.5
_FLOAT_PREFIX = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')


def to_decimal(value: object) -> Optional[Decimal]:
    """Convert a number or numeric string to a finite Decimal, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    try:
        # str() first so floats arrive with their shortest repr, not binary noise
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def parse_float(value: object) -> Optional[Decimal]:
    """Lenient parse of a stored override value; None when absent or invalid."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return to_decimal(value)
    match = _FLOAT_PREFIX.match(str(value))
    if not match:
        return None
    return to_decimal(match.group(1))


def quantize(value: Decimal, places: Decimal) -> Decimal:
    """Round half away from zero; non-finite or oversized values collapse to 0."""
    if not isinstance(value, Decimal):
        value = to_decimal(value)
        if value is None:
            return Decimal("0").quantize(places)
    if not value.is_finite():
        return Decimal("0").quantize(places)
    try:
        return value.quantize(places, ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the context precision holds
        return Decimal("0").quantize(places)


def round_hours(value: Decimal) -> Decimal:
    return quantize(value, HOURS_PLACES)


def round_money(value: Decimal) -> Decimal:
    return quantize(value, MONEY_PLACES)
