from __future__ import annotations

from decimal import Decimal


def number_out(value) -> int | float | None:
    """Render a Numeric column for JSON: whole values as int, the rest as float."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    return value
