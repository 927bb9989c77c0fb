"""Design system utilities — value formatting for the dashboard.

The report model only carries raw numbers; these helpers render them the
way the dashboard shows them (vi-VN conventions):
- Currency: 1.234.567 ₫
- Numbers: 1.234.567 / 1.234,5
- Percentages: 12,34%
"""

import math


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def _group_vi(value: float | int, digits: int = 0) -> str:
    """Group thousands with '.' and use ',' as the decimal mark."""
    text = f"{value:,.{digits}f}"
    return text.replace(",", "\x00").replace(".", ",").replace("\x00", ".")


def format_number(value: float | int | None, digits: int | None = None) -> str:
    """Format a number with vi-VN separators.

    Integral values print without decimals unless ``digits`` is given;
    fractional values keep up to three decimals, trailing zeros dropped.
    """
    if not _is_number(value):
        return "0"
    if digits is not None:
        return _group_vi(value, digits)
    if float(value).is_integer():
        return _group_vi(value, 0)
    text = _group_vi(value, 3)
    return text.rstrip("0").rstrip(",")


def format_currency(value: float | int | None) -> str:
    """Format a VND amount: 1.234.567 ₫.  Non-numbers render as 0 ₫."""
    if not _is_number(value):
        return "0 ₫"
    return f"{format_number(value)} ₫"


def format_percentage(value: float | int | None, digits: int = 2) -> str:
    """Format a percentage-point value: 12.346 -> 12,35%."""
    if not _is_number(value):
        return "0%"
    return f"{_group_vi(value, digits)}%"

