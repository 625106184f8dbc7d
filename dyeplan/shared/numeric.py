"""
Coercion helpers for numeric form input.

Quantity fields arrive either as JSON numbers or as raw text typed into a
form cell. Nothing here raises: bad input collapses to a defined default.
"""

import math
from typing import Any, Optional


def parse_optional_number(value: Any) -> Optional[float]:
    """
    Parse a numeric input, returning None for empty or invalid values.

    Used for fields where "unset" is distinct from zero (dosing / shade).

    Examples:
        >>> parse_optional_number("2.5")
        2.5
        >>> parse_optional_number("")
        >>> parse_optional_number("abc")
        >>> parse_optional_number(0)
        0.0
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None

    if not math.isfinite(number):
        return None
    return number


def parse_number(value: Any) -> float:
    """
    Parse a numeric input, returning 0.0 for empty or invalid values.

    Examples:
        >>> parse_number("12")
        12.0
        >>> parse_number("twelve")
        0.0
        >>> parse_number(None)
        0.0
    """
    number = parse_optional_number(value)
    return number if number is not None else 0.0
