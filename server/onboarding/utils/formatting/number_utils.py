"""Lenient numeric parsing for spreadsheet-sourced values"""
import math
import re
from typing import Any, Optional

_LEADING_NUMBER = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")

def to_number(value: Any) -> Optional[float]:
    """
    Parse the leading number of a value the way spreadsheet exports need it:
    "85%" -> 85.0, "4" -> 4.0, "Dresscode Followed" -> None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return None
        number = float(match.group(1))
    else:
        return None
    return None if math.isnan(number) or math.isinf(number) else number

def positive_number(value: Any) -> Optional[float]:
    number = to_number(value)
    return number if number is not None and number > 0 else None

def round_half_up(value: float) -> int:
    # Half-up rounding; round() is banker's rounding
    return int(math.floor(value + 0.5))
