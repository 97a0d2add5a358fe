"""Half-up rounding.

Python's round() is banker's rounding; the displayed percentages are
rounded half-up (62.5 -> 63, 0.25 -> 0.3).
"""

import math
from typing import Optional


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    return int(math.floor(value + 0.5))


def round1(value: Optional[float]) -> Optional[float]:
    """One decimal, None-safe."""
    if value is None:
        return None
    return round_half_up(value, 1)


def format_number(value: float) -> str:
    """62.0 -> '62', 62.5 -> '62.5'."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
