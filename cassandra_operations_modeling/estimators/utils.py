import math
from typing import Optional


def round_half_up(x: float) -> int:
    """Rounds to the nearest integer with ties going up (2.5 -> 3, -2.5 -> -2)

    The builtin round() uses banker's rounding which would make totals
    depend on which side of an even number they land.
    """
    if not math.isfinite(x):
        return 0
    return int(math.floor(x + 0.5))


def finite_or_zero(x: float) -> float:
    return x if math.isfinite(x) else 0.0


def parse_chance(value: Optional[str]) -> float:
    # Schema values such as "0.1", "0.0" or "" (removed in 4.0)
    if value is None:
        return 0.0
    try:
        chance = float(value)
    except (TypeError, ValueError):
        return 0.0
    return finite_or_zero(chance)
