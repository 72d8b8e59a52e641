import math

def round_half_up(value: float) -> int:
    """
    Rounds to the nearest integer with .5 going up (20.5 -> 21).
    Python's round() uses banker's rounding (20.5 -> 20).
    """
    return int(math.floor(value + 0.5))

def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    return max(lower, min(upper, value))
