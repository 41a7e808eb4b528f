# server/core/utils.py
"""
Small numeric helpers shared by services
"""
import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a calculator does (2.5 -> 3), not banker's rounding"""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor
