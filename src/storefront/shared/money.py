"""Helpers for naira amounts held as floats."""

# Amounts closer than this are considered equal
TOLERANCE = 0.01


def round_money(value) -> float:
    return round(float(value or 0.0), 2)


def amounts_match(left, right) -> bool:
    return abs(float(left or 0.0) - float(right or 0.0)) < TOLERANCE
