from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
TENTH = Decimal("0.1")


def round_money(value: float) -> float:
    """Half-up rounding to cents (2.345 -> 2.35, not banker's 2.34)."""
    return float(Decimal(repr(float(value))).quantize(CENT, rounding=ROUND_HALF_UP))


def round_tenth(value: float) -> float:
    return float(Decimal(repr(float(value))).quantize(TENTH, rounding=ROUND_HALF_UP))
