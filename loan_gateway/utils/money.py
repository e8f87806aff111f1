"""Money rounding helpers"""

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def round_money(value: float) -> float:
    """
    Round to two decimals, half-up on the exact binary value.

    Same result as JavaScript ``Number(x.toFixed(2))``; differs from the
    built-in round() on exact ties such as 0.125 -> 0.13.
    """
    return float(Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))
