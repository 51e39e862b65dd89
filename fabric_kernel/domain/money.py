"""
Decimal helpers shared by the engines.

All amounts and quantities inside the core are ``Decimal`` and carry full
precision between calls.  Rounding to cents happens once, at presentation,
through :func:`display_amount`.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def dsum(values: Iterable[Decimal]) -> Decimal:
    """Sum decimals, starting from Decimal zero (never int 0)."""
    total = ZERO
    for value in values:
        total += value
    return total


def safe_div(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Divide, returning zero when the denominator is zero."""
    if denominator == ZERO:
        return ZERO
    return numerator / denominator


def display_amount(value: Decimal) -> Decimal:
    """Round to two decimal places (half up) for display."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal, symbol: str = "€") -> str:
    """Render an amount the way invoices and dashboards print it."""
    return f"{symbol}{display_amount(value):.2f}"
