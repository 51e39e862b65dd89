"""
Invoice Totals - subtotal, VAT and final price of an invoice.

The same arithmetic serves sales orders, supplier purchases and expenses:

    subtotal    = sum(line totals)
    vat_amount  = subtotal * vat_rate / 100
    final_price = subtotal + vat_amount

Rates are percentages (24 means 24%).  Pure functions with no I/O; results
keep full precision.

Usage:
    from decimal import Decimal
    from fabric_engines.invoice import compute_totals, line_total

    totals = compute_totals(order.items, Decimal("24"))
    print(totals.final_price)
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from typing import Protocol

from fabric_kernel.domain.money import HUNDRED, dsum
from fabric_kernel.domain.records import InvoiceTotals


class _Line(Protocol):
    @property
    def total_price(self) -> Decimal: ...


def line_total(meters: Decimal, price_per_meter: Decimal) -> Decimal:
    return meters * price_per_meter


def _totals(subtotal: Decimal, vat_rate_percent: Decimal) -> InvoiceTotals:
    vat_amount = subtotal * Decimal(vat_rate_percent) / HUNDRED
    return InvoiceTotals(
        subtotal=subtotal,
        vat_amount=vat_amount,
        final_price=subtotal + vat_amount,
    )


def compute_totals(items: Iterable[_Line], vat_rate_percent: Decimal) -> InvoiceTotals:
    """Totals for an invoice; an empty item list yields all zeros."""
    return _totals(dsum(item.total_price for item in items), vat_rate_percent)


def expense_totals(net_price: Decimal, vat_rate_percent: Decimal) -> InvoiceTotals:
    """Totals for a single-line expense whose subtotal is its net price."""
    return _totals(net_price, vat_rate_percent)
