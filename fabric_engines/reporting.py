"""
Reporting - dashboard figures over a date range.

Pure functions over typed records.  Dates are ISO ``YYYY-MM-DD`` strings and
compare lexically; empty bounds are open.  Date filtering applies to the
displayed totals only.  Stock value is always computed from the full
purchase history (see fabric_engines.costing).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from fabric_engines.aggregation import total_meters
from fabric_engines.valuation import ValuationMethod, total_warehouse_value
from fabric_kernel.domain.money import ZERO, dsum
from fabric_kernel.domain.records import (
    Expense,
    Fabric,
    Order,
    OrderStatus,
    Purchase,
)


def within_range(date: str, start: str | None = None, end: str | None = None) -> bool:
    """Inclusive range check on ISO date strings."""
    if start and date < start:
        return False
    if end and date > end:
        return False
    return True


@dataclass(frozen=True)
class FinancialSummary:
    """Money in and out for a period."""

    net_purchases: Decimal = ZERO
    vat_paid: Decimal = ZERO
    total_cash_out: Decimal = ZERO
    total_revenue: Decimal = ZERO
    vat_collected: Decimal = ZERO
    expenses_net: Decimal = ZERO

    @property
    def total_cost(self) -> Decimal:
        return self.net_purchases + self.expenses_net

    @property
    def gross_profit(self) -> Decimal:
        return self.total_revenue - self.net_purchases - self.expenses_net


def financial_summary(
    purchases: Sequence[Purchase],
    orders: Sequence[Order],
    expenses: Sequence[Expense],
    start: str | None = None,
    end: str | None = None,
) -> FinancialSummary:
    """
    Summarize purchases, sales and expenses dated within ``[start, end]``.

    Revenue counts every order in range regardless of status, matching the
    invoice register rather than fulfilled stock.
    """
    purchases = [p for p in purchases if within_range(p.date, start, end)]
    orders = [o for o in orders if within_range(o.date, start, end)]
    expenses = [e for e in expenses if within_range(e.date, start, end)]

    purchase_vat = dsum(p.vat_amount for p in purchases)
    expense_vat = dsum(e.vat_amount for e in expenses)

    return FinancialSummary(
        net_purchases=dsum(p.subtotal for p in purchases),
        vat_paid=purchase_vat + expense_vat,
        total_cash_out=dsum(p.final_price for p in purchases)
        + dsum(e.final_price for e in expenses),
        total_revenue=dsum(o.subtotal for o in orders),
        vat_collected=dsum(o.vat_amount for o in orders),
        expenses_net=dsum(e.net_price for e in expenses),
    )


@dataclass(frozen=True)
class StockSummary:
    fabric_count: int
    roll_count: int
    total_meters: Decimal
    stock_value: Decimal
    pending_orders: int
    order_count: int


def stock_summary(
    fabrics: Sequence[Fabric],
    orders: Sequence[Order],
    purchases: Sequence[Purchase],
    method: ValuationMethod = ValuationMethod.FABRIC_AVERAGE,
) -> StockSummary:
    return StockSummary(
        fabric_count=len(fabrics),
        roll_count=sum(len(f.rolls) for f in fabrics),
        total_meters=dsum(total_meters(f) for f in fabrics),
        stock_value=total_warehouse_value(fabrics, purchases, method),
        pending_orders=sum(1 for o in orders if o.status is OrderStatus.PENDING),
        order_count=len(orders),
    )
