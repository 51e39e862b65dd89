"""
Fabric Engines - pure calculation layer.

Engines take typed records from fabric_kernel.domain and return numbers or
proposed new state.  They never read or write the record store.

Engines:
    - costing: weighted average cost from purchases and manually priced rolls
    - aggregation: sub-batch (sub code) summaries of a fabric's rolls
    - valuation: stock value per fabric and for the whole warehouse
    - invoice: subtotal / VAT / final price
    - fulfillment: order lifecycle and one-time stock deduction
    - reporting: dashboard totals over a date range
"""

from fabric_engines.aggregation import (
    SubcodeSummary,
    subcode_meters,
    subcode_summary,
    total_meters,
    unique_subcodes,
)
from fabric_engines.costing import (
    roll_unit_price,
    subcode_average_cost,
    weighted_average_cost,
)
from fabric_engines.fulfillment import (
    ORDER_WORKFLOW,
    DeductionResult,
    FulfillmentCoordinator,
    FulfillmentResult,
    TransitionEffect,
    deduct_stock,
)
from fabric_engines.invoice import compute_totals, expense_totals, line_total
from fabric_engines.reporting import (
    FinancialSummary,
    StockSummary,
    financial_summary,
    stock_summary,
    within_range,
)
from fabric_engines.valuation import (
    ValuationMethod,
    fabric_subcode_value,
    fabric_value,
    subcode_value,
    total_warehouse_value,
)

__all__ = [
    # Costing
    "weighted_average_cost",
    "subcode_average_cost",
    "roll_unit_price",
    # Aggregation
    "SubcodeSummary",
    "subcode_summary",
    "unique_subcodes",
    "total_meters",
    "subcode_meters",
    # Valuation
    "ValuationMethod",
    "fabric_value",
    "fabric_subcode_value",
    "subcode_value",
    "total_warehouse_value",
    # Invoice
    "compute_totals",
    "expense_totals",
    "line_total",
    # Fulfillment
    "ORDER_WORKFLOW",
    "TransitionEffect",
    "DeductionResult",
    "FulfillmentResult",
    "FulfillmentCoordinator",
    "deduct_stock",
    # Reporting
    "FinancialSummary",
    "StockSummary",
    "financial_summary",
    "stock_summary",
    "within_range",
]
