"""Pure domain layer: records, normalization, money helpers, clock."""

from fabric_kernel.domain.records import (
    Expense,
    Fabric,
    InvoiceTotals,
    Order,
    OrderItem,
    OrderStatus,
    Purchase,
    PurchaseItem,
    Roll,
    Snapshot,
)

__all__ = [
    "Expense",
    "Fabric",
    "InvoiceTotals",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Purchase",
    "PurchaseItem",
    "Roll",
    "Snapshot",
]
