"""
Fabric Domain Records (``fabric_kernel.domain.records``).

Responsibility
--------------
Frozen value objects for the nouns of the fabric business: fabrics and their
physical rolls, purchase invoices, sales orders, expense invoices and the
supplier and customer directories.  These are the only shapes the engines
accept; loosely typed documents are turned into them by
``fabric_kernel.domain.normalize`` before they enter the core.

Architecture
------------
Layer: **Kernel domain** -- pure data, zero I/O.  Records never carry a
database session.  ``record_id`` is the opaque id assigned by the record
store and is ``None`` for records not yet persisted.

Invariants
----------
- All quantities and amounts are ``Decimal``; never ``float``.
- ``Roll.meters`` is never negative.  ``Roll.with_meters`` clamps at zero,
  which is how the quantity-can't-go-negative policy is applied.
- A ``price`` of zero on a roll means "unknown"; valuation falls back to the
  fabric's weighted average cost.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from fabric_kernel.domain.money import ZERO


class OrderStatus(str, Enum):
    """Lifecycle states of a sales order."""

    PENDING = "Pending"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


@dataclass(frozen=True)
class Roll:
    """
    A physical roll of fabric in the warehouse.

    ``original_meters`` is the length at intake.  When known it is the
    quantity a manual price is weighted by, so a roll that has been partly
    sold keeps the weight of its original purchase evidence.
    """

    roll_id: int
    sub_code: str
    meters: Decimal
    price: Decimal = ZERO
    location: str = ""
    date_added: str | None = None
    original_meters: Decimal | None = None

    def __post_init__(self) -> None:
        if self.meters < ZERO:
            object.__setattr__(self, "meters", ZERO)

    @property
    def has_manual_price(self) -> bool:
        return self.price > ZERO

    @property
    def evidence_meters(self) -> Decimal:
        """Quantity that weights this roll's manual price in cost averages."""
        if self.original_meters is not None and self.original_meters > ZERO:
            return self.original_meters
        return self.meters

    def with_meters(self, meters: Decimal) -> Roll:
        """Copy of this roll holding ``max(0, meters)``."""
        return replace(self, meters=max(ZERO, meters))


@dataclass(frozen=True)
class Fabric:
    """A catalog item identified by ``main_code`` holding zero or more rolls."""

    main_code: str
    name: str = ""
    color: str = ""
    rolls: tuple[Roll, ...] = ()
    image: str = ""
    record_id: str | None = None

    def find_roll(self, roll_id: int) -> Roll | None:
        for roll in self.rolls:
            if roll.roll_id == roll_id:
                return roll
        return None

    def with_rolls(self, rolls: tuple[Roll, ...]) -> Fabric:
        return replace(self, rolls=tuple(rolls))


@dataclass(frozen=True)
class PurchaseItem:
    """One line of a supplier invoice."""

    fabric_code: str
    sub_code: str
    meters: Decimal
    price_per_meter: Decimal
    total_price: Decimal


@dataclass(frozen=True)
class Purchase:
    """
    A supplier invoice.

    Purchases are permanent price evidence: editing one retroactively changes
    every cost derived from it.
    """

    supplier: str
    date: str
    items: tuple[PurchaseItem, ...] = ()
    vat_rate: Decimal = ZERO
    subtotal: Decimal = ZERO
    vat_amount: Decimal = ZERO
    final_price: Decimal = ZERO
    invoice_no: str = ""
    record_id: str | None = None


@dataclass(frozen=True)
class OrderItem:
    """One line of a sales invoice, pointing at the roll it is cut from."""

    fabric_code: str
    roll_id: int | None
    sub_code: str
    meters: Decimal
    price_per_meter: Decimal
    total_price: Decimal


@dataclass(frozen=True)
class Order:
    """
    A sales invoice.

    ``stock_deducted`` records that the one-time stock deduction for this
    order has run.  It is set on the first entry into ``COMPLETED`` and never
    cleared, not even when the order is cancelled.
    """

    customer: str
    date: str
    items: tuple[OrderItem, ...] = ()
    vat_rate: Decimal = ZERO
    status: OrderStatus = OrderStatus.PENDING
    subtotal: Decimal = ZERO
    vat_amount: Decimal = ZERO
    final_price: Decimal = ZERO
    invoice_no: str = ""
    vat_number: str = ""
    stock_deducted: bool = False
    record_id: str | None = None


@dataclass(frozen=True)
class Expense:
    """A single-line invoice for a non-stock cost (rent, supplies, ...)."""

    company: str
    date: str
    description: str = ""
    net_price: Decimal = ZERO
    vat_rate: Decimal = ZERO
    vat_amount: Decimal = ZERO
    final_price: Decimal = ZERO
    invoice_no: str = ""
    record_id: str | None = None


class ContactKind(str, Enum):
    """Which directory a contact belongs to."""

    SUPPLIER = "Supplier"
    CUSTOMER = "Customer"


@dataclass(frozen=True)
class Contact:
    """A supplier or customer directory entry."""

    name: str
    contact: str = ""
    email: str = ""
    phone: str = ""
    vat_number: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""
    iban: str = ""
    record_id: str | None = None


@dataclass(frozen=True)
class InvoiceTotals:
    """Subtotal, VAT and final price of an invoice."""

    subtotal: Decimal = ZERO
    vat_amount: Decimal = ZERO
    final_price: Decimal = ZERO


@dataclass(frozen=True)
class Snapshot:
    """Everything the engines need, as read from the store at one moment."""

    fabrics: tuple[Fabric, ...] = ()
    purchases: tuple[Purchase, ...] = ()
    orders: tuple[Order, ...] = ()
    expenses: tuple[Expense, ...] = ()
    suppliers: tuple[Contact, ...] = ()
    customers: tuple[Contact, ...] = ()

    def fabric(self, main_code: str) -> Fabric | None:
        for fabric in self.fabrics:
            if fabric.main_code == main_code:
                return fabric
        return None
