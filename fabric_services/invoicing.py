"""
fabric_services.invoicing -- Supplier purchases and expenses.

Responsibility:
    Persist purchase and expense invoices with their totals recomputed by
    fabric_engines.invoice.  Saving a purchase never touches stock: rolls
    are received through InventoryService.  Purchases are permanent price
    evidence, so editing or deleting one changes every cost derived from it
    on the next read.

Architecture position:
    Services -- thin orchestration over the invoice engine and the store.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

from fabric_engines.invoice import compute_totals, expense_totals, line_total
from fabric_kernel.domain.normalize import (
    expense_from_record,
    expense_to_record,
    parse_decimal,
    purchase_from_record,
    purchase_to_record,
)
from fabric_kernel.domain.records import Expense, Purchase, PurchaseItem
from fabric_kernel.logging_config import get_logger
from fabric_services.store import EXPENSES, PURCHASES, RecordStore

logger = get_logger("services.invoicing")

DEFAULT_VAT_RATE = Decimal("24")


def purchase_line(fabric_code: str, sub_code: str, meters, price_per_meter) -> PurchaseItem:
    """Build a purchase line from raw input, computing its total."""
    meters = parse_decimal(meters)
    price = parse_decimal(price_per_meter)
    return PurchaseItem(
        fabric_code=fabric_code,
        sub_code=sub_code,
        meters=meters,
        price_per_meter=price,
        total_price=line_total(meters, price),
    )


class InvoiceService:
    """Create, edit and delete purchase and expense invoices."""

    def __init__(self, store: RecordStore, default_vat_rate: Decimal = DEFAULT_VAT_RATE):
        self._store = store
        self._default_vat_rate = Decimal(default_vat_rate)

    @property
    def default_vat_rate(self) -> Decimal:
        return self._default_vat_rate

    def new_purchase(
        self,
        supplier: str,
        date: str,
        items: tuple[PurchaseItem, ...] = (),
        vat_rate=None,
        invoice_no: str = "",
    ) -> Purchase:
        """An unsaved purchase using the default VAT rate unless one is given."""
        return Purchase(
            supplier=supplier,
            date=date,
            items=tuple(items),
            vat_rate=self._default_vat_rate if vat_rate is None else parse_decimal(vat_rate),
            invoice_no=invoice_no,
        )

    def save_purchase(self, purchase: Purchase) -> Purchase:
        """Insert (no ``record_id``) or overwrite a purchase."""
        totals = compute_totals(purchase.items, purchase.vat_rate)
        purchase = replace(
            purchase,
            subtotal=totals.subtotal,
            vat_amount=totals.vat_amount,
            final_price=totals.final_price,
        )
        document = purchase_to_record(purchase)
        if purchase.record_id is None:
            record_id = self._store.create(PURCHASES, document)
        else:
            record_id = purchase.record_id
            self._store.update(PURCHASES, record_id, document)

        logger.info(
            "purchase_saved",
            extra={
                "purchase_id": record_id,
                "supplier": purchase.supplier,
                "line_count": len(purchase.items),
                "subtotal": totals.subtotal,
            },
        )
        return purchase_from_record(self._store.get(PURCHASES, record_id), record_id)

    def delete_purchase(self, purchase_id: str) -> None:
        self._store.delete(PURCHASES, purchase_id)
        logger.info("purchase_deleted", extra={"purchase_id": purchase_id})

    def new_expense(
        self,
        company: str,
        date: str,
        description: str,
        net_price,
        vat_rate=None,
        invoice_no: str = "",
    ) -> Expense:
        return Expense(
            company=company,
            date=date,
            description=description,
            net_price=parse_decimal(net_price),
            vat_rate=self._default_vat_rate if vat_rate is None else parse_decimal(vat_rate),
            invoice_no=invoice_no,
        )

    def save_expense(self, expense: Expense) -> Expense:
        totals = expense_totals(expense.net_price, expense.vat_rate)
        expense = replace(
            expense,
            vat_amount=totals.vat_amount,
            final_price=totals.final_price,
        )
        document = expense_to_record(expense)
        if expense.record_id is None:
            record_id = self._store.create(EXPENSES, document)
        else:
            record_id = expense.record_id
            self._store.update(EXPENSES, record_id, document)

        logger.info(
            "expense_saved",
            extra={"expense_id": record_id, "company": expense.company},
        )
        return expense_from_record(self._store.get(EXPENSES, record_id), record_id)

    def delete_expense(self, expense_id: str) -> None:
        self._store.delete(EXPENSES, expense_id)
        logger.info("expense_deleted", extra={"expense_id": expense_id})
