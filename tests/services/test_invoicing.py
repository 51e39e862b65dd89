"""Tests for InvoiceService."""

from dataclasses import replace
from decimal import Decimal

import pytest

from fabric_services.invoicing import InvoiceService, purchase_line
from fabric_services.snapshot import load_snapshot
from fabric_services.store import EXPENSES, FABRICS, PURCHASES


@pytest.fixture
def invoices(store):
    return InvoiceService(store)


class TestPurchases:
    def test_save_computes_totals(self, invoices):
        purchase = invoices.new_purchase(
            "Mill", "2026-01-02",
            (purchase_line("A", "A-1", "10", "5"), purchase_line("A", "A-1", 5, 8)),
            invoice_no="P-001",
        )

        saved = invoices.save_purchase(purchase)

        assert saved.record_id is not None
        assert saved.subtotal == Decimal(90)
        assert saved.vat_amount == Decimal("21.6")
        assert saved.final_price == Decimal("111.6")
        assert saved.items[1].total_price == Decimal(40)

    def test_edit_overwrites(self, invoices, store):
        saved = invoices.save_purchase(
            invoices.new_purchase("Mill", "2026-01-02", (purchase_line("A", "A-1", 10, 5),))
        )

        edited = invoices.save_purchase(
            replace(saved, items=(purchase_line("A", "A-1", 10, 6),), vat_rate=Decimal(0))
        )

        assert edited.subtotal == Decimal(60)
        assert edited.final_price == Decimal(60)
        assert len(store.list(PURCHASES)) == 1

    def test_purchase_never_touches_stock(self, invoices, store):
        store.create(FABRICS, {"mainCode": "A", "rolls": []})

        invoices.save_purchase(
            invoices.new_purchase("Mill", "2026-01-02", (purchase_line("A", "A-1", 10, 5),))
        )

        assert load_snapshot(store).fabric("A").rolls == ()

    def test_delete(self, invoices, store):
        saved = invoices.save_purchase(invoices.new_purchase("Mill", "2026-01-02"))

        invoices.delete_purchase(saved.record_id)

        assert store.list(PURCHASES) == []

    def test_explicit_vat_rate(self, invoices):
        assert invoices.new_purchase("Mill", "2026-01-02", vat_rate="13").vat_rate == Decimal(13)


class TestExpenses:
    def test_save_single_line(self, invoices, store):
        saved = invoices.save_expense(
            invoices.new_expense("Landlord", "2026-01-31", "Rent", "200")
        )

        assert saved.vat_amount == Decimal(48)
        assert saved.final_price == Decimal(248)
        assert store.get(EXPENSES, saved.record_id)["items"][0]["description"] == "Rent"

    def test_delete(self, invoices, store):
        saved = invoices.save_expense(invoices.new_expense("Landlord", "2026-01-31", "Rent", 200))

        invoices.delete_expense(saved.record_id)

        assert store.list(EXPENSES) == []

    def test_custom_default_rate(self, store):
        service = InvoiceService(store, default_vat_rate=Decimal(13))

        assert service.new_expense("X", "2026-01-01", "Paper", 10).vat_rate == Decimal(13)
