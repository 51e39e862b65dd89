"""Tests for InventoryService."""

from decimal import Decimal

import pytest

from fabric_engines.valuation import ValuationMethod
from fabric_kernel.exceptions import RecordNotFoundError
from fabric_services.inventory_service import InventoryService
from fabric_services.invoicing import InvoiceService, purchase_line
from fabric_services.store import FABRICS


@pytest.fixture
def inventory(store, deterministic_clock):
    return InventoryService(store, clock=deterministic_clock)


class TestFabrics:
    def test_add_fabric(self, inventory, store):
        fabric = inventory.add_fabric("100", name="Cotton", color="Navy")

        assert fabric.record_id is not None
        assert fabric.rolls == ()
        assert store.get(FABRICS, fabric.record_id)["mainCode"] == "100"

    def test_delete_fabric(self, inventory, store):
        fabric = inventory.add_fabric("100")

        inventory.delete_fabric(fabric.record_id)

        assert store.list(FABRICS) == []


class TestRolls:
    def test_add_roll_assigns_id_and_date(self, inventory):
        fabric = inventory.add_fabric("100")

        roll = inventory.add_roll(fabric.record_id, "100-1", "150", location="A1")

        assert roll.roll_id == 1
        assert roll.date_added == "2026-01-15"
        assert roll.meters == Decimal(150)
        assert roll.original_meters == Decimal(150)
        assert inventory.get_fabric(fabric.record_id).rolls == (roll,)

    def test_roll_ids_continue_across_fabrics(self, inventory):
        a = inventory.add_fabric("100")
        b = inventory.add_fabric("101")

        inventory.add_roll(a.record_id, "100-1", 10)
        inventory.add_roll(a.record_id, "100-1", 10)
        third = inventory.add_roll(b.record_id, "101-1", 10)

        assert third.roll_id == 3

    def test_manual_price_from_text(self, inventory):
        fabric = inventory.add_fabric("100")

        roll = inventory.add_roll(fabric.record_id, "100-1", 10, price="€ 6,50")

        assert roll.price == Decimal("6.50")

    def test_delete_roll(self, inventory):
        fabric = inventory.add_fabric("100")
        first = inventory.add_roll(fabric.record_id, "100-1", 10)
        second = inventory.add_roll(fabric.record_id, "100-1", 20)

        inventory.delete_roll(fabric.record_id, first.roll_id)

        assert inventory.get_fabric(fabric.record_id).rolls == (second,)

    def test_add_roll_to_missing_fabric(self, inventory):
        with pytest.raises(RecordNotFoundError):
            inventory.add_roll("nope", "x", 1)


class TestStockValue:
    def test_value_from_purchases(self, inventory, store):
        fabric = inventory.add_fabric("A")
        inventory.add_roll(fabric.record_id, "A-1", 20)
        invoices = InvoiceService(store)
        invoices.save_purchase(invoices.new_purchase("Mill", "2026-01-01", (purchase_line("A", "A-1", 10, 5),)))
        invoices.save_purchase(invoices.new_purchase("Mill", "2026-01-02", (purchase_line("A", "A-1", 5, 8),)))

        value = inventory.stock_value()

        assert value == Decimal(120)

    def test_subcode_method(self, store, deterministic_clock):
        inventory = InventoryService(
            store, clock=deterministic_clock, valuation_method=ValuationMethod.SUBCODE_AVERAGE
        )
        fabric = inventory.add_fabric("A")
        inventory.add_roll(fabric.record_id, "A-1", 30)
        inventory.add_roll(fabric.record_id, "A-2", 10)
        invoices = InvoiceService(store)
        invoices.save_purchase(
            invoices.new_purchase(
                "Mill", "2026-01-01",
                (purchase_line("A", "A-1", 10, 4), purchase_line("A", "A-2", 10, 8)),
            )
        )

        assert inventory.stock_value() == Decimal(200)
        assert inventory.stock_value(ValuationMethod.FABRIC_AVERAGE) == Decimal(240)

    def test_empty_warehouse(self, inventory):
        assert inventory.stock_value() == Decimal(0)
