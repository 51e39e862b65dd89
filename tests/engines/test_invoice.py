"""Tests for invoice totals."""

from decimal import Decimal

from fabric_engines.invoice import compute_totals, expense_totals, line_total
from fabric_kernel.domain.money import display_amount


class TestComputeTotals:
    def test_single_line_at_24_percent(self, item):
        totals = compute_totals([item("A", 1, 3, price=10)], Decimal(24))

        assert totals.subtotal == Decimal(30)
        assert totals.vat_amount == Decimal("7.2")
        assert totals.final_price == Decimal("37.2")

    def test_multiple_lines_sum(self, item):
        items = [item("A", 1, 2, price="1.50"), item("A", 2, "0.5", price=4)]

        totals = compute_totals(items, Decimal(0))

        assert totals.subtotal == Decimal(5)
        assert totals.vat_amount == Decimal(0)
        assert totals.final_price == Decimal(5)

    def test_empty_list_is_all_zero(self):
        totals = compute_totals([], Decimal(24))

        assert totals.subtotal == 0
        assert totals.vat_amount == 0
        assert totals.final_price == 0

    def test_uses_line_totals_not_meters_times_price(self, item):
        """A line whose total was overridden is taken as-is."""
        line = item("A", 1, 3, price=10)
        discounted = type(line)(
            line.fabric_code, line.roll_id, line.sub_code, line.meters,
            line.price_per_meter, Decimal(25),
        )

        assert compute_totals([discounted], Decimal(0)).subtotal == Decimal(25)

    def test_full_precision_until_display(self, item):
        totals = compute_totals([item("A", 1, 1, price="0.333")], Decimal(24))

        assert totals.vat_amount == Decimal("0.07992")
        assert display_amount(totals.final_price) == Decimal("0.41")

    def test_accepts_integer_rate(self, item):
        assert compute_totals([item("A", 1, 1, price=100)], 13).vat_amount == Decimal(13)


class TestExpenseTotals:
    def test_net_plus_vat(self):
        totals = expense_totals(Decimal(200), Decimal(24))

        assert totals.subtotal == Decimal(200)
        assert totals.vat_amount == Decimal(48)
        assert totals.final_price == Decimal(248)


def test_line_total():
    assert line_total(Decimal("2.5"), Decimal(4)) == Decimal(10)
