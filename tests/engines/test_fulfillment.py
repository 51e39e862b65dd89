"""
Tests for order fulfillment and stock deduction.

Covers:
- Transition table
- deduct_stock: clamping, skipped lines, repeated rolls, immutability
- Coordinator: create, edit, change_status, one-time deduction
- Logging of skipped lines and delete-without-restock
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from fabric_engines.fulfillment import (
    ORDER_WORKFLOW,
    FulfillmentCoordinator,
    TransitionEffect,
    deduct_stock,
)
from fabric_kernel.domain.records import Fabric, Order, OrderStatus

PENDING = OrderStatus.PENDING
COMPLETED = OrderStatus.COMPLETED
CANCELLED = OrderStatus.CANCELLED


def meters_of(fabrics, code, roll_id):
    for fabric in fabrics:
        if fabric.main_code == code:
            return fabric.find_roll(roll_id).meters
    raise AssertionError(f"no fabric {code}")


class TestTransitionTable:
    @pytest.mark.parametrize(
        "source, target, expected",
        [
            (None, PENDING, TransitionEffect.NONE),
            (None, COMPLETED, TransitionEffect.DEDUCT_STOCK),
            (None, CANCELLED, TransitionEffect.NONE),
            (PENDING, PENDING, TransitionEffect.NONE),
            (PENDING, COMPLETED, TransitionEffect.DEDUCT_STOCK),
            (PENDING, CANCELLED, TransitionEffect.NONE),
            (COMPLETED, PENDING, TransitionEffect.NONE),
            (COMPLETED, COMPLETED, TransitionEffect.NONE),
            (COMPLETED, CANCELLED, TransitionEffect.NONE),
            (CANCELLED, PENDING, TransitionEffect.NONE),
            (CANCELLED, COMPLETED, TransitionEffect.DEDUCT_STOCK),
            (CANCELLED, CANCELLED, TransitionEffect.NONE),
        ],
    )
    def test_effect(self, source, target, expected):
        assert ORDER_WORKFLOW.effect(source, target) is expected

    def test_every_transition_is_defined(self):
        assert len(ORDER_WORKFLOW.transitions) == 12


class TestDeductStock:
    def test_subtracts_meters(self, fabric_a, item):
        result = deduct_stock([fabric_a], [item("A", 1, 3)])

        assert meters_of(result.fabrics, "A", 1) == Decimal(17)
        assert result.changed_codes == frozenset({"A"})
        assert len(result.applied) == 1
        assert not result.applied[0].clamped

    def test_over_deduction_clamps_at_zero(self, fabric_a, item):
        """A 20 m roll sold 25 m ends at 0, not -5."""
        result = deduct_stock([fabric_a], [item("A", 1, 25)])

        assert meters_of(result.fabrics, "A", 1) == Decimal(0)
        assert result.applied[0].clamped

    def test_negative_line_adds_no_stock(self, fabric_a, item):
        result = deduct_stock([fabric_a], [item("A", 1, -5)])

        assert meters_of(result.fabrics, "A", 1) == Decimal(20)
        assert result.applied[0].requested == Decimal(0)

    def test_input_fabrics_untouched(self, fabric_a, item):
        deduct_stock([fabric_a], [item("A", 1, 3)])

        assert fabric_a.find_roll(1).meters == Decimal(20)

    def test_lines_on_same_roll_accumulate(self, fabric_a, item):
        result = deduct_stock([fabric_a], [item("A", 1, 5), item("A", 1, 4)])

        assert meters_of(result.fabrics, "A", 1) == Decimal(11)

    def test_missing_fabric_skipped(self, fabric_a, item, captured_logs):
        result = deduct_stock([fabric_a], [item("Z", 1, 3)])

        assert result.fabrics == (fabric_a,)
        assert result.skipped[0].reason == "fabric_not_found"
        assert result.changed_codes == frozenset()
        logs = captured_logs()
        assert any(
            r["message"] == "deduction_line_skipped" and r["reason"] == "fabric_not_found"
            for r in logs
        )

    def test_missing_roll_skipped(self, fabric_a, item):
        result = deduct_stock([fabric_a], [item("A", 99, 3), item("A", None, 3)])

        assert [s.reason for s in result.skipped] == ["roll_not_found", "roll_not_found"]
        assert meters_of(result.fabrics, "A", 1) == Decimal(20)

    def test_other_fabrics_untouched(self, fabric_a, roll, item):
        other = Fabric("B", rolls=(roll(7, 40),))

        result = deduct_stock([fabric_a, other], [item("A", 1, 2)])

        assert result.fabrics[1] is other
        assert result.changed_fabrics == (result.fabrics[0],)


class TestCoordinatorSave:
    def setup_method(self):
        self.coordinator = FulfillmentCoordinator()

    def test_create_completed_deducts_and_totals(self, fabric_a, item):
        """3 m at 10 with 24% VAT: 30 / 7.2 / 37.2 and the roll loses 3 m."""
        order = Order(
            customer="Fashion House",
            date="2026-01-05",
            items=(item("A", 1, 3, price=10),),
            vat_rate=Decimal(24),
            status=COMPLETED,
        )

        result = self.coordinator.save(order, None, [fabric_a])

        assert result.order.subtotal == Decimal(30)
        assert result.order.vat_amount == Decimal("7.2")
        assert result.order.final_price == Decimal("37.2")
        assert result.order.stock_deducted is True
        assert result.effect is TransitionEffect.DEDUCT_STOCK
        assert meters_of(result.fabrics, "A", 1) == Decimal(17)

    def test_create_pending_leaves_stock(self, fabric_a, item):
        order = Order("C", "2026-01-05", items=(item("A", 1, 3),))

        result = self.coordinator.save(order, None, [fabric_a])

        assert not result.stock_changed
        assert result.order.stock_deducted is False
        assert result.fabrics == (fabric_a,)

    def test_edit_pending_to_completed_deducts(self, fabric_a, item):
        previous = Order("C", "2026-01-05", items=(item("A", 1, 3),), record_id="o1")
        edited = replace(previous, status=COMPLETED)

        result = self.coordinator.save(edited, previous, [fabric_a])

        assert meters_of(result.fabrics, "A", 1) == Decimal(17)

    def test_edit_completed_order_never_mutates_stock(self, fabric_a, item):
        previous = Order(
            "C", "2026-01-05", items=(item("A", 1, 3),),
            status=COMPLETED, stock_deducted=True, record_id="o1",
        )
        edited = replace(previous, items=(item("A", 1, 10),), stock_deducted=False)

        result = self.coordinator.save(edited, previous, [fabric_a])

        assert result.fabrics == (fabric_a,)
        assert result.order.stock_deducted is True
        assert result.order.subtotal == Decimal(100)

    def test_edit_cancelled_back_to_completed_after_deduction(self, fabric_a, item):
        previous = Order(
            "C", "2026-01-05", items=(item("A", 1, 3),),
            status=CANCELLED, stock_deducted=True, record_id="o1",
        )

        result = self.coordinator.save(replace(previous, status=COMPLETED), previous, [fabric_a])

        assert not result.stock_changed


class TestCoordinatorChangeStatus:
    def setup_method(self):
        self.coordinator = FulfillmentCoordinator()

    def test_completed_twice_deducts_once(self, fabric_a, item):
        order = Order("C", "2026-01-05", items=(item("A", 1, 3),), record_id="o1")

        first = self.coordinator.change_status(order, COMPLETED, [fabric_a])
        second = self.coordinator.change_status(first.order, COMPLETED, first.fabrics)

        assert meters_of(second.fabrics, "A", 1) == Decimal(17)
        assert not second.stock_changed

    def test_cancel_after_completion_does_not_restock(self, fabric_a, item):
        order = Order("C", "2026-01-05", items=(item("A", 1, 3),), status=COMPLETED)
        created = self.coordinator.save(order, None, [fabric_a])

        cancelled = self.coordinator.change_status(created.order, CANCELLED, created.fabrics)

        assert cancelled.fabrics == created.fabrics
        assert cancelled.order.status is CANCELLED
        assert cancelled.order.stock_deducted is True

    def test_completed_cancelled_completed_deducts_once(self, fabric_a, item):
        order = Order("C", "2026-01-05", items=(item("A", 1, 3),), record_id="o1")

        state = self.coordinator.change_status(order, COMPLETED, [fabric_a])
        state = self.coordinator.change_status(state.order, CANCELLED, state.fabrics)
        state = self.coordinator.change_status(state.order, COMPLETED, state.fabrics)

        assert meters_of(state.fabrics, "A", 1) == Decimal(17)

    def test_cancelled_before_completion_then_completed_deducts(self, fabric_a, item):
        order = Order("C", "2026-01-05", items=(item("A", 1, 3),), status=CANCELLED)

        result = self.coordinator.change_status(order, COMPLETED, [fabric_a])

        assert meters_of(result.fabrics, "A", 1) == Decimal(17)

    def test_already_applied_is_logged(self, fabric_a, item, captured_logs):
        order = Order(
            "C", "2026-01-05", items=(item("A", 1, 3),),
            status=PENDING, stock_deducted=True, record_id="o1",
        )

        self.coordinator.change_status(order, COMPLETED, [fabric_a])

        assert any(r["message"] == "stock_deduction_already_applied" for r in captured_logs())


class TestCoordinatorDelete:
    def test_deleting_deducted_order_warns(self, item, captured_logs):
        order = Order(
            "C", "2026-01-05", items=(item("A", 1, 3),),
            status=COMPLETED, stock_deducted=True, record_id="o1",
        )

        effect = FulfillmentCoordinator().delete(order)

        assert effect is TransitionEffect.NONE
        warnings = [r for r in captured_logs() if r["message"] == "order_deleted_without_restock"]
        assert warnings and warnings[0]["level"] == "WARNING"

    def test_deleting_pending_order_is_silent(self, item, captured_logs):
        FulfillmentCoordinator().delete(Order("C", "2026-01-05", items=(item("A", 1, 3),)))

        assert not any(
            r["message"] == "order_deleted_without_restock" for r in captured_logs()
        )
