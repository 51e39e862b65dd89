"""
fabric_services.sales_service -- Sales orders and their stock effect.

Responsibility:
    Persist sales orders and apply the stock deduction proposed by
    fabric_engines.fulfillment.FulfillmentCoordinator.

Architecture position:
    Services -- stateful shell around the fulfillment coordinator.

Invariants enforced:
    - Changed fabrics are written BEFORE the order.  If a fabric write
      fails the order is not saved as Completed, and the deduction has not
      been recorded as done.
    - Each changed fabric's ``rolls`` array is written whole.
    - Deleting an order never restocks.

Failure modes:
    - RecordNotFoundError when editing, changing or deleting an unknown
      order id.
    - Store errors during the fabric writes propagate; rolls already written
      stay written (no cross-document transaction).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from decimal import Decimal

from fabric_engines.fulfillment import FulfillmentCoordinator, FulfillmentResult
from fabric_engines.invoice import line_total
from fabric_kernel.domain.normalize import (
    fabric_from_record,
    order_from_record,
    order_to_record,
    parse_decimal,
    parse_int,
    rolls_to_records,
)
from fabric_kernel.domain.records import ContactKind, Fabric, Order, OrderItem, OrderStatus
from fabric_kernel.logging_config import LogContext, get_logger
from fabric_services.contacts import ContactService
from fabric_services.invoicing import DEFAULT_VAT_RATE
from fabric_services.store import FABRICS, ORDERS, RecordStore

logger = get_logger("services.sales")


def order_line(fabric: Fabric, roll_id, meters, price_per_meter) -> OrderItem:
    """Build an order line cut from one of ``fabric``'s rolls."""
    roll_id = parse_int(roll_id)
    roll = fabric.find_roll(roll_id) if roll_id is not None else None
    meters = parse_decimal(meters)
    price = parse_decimal(price_per_meter)
    return OrderItem(
        fabric_code=fabric.main_code,
        roll_id=roll_id,
        sub_code=roll.sub_code if roll is not None else "",
        meters=meters,
        price_per_meter=price,
        total_price=line_total(meters, price),
    )


class SalesOrderService:
    """
    Create, edit, re-status and delete sales orders.

    Usage:
        service = SalesOrderService(store)
        order = service.new_order("Fashion House", "2026-01-05", items,
                                  status=OrderStatus.COMPLETED)
        saved = service.save_order(order)
        service.change_status(saved.record_id, OrderStatus.CANCELLED)
    """

    def __init__(
        self,
        store: RecordStore,
        coordinator: FulfillmentCoordinator | None = None,
        default_vat_rate: Decimal = DEFAULT_VAT_RATE,
    ):
        self._store = store
        self._coordinator = coordinator or FulfillmentCoordinator()
        self._default_vat_rate = Decimal(default_vat_rate)
        self._contacts = ContactService(store)

    def new_order(
        self,
        customer: str,
        date: str,
        items: Iterable[OrderItem] = (),
        vat_rate=None,
        status: OrderStatus = OrderStatus.PENDING,
        invoice_no: str = "",
        vat_number: str = "",
    ) -> Order:
        """An unsaved order using the default VAT rate unless one is given."""
        return Order(
            customer=customer,
            date=date,
            items=tuple(items),
            vat_rate=self._default_vat_rate if vat_rate is None else parse_decimal(vat_rate),
            status=OrderStatus(status),
            invoice_no=invoice_no,
            vat_number=vat_number,
        )

    def get_order(self, order_id: str) -> Order:
        return order_from_record(self._store.get(ORDERS, order_id), order_id)

    def save_order(self, order: Order) -> Order:
        """
        Insert (no ``record_id``) or edit an order.

        Totals are recomputed.  Stock is deducted when this save is the
        order's first entry into Completed.  An order without a VAT number
        takes the one on file for its customer.
        """
        if not order.vat_number:
            order = replace(
                order,
                vat_number=self._contacts.vat_number_for(ContactKind.CUSTOMER, order.customer),
            )

        previous = None
        if order.record_id is not None:
            previous = self.get_order(order.record_id)

        with LogContext.bind(order_id=order.record_id):
            result = self._coordinator.save(order, previous, self._fabrics())
            self._write_fabrics(result)

            document = order_to_record(result.order)
            if previous is None:
                record_id = self._store.create(ORDERS, document)
            else:
                record_id = previous.record_id
                self._store.update(ORDERS, record_id, document)

        logger.info(
            "order_saved",
            extra={
                "order_id": record_id,
                "status": result.order.status.value,
                "is_new": previous is None,
                "stock_changed": result.stock_changed,
            },
        )
        return self.get_order(record_id)

    def change_status(self, order_id: str, new_status: OrderStatus) -> Order:
        """Move an order to ``new_status``, deducting stock at most once."""
        order = self.get_order(order_id)
        with LogContext.bind(order_id=order_id):
            result = self._coordinator.change_status(order, new_status, self._fabrics())
            self._write_fabrics(result)
            self._store.update(
                ORDERS,
                order_id,
                {
                    "status": result.order.status.value,
                    "stockDeducted": result.order.stock_deducted,
                },
            )
            logger.info(
                "order_status_changed",
                extra={
                    "from_status": order.status.value,
                    "to_status": result.order.status.value,
                    "stock_changed": result.stock_changed,
                },
            )
        return self.get_order(order_id)

    def delete_order(self, order_id: str) -> None:
        """Remove an order.  Stock already deducted is not returned."""
        order = self.get_order(order_id)
        with LogContext.bind(order_id=order_id):
            self._coordinator.delete(order)
            self._store.delete(ORDERS, order_id)
            logger.info("order_deleted", extra={"status": order.status.value})

    def _fabrics(self) -> tuple[Fabric, ...]:
        return tuple(
            fabric_from_record(record, record["id"])
            for record in self._store.list(FABRICS)
        )

    def _write_fabrics(self, result: FulfillmentResult) -> None:
        for fabric in result.changed_fabrics:
            self._store.update(
                FABRICS, fabric.record_id, {"rolls": rolls_to_records(fabric.rolls)}
            )
