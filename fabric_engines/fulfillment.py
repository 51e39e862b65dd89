"""
fabric_engines.fulfillment -- Sales order lifecycle and stock deduction.

Responsibility:
    Decide, for every order save or status change, whether stock must be
    deducted, and compute the fabrics state that results.  Deduction is a
    one-time event per order: it happens on the first entry into Completed
    and never again.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The coordinator proposes
    a new order record and a new fabrics tuple; fabric_services persists
    them (fabrics first, then the order).

Lifecycle:
    (creation) --+--> Pending <----+
                 |       |         |
                 |       v         |
                 +--> Completed ---+--> Cancelled
                 |                           |
                 +---------------------------+

    Every transition between the three states is allowed.  Entering
    Completed from creation, Pending or Cancelled carries DEDUCT_STOCK; all
    other transitions carry no effect.  DEDUCT_STOCK only runs while the
    order's ``stock_deducted`` flag is false, so Completed -> Cancelled ->
    Completed deducts once.

Invariants enforced:
    - Roll meters never go negative; over-deduction clamps at zero.
    - A line never adds stock: negative meters deduct nothing.
    - Cancelling never restocks.  Editing a Completed order never touches
      stock.  Deleting an order never restocks.
    - Items naming an unknown fabric or roll are skipped, never raised.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from fabric_engines.invoice import compute_totals
from fabric_kernel.domain.money import ZERO
from fabric_kernel.domain.records import Fabric, Order, OrderItem, OrderStatus
from fabric_kernel.logging_config import get_logger

logger = get_logger("engines.fulfillment")


class TransitionEffect(str, Enum):
    """Side effect attached to an order status transition."""

    NONE = "none"
    DEDUCT_STOCK = "deduct_stock"


@dataclass(frozen=True)
class Transition:
    """A permitted status change. ``from_status`` is None on creation."""

    from_status: OrderStatus | None
    to_status: OrderStatus
    effect: TransitionEffect = TransitionEffect.NONE


@dataclass(frozen=True)
class Workflow:
    """A state machine definition."""

    name: str
    description: str
    states: tuple[OrderStatus, ...]
    transitions: tuple[Transition, ...]

    def effect(
        self, from_status: OrderStatus | None, to_status: OrderStatus
    ) -> TransitionEffect:
        for transition in self.transitions:
            if (
                transition.from_status == from_status
                and transition.to_status == to_status
            ):
                return transition.effect
        return TransitionEffect.NONE


def _transitions() -> tuple[Transition, ...]:
    sources: tuple[OrderStatus | None, ...] = (None, *OrderStatus)
    transitions = []
    for source in sources:
        for target in OrderStatus:
            deducts = (
                target is OrderStatus.COMPLETED
                and source is not OrderStatus.COMPLETED
            )
            transitions.append(
                Transition(
                    source,
                    target,
                    TransitionEffect.DEDUCT_STOCK if deducts else TransitionEffect.NONE,
                )
            )
    return tuple(transitions)


ORDER_WORKFLOW = Workflow(
    name="sales_order",
    description="Sales order fulfillment",
    states=tuple(OrderStatus),
    transitions=_transitions(),
)


# -----------------------------------------------------------------------------
# Stock deduction
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class AppliedLine:
    """A deduction that found its roll."""

    fabric_code: str
    roll_id: int
    requested: Decimal
    meters_before: Decimal
    meters_after: Decimal

    @property
    def clamped(self) -> bool:
        return self.requested > self.meters_before


@dataclass(frozen=True)
class SkippedLine:
    """An order item whose fabric or roll no longer exists."""

    item: OrderItem
    reason: str


@dataclass(frozen=True)
class DeductionResult:
    """Outcome of deducting an order's items from stock."""

    fabrics: tuple[Fabric, ...]
    applied: tuple[AppliedLine, ...] = ()
    skipped: tuple[SkippedLine, ...] = ()
    changed_codes: frozenset[str] = frozenset()

    @property
    def changed_fabrics(self) -> tuple[Fabric, ...]:
        return tuple(f for f in self.fabrics if f.main_code in self.changed_codes)


def _index_of(fabrics: Sequence[Fabric], fabric_code: str) -> int | None:
    for index, fabric in enumerate(fabrics):
        if fabric.main_code == fabric_code:
            return index
    return None


def deduct_stock(
    fabrics: Iterable[Fabric], items: Iterable[OrderItem]
) -> DeductionResult:
    """
    Subtract each item's meters from the roll it names.

    Items are applied in order, so two lines cut from the same roll both
    count.  Each roll is clamped at zero and a negative line takes nothing.

    Args:
        fabrics: Current fabrics. Not modified.
        items: Order lines to deduct.

    Returns:
        DeductionResult with the new fabrics tuple.
    """
    working = list(fabrics)
    applied: list[AppliedLine] = []
    skipped: list[SkippedLine] = []
    changed: set[str] = set()

    for item in items:
        index = _index_of(working, item.fabric_code)
        if index is None:
            skipped.append(SkippedLine(item, "fabric_not_found"))
            logger.info(
                "deduction_line_skipped",
                extra={
                    "fabric_code": item.fabric_code,
                    "roll_id": item.roll_id,
                    "reason": "fabric_not_found",
                },
            )
            continue

        fabric = working[index]
        roll = fabric.find_roll(item.roll_id) if item.roll_id is not None else None
        if roll is None:
            skipped.append(SkippedLine(item, "roll_not_found"))
            logger.info(
                "deduction_line_skipped",
                extra={
                    "fabric_code": item.fabric_code,
                    "roll_id": item.roll_id,
                    "reason": "roll_not_found",
                },
            )
            continue

        taken = max(ZERO, item.meters)
        updated = roll.with_meters(roll.meters - taken)
        rolls = tuple(updated if r is roll else r for r in fabric.rolls)
        working[index] = fabric.with_rolls(rolls)
        changed.add(fabric.main_code)
        applied.append(
            AppliedLine(
                fabric_code=fabric.main_code,
                roll_id=roll.roll_id,
                requested=taken,
                meters_before=roll.meters,
                meters_after=updated.meters,
            )
        )

    return DeductionResult(
        fabrics=tuple(working),
        applied=tuple(applied),
        skipped=tuple(skipped),
        changed_codes=frozenset(changed),
    )


# -----------------------------------------------------------------------------
# Coordinator
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class FulfillmentResult:
    """The order and fabrics state to persist after a save or status change."""

    order: Order
    fabrics: tuple[Fabric, ...]
    effect: TransitionEffect = TransitionEffect.NONE
    deduction: DeductionResult | None = None

    @property
    def stock_changed(self) -> bool:
        return self.deduction is not None and bool(self.deduction.changed_codes)

    @property
    def changed_fabrics(self) -> tuple[Fabric, ...]:
        if self.deduction is None:
            return ()
        return self.deduction.changed_fabrics


class FulfillmentCoordinator:
    """
    Applies the order workflow to saves and status changes.

    Never writes.  Callers persist ``result.changed_fabrics`` before
    ``result.order``.
    """

    def __init__(self, workflow: Workflow = ORDER_WORKFLOW):
        self._workflow = workflow

    def save(
        self,
        order: Order,
        previous: Order | None,
        fabrics: Iterable[Fabric],
    ) -> FulfillmentResult:
        """Create (``previous is None``) or edit an order."""
        totals = compute_totals(order.items, order.vat_rate)
        already = order.stock_deducted or (
            previous is not None and previous.stock_deducted
        )
        order = replace(
            order,
            subtotal=totals.subtotal,
            vat_amount=totals.vat_amount,
            final_price=totals.final_price,
            stock_deducted=already,
        )
        previous_status = previous.status if previous is not None else None
        return self._apply(order, previous_status, fabrics)

    def change_status(
        self,
        order: Order,
        new_status: OrderStatus,
        fabrics: Iterable[Fabric],
    ) -> FulfillmentResult:
        """Move a persisted order to ``new_status``."""
        previous_status = order.status
        return self._apply(
            replace(order, status=OrderStatus(new_status)), previous_status, fabrics
        )

    def delete(self, order: Order) -> TransitionEffect:
        """Deleting an order has no stock effect at any status."""
        if order.stock_deducted:
            logger.warning(
                "order_deleted_without_restock",
                extra={
                    "order_id": order.record_id,
                    "invoice_no": order.invoice_no,
                    "status": order.status.value,
                },
            )
        return TransitionEffect.NONE

    def _apply(
        self,
        order: Order,
        previous_status: OrderStatus | None,
        fabrics: Iterable[Fabric],
    ) -> FulfillmentResult:
        effect = self._workflow.effect(previous_status, order.status)

        if effect is not TransitionEffect.DEDUCT_STOCK:
            return FulfillmentResult(order=order, fabrics=tuple(fabrics), effect=effect)

        if order.stock_deducted:
            logger.info(
                "stock_deduction_already_applied",
                extra={
                    "order_id": order.record_id,
                    "from_status": previous_status.value if previous_status else None,
                },
            )
            return FulfillmentResult(
                order=order, fabrics=tuple(fabrics), effect=TransitionEffect.NONE
            )

        deduction = deduct_stock(fabrics, order.items)
        logger.info(
            "stock_deducted",
            extra={
                "order_id": order.record_id,
                "from_status": previous_status.value if previous_status else None,
                "lines_applied": len(deduction.applied),
                "lines_skipped": len(deduction.skipped),
                "fabrics_changed": sorted(deduction.changed_codes),
            },
        )
        return FulfillmentResult(
            order=replace(order, stock_deducted=True),
            fabrics=deduction.fabrics,
            effect=effect,
            deduction=deduction,
        )
