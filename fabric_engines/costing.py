"""
fabric_engines.costing -- Weighted average cost of a fabric.

Responsibility:
    Derive one defensible unit cost for stock that has no single purchase
    price.  Every purchase invoice line for the fabric is price evidence, and
    so is every roll whose price was entered by hand.  The evidence is pooled
    by quantity:

        cost = sum(meters * price) / sum(meters)

Architecture position:
    Engines -- pure calculation layer, zero I/O.  May only import
    fabric_kernel.domain and fabric_kernel.logging_config.

Invariants enforced:
    - No date filtering: every purchase ever recorded counts.  Date ranges
      are a display concern applied to totals, never to costing.
    - Rolls without a manual price contribute no evidence; they are
      priced by the result.
    - Order independence: the result is a pair of sums, so reordering
      purchases, items or rolls cannot change it.
    - Never negative for non-negative inputs; exactly zero without evidence.
    - No caching.  Each call reflects the purchases and rolls passed in.

Failure modes:
    None.  Missing fabric, empty history and zero meters all yield 0.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from fabric_kernel.domain.money import ZERO, safe_div
from fabric_kernel.domain.records import Fabric, Purchase, Roll
from fabric_kernel.logging_config import get_logger

logger = get_logger("engines.costing")


def find_fabric(fabric_code: str, fabrics: Iterable[Fabric]) -> Fabric | None:
    """First fabric whose main code matches, or None."""
    for fabric in fabrics:
        if fabric.main_code == fabric_code:
            return fabric
    return None


def _pooled_average(
    fabric_code: str,
    purchases: Iterable[Purchase],
    fabrics: Iterable[Fabric],
    sub_code: str | None,
) -> Decimal:
    total_value = ZERO
    total_meters = ZERO

    for purchase in purchases:
        for item in purchase.items:
            if item.fabric_code != fabric_code:
                continue
            if sub_code is not None and item.sub_code != sub_code:
                continue
            total_value += item.meters * item.price_per_meter
            total_meters += item.meters

    fabric = find_fabric(fabric_code, fabrics)
    if fabric is not None:
        for roll in fabric.rolls:
            if not roll.has_manual_price:
                continue
            if sub_code is not None and roll.sub_code != sub_code:
                continue
            meters = roll.evidence_meters
            total_value += meters * roll.price
            total_meters += meters

    if total_meters <= ZERO:
        return ZERO
    return safe_div(total_value, total_meters)


def weighted_average_cost(
    fabric_code: str,
    purchases: Iterable[Purchase],
    fabrics: Iterable[Fabric],
) -> Decimal:
    """
    Fabric-wide weighted average unit cost.

    Args:
        fabric_code: The fabric's main code.
        purchases: Full purchase history (any date).
        fabrics: Current fabrics; only the matching fabric's manually priced
            rolls are read.

    Returns:
        Average cost per meter, or ``Decimal(0)`` when there is no evidence.
    """
    return _pooled_average(fabric_code, purchases, fabrics, sub_code=None)


def subcode_average_cost(
    fabric_code: str,
    sub_code: str,
    purchases: Iterable[Purchase],
    fabrics: Iterable[Fabric],
) -> Decimal:
    """Weighted average restricted to evidence for one sub-batch of a fabric."""
    return _pooled_average(fabric_code, purchases, fabrics, sub_code=sub_code)


def roll_unit_price(roll: Roll, average_cost: Decimal) -> Decimal:
    """A roll's manual price when it has one, else the supplied average."""
    return roll.price if roll.has_manual_price else average_cost
